"""Slug helpers for URL-addressable records."""
from __future__ import annotations

import re
import unicodedata

from sqlalchemy.orm import Session

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s_]+")


def slugify(value: str) -> str:
    """Lowercase ASCII slug: ``"Hello, World!"`` -> ``"hello-world"``."""
    value = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    value = _NON_WORD.sub("", value).strip().lower()
    return _SEPARATORS.sub("-", value).strip("-")


def unique_slug(db: Session, model, source: str, exclude_id=None, team_id=None) -> str:
    """Return ``slug``, or ``slug-1``, ``slug-2``... if already taken on ``model``.

    With ``team_id`` only that team's rows count (tags, categories);
    otherwise uniqueness is checked across all teams (posts, properties).
    """
    base = slugify(source) or "item"
    slug = base
    counter = 1
    while True:
        query = (
            db.query(model.id)
            .filter(model.slug == slug)
            .execution_options(without_team_scope=True)
        )
        if team_id is not None:
            query = query.filter(model.team_id == team_id)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1
