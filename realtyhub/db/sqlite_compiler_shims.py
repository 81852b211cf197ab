"""SQLite compilation shims for PostgreSQL-specific SQLAlchemy types.

Installs a compiler for JSONB when the active dialect is SQLite so that
declarative metadata can be created in test runs that substitute an
in-memory SQLite database. JSONB operators are not emulated.

Usage: Imported for side-effects by realtyhub.db.models.
"""
from __future__ import annotations

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(element, compiler, **kw):  # pragma: no cover - trivial
    # Stored as TEXT-backed JSON; enough for storing and reading dicts back.
    return "JSON"
