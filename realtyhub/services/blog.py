"""
Blog posts and comments.
"""
import logging
import math
import re
import uuid
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Query, Session

from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import NotFound, ValidationError, Validator
from realtyhub.utils.slugs import slugify, unique_slug

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 150

_TAGS = re.compile(r"<[^>]+>")
_WORDS = re.compile(r"[A-Za-z'-]+")


def _plain_text(html: Optional[str]) -> str:
    return _TAGS.sub(" ", html or "")


def word_count(post: models.Post) -> int:
    return len(_WORDS.findall(_plain_text(post.content)))


def reading_time(post: models.Post) -> int:
    """Minutes to read at 200 words per minute, never less than one."""
    return max(1, math.ceil(word_count(post) / WORDS_PER_MINUTE))


def excerpt(post: models.Post) -> Optional[str]:
    if post.excerpt:
        return post.excerpt
    text = " ".join(_plain_text(post.content).split())
    if not text:
        return None
    if len(text) <= EXCERPT_LENGTH:
        return text
    return text[:EXCERPT_LENGTH].rstrip() + "..."


def is_published(post: models.Post) -> bool:
    if post.status != "published" or post.published_at is None:
        return False
    published_at = post.published_at
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=models.now_utc().tzinfo)
    return published_at <= models.now_utc()


def published(query: Query) -> Query:
    return query.filter(
        models.Post.status == "published",
        models.Post.published_at <= models.now_utc(),
    )


def list_published(db: Session, skip: int = 0, limit: int = 20) -> List[models.Post]:
    return (
        published(db.query(models.Post))
        .order_by(models.Post.is_sticky.desc(), models.Post.published_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_by_slug(db: Session, slug: str) -> models.Post:
    post = db.query(models.Post).filter(models.Post.slug == slug).first()
    if post is None:
        raise NotFound("Post not found")
    return post


# ---- post writes -----------------------------------------------------------------

def _resolve_tags(db: Session, team_id: uuid.UUID, names: Iterable[str]) -> List[models.Tag]:
    """Find or create the team's tags for ``names``; a tag is matched by slug within the team."""
    tags: List[models.Tag] = []
    for name in names:
        name = (name or "").strip()
        slug = slugify(name)
        if not slug:
            continue
        tag = (
            db.query(models.Tag)
            .filter(models.Tag.team_id == team_id, models.Tag.slug == slug)
            .first()
        )
        if tag is None:
            tag = models.Tag(team_id=team_id, name=name, slug=unique_slug(db, models.Tag, name, team_id=team_id))
            db.add(tag)
            db.flush()
        if tag not in tags:
            tags.append(tag)
    return tags


def create_post(db: Session, author: models.User, data: Dict[str, Any]) -> models.Post:
    v = Validator()
    if v.required("title", data.get("title")):
        v.max_length("title", data["title"], 255)
    v.validate()

    if data.get("category_id") is not None:
        if db.query(models.Category.id).filter(models.Category.id == data["category_id"]).first() is None:
            raise NotFound("Category not found")

    with transaction(db):
        post = models.Post(
            title=data["title"],
            slug=unique_slug(db, models.Post, data.get("slug") or data["title"]),
            excerpt=data.get("excerpt"),
            content=data.get("content"),
            category_id=data.get("category_id"),
            allow_comments=data.get("allow_comments", True),
            is_featured=data.get("is_featured", False),
            user_id=author.id,
            status="draft",
        )
        db.add(post)
        db.flush()
        if data.get("tags"):
            post.tags = _resolve_tags(db, post.team_id, data["tags"])
            db.flush()
    logger.info("post_created: %s slug=%s team=%s", post.id, post.slug, post.team_id)
    return post


def publish(db: Session, post: models.Post) -> models.Post:
    with transaction(db):
        post.status = "published"
        post.published_at = models.now_utc()
    return post


def unpublish(db: Session, post: models.Post) -> models.Post:
    with transaction(db):
        post.status = "draft"
        post.published_at = None
    return post


def increment_views(db: Session, post: models.Post) -> None:
    with transaction(db):
        post.views_count = models.Post.views_count + 1


def sync_tags(db: Session, post: models.Post, tag_ids: Iterable[uuid.UUID]) -> None:
    ids = list(tag_ids)
    with transaction(db):
        post.tags = db.query(models.Tag).filter(models.Tag.id.in_(ids)).all() if ids else []


def has_tag(post: models.Post, tag_id: uuid.UUID) -> bool:
    return any(t.id == tag_id for t in post.tags)


# ---- comments --------------------------------------------------------------------

def add_comment(db: Session, post: models.Post, data: Dict[str, Any], user: Optional[models.User] = None) -> models.Comment:
    """Create a pending comment; guests must leave a name and a valid email."""
    if not post.allow_comments:
        raise ValidationError.with_messages({"content": "Comments are disabled for this post."})

    v = Validator()
    if v.required("content", data.get("content")):
        v.max_length("content", data["content"], 5000)
    if user is None:
        if v.required("author_name", data.get("author_name"), label="name"):
            v.max_length("author_name", data["author_name"], 255, label="name")
        if v.required("author_email", data.get("author_email"), label="email"):
            v.email("author_email", data["author_email"])
    parent_id = data.get("parent_id")
    if parent_id is not None:
        parent = db.get(models.Comment, parent_id)
        v.add_if(parent is None or parent.post_id != post.id, "parent_id", "The selected parent comment is invalid.")
    v.validate()

    with transaction(db):
        comment = models.Comment(
            post_id=post.id,
            team_id=post.team_id,
            parent_id=parent_id,
            user_id=user.id if user else None,
            author_name=user.name if user else data.get("author_name"),
            author_email=user.email if user else data.get("author_email"),
            content=data["content"],
            status="pending",
        )
        db.add(comment)
        db.flush()
    return comment


def approve_comment(db: Session, comment: models.Comment, approver: models.User) -> models.Comment:
    if comment.status == "approved":
        return comment
    with transaction(db):
        comment.status = "approved"
        comment.approved_at = models.now_utc()
        comment.approved_by = approver.id
        comment.post.comments_count = models.Post.comments_count + 1
    return comment


def _withdraw(db: Session, comment: models.Comment, status: str) -> models.Comment:
    was_approved = comment.status == "approved"
    with transaction(db):
        comment.status = status
        comment.approved_at = None
        comment.approved_by = None
        if was_approved:
            comment.post.comments_count = models.Post.comments_count - 1
    return comment


def reject_comment(db: Session, comment: models.Comment) -> models.Comment:
    return _withdraw(db, comment, "rejected")


def mark_comment_as_spam(db: Session, comment: models.Comment) -> models.Comment:
    return _withdraw(db, comment, "spam")


def approved_comments(db: Session, post: models.Post) -> List[models.Comment]:
    return (
        db.query(models.Comment)
        .filter(models.Comment.post_id == post.id, models.Comment.status == "approved")
        .order_by(models.Comment.created_at)
        .all()
    )
