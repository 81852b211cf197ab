"""
Blog post and comment endpoints, scoped to the caller's active team.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.api.deps import get_current_team, get_current_user_context
from realtyhub.db import models, schemas
from realtyhub.db.database import get_db
from realtyhub.services import blog


router = APIRouter(prefix="/posts", tags=["posts"])


def _require(db: Session, user: models.User, permission: str) -> None:
    if not rbac.user_can(db, user, permission):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This action is unauthorized.")


def _post_payload(post: models.Post) -> schemas.Post:
    return schemas.Post(
        id=post.id,
        slug=post.slug,
        title=post.title,
        excerpt=blog.excerpt(post),
        content=post.content,
        category_id=post.category_id,
        allow_comments=post.allow_comments,
        is_featured=post.is_featured,
        status=post.status,
        team_id=post.team_id,
        user_id=post.user_id,
        published_at=post.published_at,
        views_count=post.views_count,
        comments_count=post.comments_count,
        reading_time=blog.reading_time(post),
        tags=sorted(t.name for t in post.tags),
        created_at=post.created_at,
    )


@router.get("/", response_model=List[schemas.Post])
def list_posts(
    skip: int = 0,
    limit: int = 20,
    db: Session = Depends(get_db),
    team: models.Team = Depends(get_current_team),
):
    return [_post_payload(p) for p in blog.list_published(db, skip=skip, limit=min(limit, 100))]


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.Post)
def create_post(
    payload: schemas.PostCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "create posts")
    return _post_payload(blog.create_post(db, user, payload.model_dump()))


@router.get("/{slug}", response_model=schemas.Post)
def get_post(
    slug: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    post = blog.get_by_slug(db, slug)
    if not blog.is_published(post) and post.user_id != user.id and not rbac.user_can(db, user, "edit posts"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    blog.increment_views(db, post)
    return _post_payload(post)


@router.post("/{slug}/publish", response_model=schemas.Post)
def publish_post(
    slug: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "publish posts")
    return _post_payload(blog.publish(db, blog.get_by_slug(db, slug)))


@router.post("/{slug}/unpublish", response_model=schemas.Post)
def unpublish_post(
    slug: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "publish posts")
    return _post_payload(blog.unpublish(db, blog.get_by_slug(db, slug)))


@router.get("/{slug}/comments", response_model=List[schemas.Comment])
def list_comments(
    slug: str,
    db: Session = Depends(get_db),
    team: models.Team = Depends(get_current_team),
):
    return blog.approved_comments(db, blog.get_by_slug(db, slug))


@router.post("/{slug}/comments", status_code=status.HTTP_201_CREATED, response_model=schemas.Comment)
def create_comment(
    slug: str,
    payload: schemas.CommentCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "create comments")
    post = blog.get_by_slug(db, slug)
    return blog.add_comment(db, post, payload.model_dump(), user=user)


@router.post("/comments/{comment_id}/approve", response_model=schemas.Comment)
def approve_comment(
    comment_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    team: models.Team = Depends(get_current_team),
):
    user, _ = user_context
    _require(db, user, "edit comments")
    comment = db.query(models.Comment).filter(models.Comment.id == comment_id).first()
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return blog.approve_comment(db, comment, user)
