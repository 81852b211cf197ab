import uuid
from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict


class PostBase(BaseModel):
    title: str
    excerpt: str | None = None
    content: str | None = None
    category_id: uuid.UUID | None = None
    allow_comments: bool = True
    is_featured: bool = False


class PostCreate(PostBase):
    slug: str | None = None
    tags: List[str] = []


class Post(PostBase):
    id: uuid.UUID
    slug: str
    status: str
    team_id: uuid.UUID
    user_id: uuid.UUID
    published_at: datetime | None = None
    views_count: int
    comments_count: int
    reading_time: int
    tags: List[str] = []
    created_at: datetime


class CommentCreate(BaseModel):
    content: str
    parent_id: uuid.UUID | None = None
    author_name: str | None = None
    author_email: str | None = None


class Comment(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    parent_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    author_name: str | None = None
    content: str
    status: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
