import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, Boolean, Integer, ForeignKey, Table, Index, CheckConstraint, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc
from ..team_scope import TeamOwnedMixin


post_tags = Table(
    'post_tag',
    Base.metadata,
    Column('post_id', UUID(as_uuid=True), ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', UUID(as_uuid=True), ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
    Column('created_at', DateTime(timezone=True), default=now_utc),
)


class Category(TeamOwnedMixin, Base):
    __tablename__ = 'categories'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    # Slugs are unique within a team
    __table_args__ = (UniqueConstraint('team_id', 'slug', name='uq_categories_team_slug'),)


class Tag(TeamOwnedMixin, Base):
    __tablename__ = 'tags'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    __table_args__ = (UniqueConstraint('team_id', 'slug', name='uq_tags_team_slug'),)


class Media(TeamOwnedMixin, Base):
    __tablename__ = 'media'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    filename = Column(String(255), nullable=False)
    path = Column(String(1024), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=False, default=0)
    alt_text = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)


class Post(TeamOwnedMixin, Base):
    __tablename__ = 'posts'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default='draft')  # draft|published|scheduled|archived
    published_at = Column(DateTime(timezone=True), nullable=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    allow_comments = Column(Boolean, nullable=False, default=True)
    is_sticky = Column(Boolean, nullable=False, default=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    category_id = Column(UUID(as_uuid=True), ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    featured_image_id = Column(UUID(as_uuid=True), ForeignKey('media.id', ondelete='SET NULL'), nullable=True)
    views_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    author = relationship('User')
    category = relationship('Category')
    featured_image = relationship('Media')
    tags = relationship('Tag', secondary=post_tags)
    comments = relationship('Comment', back_populates='post', cascade='all, delete-orphan')

    __table_args__ = (
        Index('ix_posts_status_published_at', 'status', 'published_at'),
        Index('ix_posts_category_id_status', 'category_id', 'status'),
        CheckConstraint("status in ('draft','published','scheduled','archived')", name='ck_posts_status'),
    )


class Comment(TeamOwnedMixin, Base):
    __tablename__ = 'comments'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(UUID(as_uuid=True), ForeignKey('posts.id', ondelete='CASCADE'), nullable=False)
    # Registered commenter; guests leave user_id NULL and fill author_name/email
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    parent_id = Column(UUID(as_uuid=True), ForeignKey('comments.id', ondelete='CASCADE'), nullable=True)
    author_name = Column(String(255), nullable=True)
    author_email = Column(String(255), nullable=True)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default='pending')  # pending|approved|rejected|spam
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)

    post = relationship('Post', back_populates='comments')
    user = relationship('User', foreign_keys=[user_id])
    parent = relationship('Comment', remote_side=[id], back_populates='replies')
    replies = relationship('Comment', back_populates='parent')

    __table_args__ = (
        Index('ix_comments_post_id_status', 'post_id', 'status'),
        CheckConstraint("status in ('pending','approved','rejected','spam')", name='ck_comments_status'),
    )
