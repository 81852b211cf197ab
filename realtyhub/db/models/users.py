import uuid
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Text, UniqueConstraint, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class User(Base):
    __tablename__ = 'users'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    # NULL for accounts that only ever signed in through a social provider
    password_hash = Column(Text, nullable=True)
    is_superadmin = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    current_team_id = Column(
        UUID(as_uuid=True),
        ForeignKey('teams.id', use_alter=True, name='fk_users_current_team_id', ondelete='SET NULL'),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    owned_teams = relationship('Team', back_populates='owner', foreign_keys='Team.user_id')
    team_memberships = relationship('TeamMembership', back_populates='user', cascade='all, delete-orphan')
    current_team = relationship('Team', foreign_keys=[current_team_id], post_update=True)
    roles = relationship('Role', secondary='model_has_roles', back_populates='users')
    permissions = relationship('Permission', secondary='model_has_permissions')
    social_accounts = relationship('SocialAccount', back_populates='user', cascade='all, delete-orphan')

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None


class SocialAccount(Base):
    __tablename__ = 'social_accounts'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    provider = Column(String(50), nullable=False)
    provider_id = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    # Use a non-reserved Python attribute name while keeping DB column name 'metadata'
    metadata_json = Column('metadata', JSONB, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    user = relationship('User', back_populates='social_accounts')

    __table_args__ = (
        UniqueConstraint('user_id', 'provider', name='uq_social_accounts_user_provider'),
        Index('ix_social_accounts_provider_provider_id', 'provider', 'provider_id'),
    )

    @property
    def avatar(self):
        return (self.metadata_json or {}).get('avatar')

    @property
    def username(self):
        meta = self.metadata_json or {}
        return meta.get('username') or meta.get('nickname')
