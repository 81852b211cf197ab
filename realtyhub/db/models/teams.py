import uuid
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Index, CheckConstraint, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


class Team(Base):
    __tablename__ = 'teams'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Owner of the team; owners never have a team_user row of their own
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    personal_team = Column(Boolean, nullable=False, default=False)
    timezone = Column(String(255), nullable=True)
    language = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    owner = relationship('User', back_populates='owned_teams', foreign_keys=[user_id])
    memberships = relationship('TeamMembership', back_populates='team', cascade='all, delete-orphan')
    users = relationship('User', secondary='team_user', viewonly=True)
    invitations = relationship('TeamInvitation', back_populates='team', cascade='all, delete-orphan')

    __table_args__ = (
        Index('ix_teams_user_id', 'user_id'),
    )

    def has_user_with_email(self, email: str) -> bool:
        email = (email or '').strip().lower()
        if self.owner is not None and self.owner.email == email:
            return True
        return any(u.email == email for u in self.users)


class TeamMembership(Base):
    __tablename__ = 'team_user'
    team_id = Column(UUID(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), primary_key=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    role = Column(String(50), nullable=False, default='member')  # 'admin'|'editor'|'member'
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    team = relationship('Team', back_populates='memberships')
    user = relationship('User', back_populates='team_memberships')

    __table_args__ = (
        Index('ix_team_user_user_id', 'user_id'),
        CheckConstraint("role in ('admin','editor','member')", name='ck_team_user_role'),
    )


class TeamInvitation(Base):
    __tablename__ = 'team_invitations'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    team_id = Column(UUID(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default='member')
    invited_by_user_id = Column(UUID(as_uuid=True), ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)

    team = relationship('Team', back_populates='invitations')

    __table_args__ = (
        UniqueConstraint('team_id', 'email', name='uq_team_invitations_team_email'),
        Index('ix_team_invitations_email', 'email'),
    )
