import uuid
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, Table, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base, now_utc


role_has_permissions = Table(
    'role_has_permissions',
    Base.metadata,
    Column('role_id', UUID(as_uuid=True), ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    Column('permission_id', UUID(as_uuid=True), ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True),
)

model_has_roles = Table(
    'model_has_roles',
    Base.metadata,
    Column('user_id', UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('role_id', UUID(as_uuid=True), ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
)

model_has_permissions = Table(
    'model_has_permissions',
    Base.metadata,
    Column('user_id', UUID(as_uuid=True), ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
    Column('permission_id', UUID(as_uuid=True), ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True),
)


class Role(Base):
    __tablename__ = 'roles'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    guard_name = Column(String(50), nullable=False, default='web')
    # Default roles are owned by the ACL catalogue and managed by `acl:setup`
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    permissions = relationship('Permission', secondary=role_has_permissions, back_populates='roles')
    users = relationship('User', secondary=model_has_roles, back_populates='roles')

    __table_args__ = (
        UniqueConstraint('name', 'guard_name', name='uq_roles_name_guard'),
    )


class Permission(Base):
    __tablename__ = 'permissions'
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    group = Column(String(100), nullable=True)
    guard_name = Column(String(50), nullable=False, default='web')
    created_at = Column(DateTime(timezone=True), default=now_utc)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)

    roles = relationship('Role', secondary=role_has_permissions, back_populates='permissions')

    __table_args__ = (
        UniqueConstraint('name', 'guard_name', name='uq_permissions_name_guard'),
    )
