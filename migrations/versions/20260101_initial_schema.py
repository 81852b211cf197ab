"""
Initial schema: users, teams, RBAC, audit log, blog and property listings.

Tenant tables carry a team_id foreign key; the team scope is applied by the
application session, not by database policies.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'initial_20260101'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UUID = postgresql.UUID(as_uuid=True)


def _timestamps(updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=True)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return cols


def _team_id():
    return sa.Column('team_id', UUID, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=True),
        sa.Column('is_superadmin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('email_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_team_id', UUID, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'teams',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('personal_team', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timezone', sa.String(255), nullable=True),
        sa.Column('language', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_teams_user_id', 'teams', ['user_id'])
    op.create_foreign_key(
        'fk_users_current_team_id', 'users', 'teams', ['current_team_id'], ['id'], ondelete='SET NULL',
    )

    op.create_table(
        'team_user',
        sa.Column('team_id', UUID, sa.ForeignKey('teams.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        *_timestamps(),
        sa.CheckConstraint("role in ('admin','editor','member')", name='ck_team_user_role'),
    )
    op.create_index('ix_team_user_user_id', 'team_user', ['user_id'])

    op.create_table(
        'team_invitations',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('team_id', UUID, sa.ForeignKey('teams.id', ondelete='CASCADE'), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='member'),
        sa.Column('invited_by_user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('team_id', 'email', name='uq_team_invitations_team_email'),
    )
    op.create_index('ix_team_invitations_email', 'team_invitations', ['email'])

    op.create_table(
        'social_accounts',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('provider_id', sa.String(255), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=True),
        sa.Column('refresh_token', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'provider', name='uq_social_accounts_user_provider'),
    )
    op.create_index('ix_social_accounts_provider_provider_id', 'social_accounts', ['provider', 'provider_id'])

    # RBAC
    op.create_table(
        'roles',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('guard_name', sa.String(50), nullable=False, server_default='web'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint('name', 'guard_name', name='uq_roles_name_guard'),
    )
    op.create_table(
        'permissions',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('group', sa.String(100), nullable=True),
        sa.Column('guard_name', sa.String(50), nullable=False, server_default='web'),
        *_timestamps(),
        sa.UniqueConstraint('name', 'guard_name', name='uq_permissions_name_guard'),
    )
    op.create_table(
        'role_has_permissions',
        sa.Column('role_id', UUID, sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('permission_id', UUID, sa.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'model_has_roles',
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('role_id', UUID, sa.ForeignKey('roles.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'model_has_permissions',
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('permission_id', UUID, sa.ForeignKey('permissions.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'audit_logs',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('team_id', UUID, sa.ForeignKey('teams.id', ondelete='SET NULL'), nullable=True),
        sa.Column('actor_user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action_type', sa.Text(), nullable=False),
        sa.Column('target_type', sa.Text(), nullable=True),
        sa.Column('target_id', UUID, nullable=True),
        sa.Column('status', sa.Text(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_team_id_created_at', 'audit_logs', ['team_id', 'created_at'])
    op.create_index('ix_audit_logs_actor_user_id_created_at', 'audit_logs', ['actor_user_id', 'created_at'])
    op.create_index('ix_audit_logs_action_type', 'audit_logs', ['action_type'])

    # Blog
    op.create_table(
        'categories',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('team_id', 'slug', name='uq_categories_team_slug'),
    )
    op.create_table(
        'tags',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(120), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('team_id', 'slug', name='uq_tags_team_slug'),
    )
    op.create_table(
        'media',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('path', sa.String(1024), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=True),
        sa.Column('size', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('alt_text', sa.String(255), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_table(
        'posts',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('allow_comments', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_sticky', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', UUID, sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('featured_image_id', UUID, sa.ForeignKey('media.id', ondelete='SET NULL'), nullable=True),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('comments_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint("status in ('draft','published','scheduled','archived')", name='ck_posts_status'),
    )
    op.create_index('ix_posts_status_published_at', 'posts', ['status', 'published_at'])
    op.create_index('ix_posts_category_id_status', 'posts', ['category_id', 'status'])
    op.create_table(
        'post_tag',
        sa.Column('post_id', UUID, sa.ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('tag_id', UUID, sa.ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        'comments',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('post_id', UUID, sa.ForeignKey('posts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('parent_id', UUID, sa.ForeignKey('comments.id', ondelete='CASCADE'), nullable=True),
        sa.Column('author_name', sa.String(255), nullable=True),
        sa.Column('author_email', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_by', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint("status in ('pending','approved','rejected','spam')", name='ck_comments_status'),
    )
    op.create_index('ix_comments_post_id_status', 'comments', ['post_id', 'status'])

    # Listings
    op.create_table(
        'property_types',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(updated=False),
    )
    op.create_table(
        'locations',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('state', sa.String(255), nullable=True),
        sa.Column('country', sa.String(255), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_table(
        'agents',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('license_number', sa.String(100), nullable=True, unique=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('social_media', postgresql.JSONB(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('commission_rate', sa.Numeric(5, 2), nullable=False, server_default='5'),
        sa.Column('experience_years', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_table(
        'properties',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('listing_type', sa.String(10), nullable=False, server_default='sale'),
        sa.Column('status', sa.String(20), nullable=False, server_default='available'),
        sa.Column('price', sa.Numeric(15, 2), nullable=False),
        sa.Column('monthly_rent', sa.Numeric(15, 2), nullable=True),
        sa.Column('currency', sa.String(3), nullable=False, server_default='BDT'),
        sa.Column('bedrooms', sa.Integer(), nullable=True),
        sa.Column('bathrooms', sa.Integer(), nullable=True),
        sa.Column('area_sqft', sa.Numeric(10, 2), nullable=True),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('latitude', sa.Numeric(10, 8), nullable=True),
        sa.Column('longitude', sa.Numeric(11, 8), nullable=True),
        sa.Column('is_furnished', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('has_parking', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('pet_friendly', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('property_type_id', UUID, sa.ForeignKey('property_types.id', ondelete='CASCADE'), nullable=False),
        sa.Column('location_id', UUID, sa.ForeignKey('locations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('agent_id', UUID, sa.ForeignKey('agents.id', ondelete='CASCADE'), nullable=False),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('favorites_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('inquiries_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        sa.CheckConstraint("listing_type in ('sale','rent')", name='ck_properties_listing_type'),
        sa.CheckConstraint("status in ('available','sold','rented','pending','draft')", name='ck_properties_status'),
    )
    op.create_index('ix_properties_status_listing_type', 'properties', ['status', 'listing_type'])
    op.create_index('ix_properties_price_listing_type', 'properties', ['price', 'listing_type'])
    op.create_index('ix_properties_is_featured_status', 'properties', ['is_featured', 'status'])
    op.create_table(
        'inquiries',
        sa.Column('id', UUID, primary_key=True),
        _team_id(),
        sa.Column('property_id', UUID, sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('inquiry_type', sa.String(20), nullable=False, server_default='general'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('agent_notes', sa.Text(), nullable=True),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('responded_by', UUID, sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(updated=False),
        sa.CheckConstraint("inquiry_type in ('general','viewing','offer','financing')", name='ck_inquiries_type'),
        sa.CheckConstraint("status in ('pending','contacted','responded','closed')", name='ck_inquiries_status'),
    )
    op.create_index('ix_inquiries_property_id_status', 'inquiries', ['property_id', 'status'])
    op.create_table(
        'property_favorites',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_id', UUID, sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('user_id', 'property_id', name='uq_property_favorites_user_property'),
    )


def downgrade() -> None:
    for table in (
        'property_favorites', 'inquiries', 'properties', 'agents', 'locations', 'property_types',
        'comments', 'post_tag', 'posts', 'media', 'tags', 'categories',
        'audit_logs', 'model_has_permissions', 'model_has_roles', 'role_has_permissions', 'permissions', 'roles',
        'social_accounts', 'team_invitations', 'team_user',
    ):
        op.drop_table(table)
    op.drop_constraint('fk_users_current_team_id', 'users', type_='foreignkey')
    op.drop_table('teams')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
