"""
Domain-split SQLAlchemy models with an aggregator.

Exposes `Base`, `now_utc`, the team scope mixin and all ORM classes.
"""

from .base import Base, now_utc  # re-export
from ..team_scope import TeamOwnedMixin

# Domain models
from .users import User, SocialAccount
from .teams import Team, TeamMembership, TeamInvitation
from .rbac import Role, Permission, role_has_permissions, model_has_roles, model_has_permissions
from .audit import AuditLog
from .content import Category, Tag, Media, Post, Comment, post_tags
from .listings import PropertyType, Location, Agent, Property, Inquiry, Favorite

__all__ = [
    # base
    "Base",
    "now_utc",
    "TeamOwnedMixin",
    # users/teams
    "User",
    "SocialAccount",
    "Team",
    "TeamMembership",
    "TeamInvitation",
    # rbac
    "Role",
    "Permission",
    "role_has_permissions",
    "model_has_roles",
    "model_has_permissions",
    # audit
    "AuditLog",
    # blog
    "Category",
    "Tag",
    "Media",
    "Post",
    "Comment",
    "post_tags",
    # listings
    "PropertyType",
    "Location",
    "Agent",
    "Property",
    "Inquiry",
    "Favorite",
]
