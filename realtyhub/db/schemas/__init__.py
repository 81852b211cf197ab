"""
Domain-split Pydantic schemas with an aggregator.
"""

from .audits import AuditLogBase, AuditLogCreate, AuditLog
from .users import UserBase, UserCreate, UserUpdate, User, UserWithRoles
from .teams import (
    TeamBase,
    TeamCreate,
    TeamUpdate,
    Team,
    TeamWithRole,
    TeamMemberCreate,
    TeamMemberUpdate,
    TeamMember,
    TeamInvitationCreate,
    TeamInvitation,
)
from .rbac import PermissionBase, Permission, RoleBase, RoleCreate, RoleUpdate, Role, GroupedPermissions
from .listings import (
    PropertyBase,
    PropertyCreate,
    Property,
    FavoriteToggle,
    InquiryCreate,
    InquiryRespond,
    Inquiry,
)
from .blog import PostBase, PostCreate, Post, CommentCreate, Comment

__all__ = [
    # audits
    "AuditLogBase", "AuditLogCreate", "AuditLog",
    # users
    "UserBase", "UserCreate", "UserUpdate", "User", "UserWithRoles",
    # teams
    "TeamBase", "TeamCreate", "TeamUpdate", "Team", "TeamWithRole",
    "TeamMemberCreate", "TeamMemberUpdate", "TeamMember",
    "TeamInvitationCreate", "TeamInvitation",
    # rbac
    "PermissionBase", "Permission", "RoleBase", "RoleCreate", "RoleUpdate", "Role", "GroupedPermissions",
    # listings
    "PropertyBase", "PropertyCreate", "Property", "FavoriteToggle",
    "InquiryCreate", "InquiryRespond", "Inquiry",
    # blog
    "PostBase", "PostCreate", "Post", "CommentCreate", "Comment",
]
