"""Role-based access control: roles, permissions and their assignment to users."""
from .registrar import PermissionRegistrar, registrar, forget_cached_permissions
from .permissions import (
    DEFAULT_GUARD,
    find_role,
    find_permission,
    assign_role,
    sync_roles,
    remove_role,
    has_role,
    get_role_names,
    give_permission_to,
    revoke_permission_to,
    give_role_permission_to,
    sync_permissions,
    sync_permission_roles,
    get_all_permissions,
    user_can,
)

__all__ = [
    "PermissionRegistrar",
    "registrar",
    "forget_cached_permissions",
    "DEFAULT_GUARD",
    "find_role",
    "find_permission",
    "assign_role",
    "sync_roles",
    "remove_role",
    "has_role",
    "get_role_names",
    "give_permission_to",
    "revoke_permission_to",
    "give_role_permission_to",
    "sync_permissions",
    "sync_permission_roles",
    "get_all_permissions",
    "user_can",
]
