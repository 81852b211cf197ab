"""
Team role catalogue and the permissions each role grants inside a team.

Team roles are independent from the application-wide RBAC roles in
``realtyhub.rbac``: they only decide what a member may do with the team
itself and its members.
"""

from typing import Dict, FrozenSet, List


# Central role constants to ensure consistency across the codebase
ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_EDITOR = "editor"
ROLE_MEMBER = "member"

WILDCARD = "*"

PERM_READ = "read"
PERM_CREATE = "create"
PERM_UPDATE = "update"
PERM_DELETE = "delete"
PERM_ADD_MEMBER = "addTeamMember"
PERM_UPDATE_MEMBER = "updateTeamMember"
PERM_REMOVE_MEMBER = "removeTeamMember"

ROLE_PERMISSIONS: Dict[str, List[str]] = {
    ROLE_OWNER: [WILDCARD],
    ROLE_ADMIN: [
        PERM_READ,
        PERM_CREATE,
        PERM_UPDATE,
        PERM_DELETE,
        PERM_ADD_MEMBER,
        PERM_UPDATE_MEMBER,
        PERM_REMOVE_MEMBER,
    ],
    ROLE_EDITOR: [PERM_READ, PERM_CREATE, PERM_UPDATE],
    ROLE_MEMBER: [PERM_READ],
}

DEFAULT_PERMISSIONS: List[str] = [PERM_READ]

# Roles that can be handed out to members; ownership is never assigned, it is
# derived from teams.user_id.
MEMBER_ROLES: FrozenSet[str] = frozenset({ROLE_ADMIN, ROLE_EDITOR, ROLE_MEMBER})
INVITABLE_ROLES: FrozenSet[str] = frozenset({ROLE_ADMIN, ROLE_MEMBER})


def team_permissions_for_role(role: str | None) -> List[str]:
    """Return the team permissions for ``role``; unknown roles read only."""
    return list(ROLE_PERMISSIONS.get(role or "", DEFAULT_PERMISSIONS))


def role_has_permission(role: str | None, permission: str) -> bool:
    perms = team_permissions_for_role(role)
    return WILDCARD in perms or permission in perms

