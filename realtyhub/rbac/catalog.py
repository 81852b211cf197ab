"""
ACL catalogue: the default roles and grouped permissions managed by
``acl:setup``.

Permissions are declared per group; each role lists the permissions it is
granted. ``admin`` is granted every permission in the catalogue.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class RoleDefinition:
    name: str
    display_name: str
    description: str
    guard_name: str = "web"
    is_default: bool = True

    def as_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "description": self.description,
            "guard_name": self.guard_name,
            "is_default": self.is_default,
        }


ROLE_ADMIN = "admin"
ROLE_AGENT = "agent"
ROLE_MODERATOR = "moderator"
ROLE_USER = "user"

ROLES: List[RoleDefinition] = [
    RoleDefinition(ROLE_ADMIN, "Administrator", "Full access to every part of the application"),
    RoleDefinition(ROLE_AGENT, "Agent", "Manages property listings, images and inquiries"),
    RoleDefinition(ROLE_MODERATOR, "Moderator", "Manages blog content and moderates comments"),
    RoleDefinition(ROLE_USER, "User", "Basic authenticated user"),
]


def _crud(noun: str) -> List[str]:
    return [f"view {noun}", f"create {noun}", f"edit {noun}", f"delete {noun}"]


PERMISSION_GROUPS: Dict[str, List[str]] = {
    "admin panel": ["access admin panel", "view dashboard"],
    "users": ["view users", "create users", "edit users", "delete users", "assign roles"],
    "teams": _crud("teams") + ["manage team members"],
    "team invitations": _crud("team invitations"),
    "categories": _crud("categories"),
    "tags": _crud("tags"),
    "media": ["view media", "upload media", "edit media", "delete media"],
    "posts": _crud("posts") + ["publish posts"],
    "comments": _crud("comments"),
    "seo": ["manage seo"],
    "properties": _crud("properties") + ["manage property images"],
    "property images": _crud("property images"),
    "property types": _crud("property types"),
    "locations": _crud("locations"),
    "agents": _crud("agents"),
    "amenities": _crud("amenities"),
    "inquiries": _crud("inquiries"),
    "favorites": _crud("favorites"),
}

ROLE_GRANTS: Dict[str, List[str]] = {
    ROLE_AGENT: [
        "access admin panel",
        "view dashboard",
        "view properties",
        "create properties",
        "edit properties",
        "view property types",
        "view locations",
        "view agents",
        "view amenities",
        "view property images",
        "create property images",
        "edit property images",
        "delete property images",
        "manage property images",
        "view inquiries",
        "edit inquiries",
        "view favorites",
        "view posts",
        "view categories",
        "view tags",
    ],
    ROLE_MODERATOR: [
        "access admin panel",
        "view dashboard",
        "view posts",
        "create posts",
        "edit posts",
        "publish posts",
        "view categories",
        "create categories",
        "edit categories",
        "view tags",
        "create tags",
        "edit tags",
        "view media",
        "upload media",
        "edit media",
        "view comments",
        "create comments",
        "edit comments",
        "delete comments",
        "view inquiries",
        "edit inquiries",
    ],
    ROLE_USER: [
        "view teams",
        "create teams",
        "edit teams",
        "view properties",
        "view property types",
        "view locations",
        "view agents",
        "view amenities",
        "view posts",
        "view categories",
        "view tags",
        "create inquiries",
        "create favorites",
        "view favorites",
        "create comments",
    ],
}


def get_roles() -> List[Dict[str, object]]:
    return [r.as_dict() for r in ROLES]


def all_permission_names() -> List[str]:
    return [name for names in PERMISSION_GROUPS.values() for name in names]


def get_group_permissions() -> Dict[str, Dict[str, List[str]]]:
    """Return ``{group: {permission: [role names]}}`` for the whole catalogue."""
    grouped: Dict[str, Dict[str, List[str]]] = {}
    for group, names in PERMISSION_GROUPS.items():
        grouped[group] = {}
        for name in names:
            roles = [ROLE_ADMIN]
            roles.extend(role for role, grants in ROLE_GRANTS.items() if name in grants)
            grouped[group][name] = roles
    return grouped


def permissions_for_role(role_name: str) -> List[str]:
    if role_name == ROLE_ADMIN:
        return all_permission_names()
    return list(ROLE_GRANTS.get(role_name, []))
