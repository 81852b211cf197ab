"""
User role and permission assignment.

Roles and permissions may be passed as model instances, ids or names; names
resolve against the ``web`` guard. Unknown names raise ``NotFound``.
"""
import logging
import uuid
from typing import Iterable, List, Set, Union

from sqlalchemy.orm import Session

from realtyhub.db import models
from realtyhub.errors import NotFound
from realtyhub.rbac.registrar import registrar

logger = logging.getLogger("realtyhub.rbac")

DEFAULT_GUARD = "web"

RoleRef = Union[models.Role, uuid.UUID, str]
PermissionRef = Union[models.Permission, uuid.UUID, str]


def _as_list(refs) -> list:
    if refs is None:
        return []
    if isinstance(refs, (str, uuid.UUID, models.Role, models.Permission)):
        return [refs]
    return list(refs)


def find_role(db: Session, ref: RoleRef, guard_name: str = DEFAULT_GUARD) -> models.Role:
    if isinstance(ref, models.Role):
        return ref
    if isinstance(ref, uuid.UUID):
        role = db.get(models.Role, ref)
    else:
        role = (
            db.query(models.Role)
            .filter(models.Role.name == ref, models.Role.guard_name == guard_name)
            .first()
        )
    if role is None:
        raise NotFound(f"There is no role named `{ref}` for guard `{guard_name}`.")
    return role


def find_permission(db: Session, ref: PermissionRef, guard_name: str = DEFAULT_GUARD) -> models.Permission:
    if isinstance(ref, models.Permission):
        return ref
    if isinstance(ref, uuid.UUID):
        permission = db.get(models.Permission, ref)
    else:
        permission = (
            db.query(models.Permission)
            .filter(models.Permission.name == ref, models.Permission.guard_name == guard_name)
            .first()
        )
    if permission is None:
        raise NotFound(f"There is no permission named `{ref}` for guard `{guard_name}`.")
    return permission


# ---- user roles ------------------------------------------------------------

def assign_role(db: Session, user: models.User, roles: Union[RoleRef, Iterable[RoleRef]]) -> None:
    for ref in _as_list(roles):
        role = find_role(db, ref)
        if role not in user.roles:
            user.roles.append(role)
    db.flush()


def sync_roles(db: Session, user: models.User, roles: Union[RoleRef, Iterable[RoleRef], None]) -> None:
    """Replace the user's roles with exactly ``roles`` (empty removes all)."""
    user.roles = [find_role(db, ref) for ref in _as_list(roles)]
    db.flush()


def remove_role(db: Session, user: models.User, role: RoleRef) -> None:
    target = find_role(db, role)
    if target in user.roles:
        user.roles.remove(target)
        db.flush()


def has_role(user: models.User, roles: Union[str, Iterable[str]]) -> bool:
    """True when the user has any of the named roles."""
    wanted = {roles} if isinstance(roles, str) else set(roles)
    return any(r.name in wanted for r in user.roles)


def get_role_names(user: models.User) -> List[str]:
    return sorted(r.name for r in user.roles)


# ---- direct user permissions -------------------------------------------------

def give_permission_to(db: Session, user: models.User, permissions: Union[PermissionRef, Iterable[PermissionRef]]) -> None:
    for ref in _as_list(permissions):
        permission = find_permission(db, ref)
        if permission not in user.permissions:
            user.permissions.append(permission)
    db.flush()


def revoke_permission_to(db: Session, user: models.User, permission: PermissionRef) -> None:
    target = find_permission(db, permission)
    if target in user.permissions:
        user.permissions.remove(target)
        db.flush()


# ---- role permissions ----------------------------------------------------------

def give_role_permission_to(db: Session, role: models.Role, permissions: Union[PermissionRef, Iterable[PermissionRef]]) -> None:
    for ref in _as_list(permissions):
        permission = find_permission(db, ref, role.guard_name)
        if permission not in role.permissions:
            role.permissions.append(permission)
    db.flush()
    registrar.forget_cached_permissions()


def sync_permissions(db: Session, target: Union[models.Role, models.User], permissions) -> None:
    """Replace a role's (or a user's direct) permissions with exactly ``permissions``."""
    guard = getattr(target, "guard_name", DEFAULT_GUARD)
    target.permissions = [find_permission(db, ref, guard) for ref in _as_list(permissions)]
    db.flush()
    if isinstance(target, models.Role):
        registrar.forget_cached_permissions()


def sync_permission_roles(db: Session, permission: models.Permission, roles) -> None:
    """Grant ``permission`` to exactly ``roles``."""
    permission.roles = [find_role(db, ref, permission.guard_name) for ref in _as_list(roles)]
    db.flush()
    registrar.forget_cached_permissions()


# ---- checks --------------------------------------------------------------------

def get_all_permissions(db: Session, user: models.User) -> Set[str]:
    """Direct permissions plus those granted through the user's roles."""
    names = {p.name for p in user.permissions}
    for role in user.roles:
        names |= registrar.permissions_for_role(db, role.id)
    return names


def user_can(db: Session, user: models.User, permission: str) -> bool:
    if user.is_superadmin:
        return True
    return permission in get_all_permissions(db, user)
