"""
Reconcile roles and permissions in the database with the ACL catalogue.

``sync_acl`` upserts every catalogued role and permission, re-grants each
permission to exactly its listed roles, removes default roles and
permissions that are no longer catalogued, and clears the permission cache.
Custom (non-default) roles are never removed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from realtyhub import audit
from realtyhub.audit import AuditAction
from realtyhub.db import models
from realtyhub.rbac import catalog
from realtyhub.rbac.permissions import DEFAULT_GUARD, sync_permission_roles
from realtyhub.rbac.registrar import registrar

logger = logging.getLogger("realtyhub.rbac")

Writer = Callable[[str], None]


@dataclass
class SyncReport:
    roles_created: List[str] = field(default_factory=list)
    roles_updated: List[str] = field(default_factory=list)
    roles_deleted: List[str] = field(default_factory=list)
    permissions_created: List[str] = field(default_factory=list)
    permissions_updated: List[str] = field(default_factory=list)
    permissions_deleted: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, int]:
        return {
            "roles_created": len(self.roles_created),
            "roles_updated": len(self.roles_updated),
            "roles_deleted": len(self.roles_deleted),
            "permissions_created": len(self.permissions_created),
            "permissions_updated": len(self.permissions_updated),
            "permissions_deleted": len(self.permissions_deleted),
        }


def _silent(_line: str) -> None:
    return None


def sync_roles(db: Session, roles: List[Dict[str, object]], report: SyncReport, out: Writer = _silent) -> None:
    out("Syncing roles...")
    names = [str(r["name"]) for r in roles]
    for data in roles:
        role = db.query(models.Role).filter(models.Role.name == data["name"]).first()
        if role is None:
            role = models.Role(**data)
            db.add(role)
            report.roles_created.append(role.name)
            out(f"✓ Created role: {role.name}")
        else:
            for key, value in data.items():
                setattr(role, key, value)
            report.roles_updated.append(role.name)
            out(f"✓ Updated role: {role.name}")
    db.flush()

    stale = (
        db.query(models.Role)
        .filter(models.Role.name.notin_(names), models.Role.is_default.is_(True))
        .all()
    )
    for role in stale:
        out(f"✓ Deleted role: {role.name}")
        report.roles_deleted.append(role.name)
        db.delete(role)
    db.flush()


def sync_permissions(
    db: Session,
    group_permissions: Dict[str, Dict[str, List[str]]],
    report: SyncReport,
    out: Writer = _silent,
) -> None:
    out("Syncing permissions...")
    for group, permissions in group_permissions.items():
        out(f"Processing group: {group}")
        for name, role_names in permissions.items():
            permission = (
                db.query(models.Permission)
                .filter(models.Permission.name == name, models.Permission.guard_name == DEFAULT_GUARD)
                .first()
            )
            if permission is None:
                permission = models.Permission(name=name, group=group, guard_name=DEFAULT_GUARD)
                db.add(permission)
                db.flush()
                report.permissions_created.append(name)
                out(f"  ✓ Created permission: {name}")
            else:
                permission.group = group
                report.permissions_updated.append(name)
                out(f"  ✓ Updated permission: {name}")
            sync_permission_roles(db, permission, role_names)
            out(f"    ✓ Synced roles for permission: {name}")

    cleanup_orphaned_permissions(db, group_permissions, report, out)


def cleanup_orphaned_permissions(
    db: Session,
    group_permissions: Dict[str, Dict[str, List[str]]],
    report: SyncReport,
    out: Writer = _silent,
) -> None:
    expected = [name for permissions in group_permissions.values() for name in permissions]
    orphaned = db.query(models.Permission).filter(models.Permission.name.notin_(expected)).all()
    for permission in orphaned:
        out(f"✓ Deleted orphaned permission: {permission.name}")
        report.permissions_deleted.append(permission.name)
        db.delete(permission)
    db.flush()


def sync_acl(
    db: Session,
    roles: Optional[List[Dict[str, object]]] = None,
    group_permissions: Optional[Dict[str, Dict[str, List[str]]]] = None,
    out: Writer = _silent,
) -> SyncReport:
    """Sync roles and permissions; the caller owns the transaction."""
    report = SyncReport()
    sync_roles(db, roles if roles is not None else catalog.get_roles(), report, out)
    sync_permissions(db, group_permissions if group_permissions is not None else catalog.get_group_permissions(), report, out)
    audit.log(db, action=AuditAction.ACL_SYNC, target_type="acl", metadata=report.summary())
    out("Clearing permission cache...")
    registrar.forget_cached_permissions()
    logger.info("acl_sync: %s", report.summary())
    return report
