"""Role management actions."""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from realtyhub import audit, rbac
from realtyhub.audit import AuditAction
from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import ProtectedResourceError, Validator

logger = logging.getLogger("realtyhub.rbac")


def _validate_role_data(db: Session, data: Dict[str, Any], role: Optional[models.Role] = None) -> None:
    v = Validator()
    name = data.get("name")
    if v.required("name", name):
        v.max_length("name", name, 255)
        guard = data.get("guard_name") or rbac.DEFAULT_GUARD
        clash = db.query(models.Role).filter(models.Role.name == name, models.Role.guard_name == guard)
        if role is not None:
            clash = clash.filter(models.Role.id != role.id)
        v.add_if(clash.first() is not None, "name", "The name has already been taken.")
    v.max_length("display_name", data.get("display_name"), 255)
    v.validate()


def _permissions_by_id(db: Session, ids) -> list:
    if not ids:
        return []
    return db.query(models.Permission).filter(models.Permission.id.in_(list(ids))).all()


class StoreRoleAction:
    def __init__(self, db: Session, actor: Optional[models.User] = None):
        self.db = db
        self.actor = actor

    def execute(self, data: Dict[str, Any]) -> models.Role:
        _validate_role_data(self.db, data)
        with transaction(self.db):
            role = models.Role(
                name=data["name"],
                display_name=data.get("display_name"),
                description=data.get("description"),
                guard_name=data.get("guard_name") or rbac.DEFAULT_GUARD,
                is_default=False,
            )
            self.db.add(role)
            self.db.flush()
            permissions = _permissions_by_id(self.db, data.get("permissions"))
            if permissions:
                rbac.give_role_permission_to(self.db, role, permissions)
            audit.log_role(self.db, actor_user_id=self.actor.id if self.actor else None, role_id=role.id, action=AuditAction.ROLE_CREATE, name=role.name)
        logger.info("role_created: %s permissions=%d", role.name, len(role.permissions))
        return role


class UpdateRoleAction:
    def __init__(self, db: Session, actor: Optional[models.User] = None):
        self.db = db
        self.actor = actor

    def execute(self, role: models.Role, data: Dict[str, Any]) -> models.Role:
        merged = {
            "name": data.get("name") or role.name,
            "guard_name": data.get("guard_name") or role.guard_name,
            "display_name": data.get("display_name", role.display_name),
        }
        _validate_role_data(self.db, merged, role=role)
        with transaction(self.db):
            role.name = merged["name"]
            role.display_name = merged["display_name"]
            role.guard_name = merged["guard_name"]
            if "description" in data:
                role.description = data["description"]
            # A list (even empty) replaces the role's permissions
            if isinstance(data.get("permissions"), list):
                rbac.sync_permissions(self.db, role, _permissions_by_id(self.db, data["permissions"]))
            audit.log_role(self.db, actor_user_id=self.actor.id if self.actor else None, role_id=role.id, action=AuditAction.ROLE_UPDATE, name=role.name)
        return role


class DeleteRoleAction:
    def __init__(self, db: Session, actor: Optional[models.User] = None):
        self.db = db
        self.actor = actor

    def execute(self, role: models.Role) -> bool:
        if role.is_default:
            raise ProtectedResourceError("Cannot delete default role")

        user_count = (
            self.db.query(models.model_has_roles)
            .filter(models.model_has_roles.c.role_id == role.id)
            .count()
        )
        if user_count > 0:
            raise ProtectedResourceError(
                f"Cannot delete role '{role.display_name or role.name}' because it is assigned to "
                f"{user_count} user(s). Please remove the role from all users before deleting."
            )

        with transaction(self.db):
            rbac.sync_permissions(self.db, role, [])
            audit.log_role(self.db, actor_user_id=self.actor.id if self.actor else None, role_id=role.id, action=AuditAction.ROLE_DELETE, name=role.name)
            self.db.delete(role)
        rbac.forget_cached_permissions()
        logger.info("role_deleted: %s", role.name)
        return True
