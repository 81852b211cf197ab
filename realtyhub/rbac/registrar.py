"""
Process-wide permission cache.

Maps a role id to the set of permission names granted to it. Every write to
roles or permissions must call ``forget_cached_permissions``. A session
rollback clears it too.
"""
import logging
import threading
import uuid
from typing import Dict, FrozenSet

from sqlalchemy import event
from sqlalchemy.orm import Session

from realtyhub.db import models

logger = logging.getLogger("realtyhub.rbac")


class PermissionRegistrar:
    def __init__(self):
        self._lock = threading.Lock()
        self._role_permissions: Dict[uuid.UUID, FrozenSet[str]] | None = None

    def _load(self, db: Session) -> Dict[uuid.UUID, FrozenSet[str]]:
        mapping: Dict[uuid.UUID, set] = {}
        rows = (
            db.query(models.role_has_permissions.c.role_id, models.Permission.name)
            .join(models.Permission, models.Permission.id == models.role_has_permissions.c.permission_id)
            .all()
        )
        for role_id, name in rows:
            mapping.setdefault(role_id, set()).add(name)
        return {role_id: frozenset(names) for role_id, names in mapping.items()}

    def role_permissions(self, db: Session) -> Dict[uuid.UUID, FrozenSet[str]]:
        with self._lock:
            if self._role_permissions is None:
                self._role_permissions = self._load(db)
                logger.debug("permission cache loaded: %d roles", len(self._role_permissions))
            return self._role_permissions

    def permissions_for_role(self, db: Session, role_id: uuid.UUID) -> FrozenSet[str]:
        return self.role_permissions(db).get(role_id, frozenset())

    def forget_cached_permissions(self) -> None:
        with self._lock:
            self._role_permissions = None
        logger.debug("permission cache cleared")


registrar = PermissionRegistrar()


def forget_cached_permissions() -> None:
    registrar.forget_cached_permissions()


@event.listens_for(Session, "after_rollback")
def _forget_on_rollback(session: Session) -> None:
    registrar.forget_cached_permissions()

