"""User management actions."""
import logging
import os
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from realtyhub import audit, rbac
from realtyhub.actions.teams import purge_team
from realtyhub.audit import AuditAction
from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import ProtectedResourceError, Validator
from realtyhub.services import teams as team_service
from realtyhub.utils.passwords import hash_password

logger = logging.getLogger(__name__)


def admin_emails() -> set:
    """Lower-cased addresses from ``ADMIN_EMAILS`` (comma separated, quotes allowed)."""
    entries = (e.strip().strip("'\"").lower() for e in os.getenv("ADMIN_EMAILS", "").split(","))
    return {e for e in entries if e}


def _roles_by_id(db: Session, ids) -> list:
    if not ids:
        return []
    return db.query(models.Role).filter(models.Role.id.in_(list(ids))).all()


def _email_taken(db: Session, email: str, exclude: Optional[models.User] = None) -> bool:
    query = db.query(models.User.id).filter(models.User.email == email)
    if exclude is not None:
        query = query.filter(models.User.id != exclude.id)
    return query.first() is not None


def create_user(db: Session, *, name: str, email: str, password: Optional[str] = None, verified: bool = False) -> models.User:
    """Insert a user with their personal team; caller owns the transaction."""
    email = email.strip().lower()
    user = models.User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password) if password else None,
        is_superadmin=email in admin_emails(),
    )
    if verified:
        user.email_verified_at = models.now_utc()
    db.add(user)
    db.flush()
    team = team_service.create_personal_team(db, user)
    user.current_team_id = team.id
    db.flush()
    return user


class StoreUserAction:
    def __init__(self, db: Session, actor: Optional[models.User] = None):
        self.db = db
        self.actor = actor

    def execute(self, data: Dict[str, Any]) -> models.User:
        email = (data.get("email") or "").strip().lower()
        v = Validator()
        if v.required("name", data.get("name")):
            v.max_length("name", data["name"], 255)
        if v.required("email", email):
            v.email("email", email)
            v.max_length("email", email, 255)
            v.add_if(_email_taken(self.db, email), "email", "The email has already been taken.")
        if v.required("password", data.get("password")):
            v.min_length("password", data["password"], 8)
        v.validate()

        with transaction(self.db):
            user = create_user(self.db, name=data["name"], email=email, password=data["password"])
            roles = _roles_by_id(self.db, data.get("roles"))
            if roles:
                rbac.assign_role(self.db, user, roles)
            audit.log_user(self.db, actor_user_id=self.actor.id if self.actor else None, user_id=user.id, action=AuditAction.USER_CREATE)
        logger.info("user_created: %s roles=%s", user.id, rbac.get_role_names(user))
        return user


class UpdateUserAction:
    def __init__(self, db: Session, actor: Optional[models.User] = None):
        self.db = db
        self.actor = actor

    def execute(self, user: models.User, data: Dict[str, Any]) -> models.User:
        name = data.get("name") or user.name
        email = (data.get("email") or user.email).strip().lower()
        v = Validator()
        v.max_length("name", name, 255)
        v.email("email", email)
        v.add_if(_email_taken(self.db, email, exclude=user), "email", "The email has already been taken.")
        if data.get("password"):
            v.min_length("password", data["password"], 8)
        v.validate()

        with transaction(self.db):
            user.name = name
            user.email = email
            if data.get("password"):
                user.password_hash = hash_password(data["password"])
            # Missing role list clears every role
            rbac.sync_roles(self.db, user, _roles_by_id(self.db, data.get("roles")))
            audit.log_user(
                self.db, actor_user_id=self.actor.id if self.actor else None, user_id=user.id,
                action=AuditAction.USER_UPDATE, metadata={"password_changed": bool(data.get("password"))},
            )
        return user


class DeleteUserAction:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, actor: models.User, user: models.User) -> bool:
        if actor.id == user.id:
            raise ProtectedResourceError("Cannot delete your own account")

        user_id = user.id
        with transaction(self.db):
            rbac.sync_roles(self.db, user, [])
            for team in list(user.owned_teams):
                purge_team(self.db, team)
            self.db.expire(user, ["owned_teams", "current_team"])
            audit.log_user(self.db, actor_user_id=actor.id, user_id=user_id, action=AuditAction.USER_DELETE, metadata={"email": user.email})
            self.db.delete(user)
        logger.info("user_deleted: %s by=%s", user_id, actor.id)
        return True

