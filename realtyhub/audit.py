"""
Audit records for team, membership, invitation, role, user and ACL changes.

``log`` writes one row; ``log_team``, ``log_member``, ``log_role`` and
``log_user`` fill in the target type and id for their kind of change.
"""
from __future__ import annotations
import uuid
from enum import Enum
from typing import Any, Optional, Dict
from sqlalchemy.orm import Session

from realtyhub.db import models, schemas
from realtyhub.db.repositories import audits as audit_repo


class AuditAction(str, Enum):
    # Team
    TEAM_CREATE = "team_create"
    TEAM_UPDATE = "team_update"
    TEAM_DELETE = "team_delete"
    TEAM_SWITCH = "team_switch"
    # Membership
    MEMBER_ADD = "member_add"
    MEMBER_REMOVE = "member_remove"
    MEMBER_ROLE_CHANGE = "member_role_change"
    # Invitations
    INVITATION_CREATE = "invitation_create"
    INVITATION_ACCEPT = "invitation_accept"
    INVITATION_REVOKE = "invitation_revoke"
    # Roles
    ROLE_CREATE = "role_create"
    ROLE_UPDATE = "role_update"
    ROLE_DELETE = "role_delete"
    ACL_SYNC = "acl_sync"
    # Users
    USER_CREATE = "user_create"
    USER_UPDATE = "user_update"
    USER_DELETE = "user_delete"
    SOCIAL_LINK = "social_link"
    SOCIAL_UNLINK = "social_unlink"


class AuditStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


def log(
    db: Session,
    *,
    action: AuditAction | str,
    status: AuditStatus | str = AuditStatus.SUCCESS,
    target_type: str,
    target_id: Optional[uuid.UUID] = None,
    actor_user_id: Optional[uuid.UUID] = None,
    team_id: Optional[uuid.UUID] = None,
    reason: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> models.AuditLog:
    """Central audit logging helper.

    ``actor_user_id`` is None for console commands.
    """
    # Persist pure string values, not Enum reprs
    action_value = action.value if isinstance(action, AuditAction) else str(action)
    status_value = status.value if isinstance(status, AuditStatus) else str(status)
    audit_log = schemas.AuditLogCreate(
        action_type=action_value,
        status=status_value,
        target_type=target_type,
        target_id=target_id,
        reason=reason,
        metadata=metadata or {},
    )
    return audit_repo.create_audit_log(
        db,
        entry=audit_log,
        actor_user_id=actor_user_id,
        team_id=team_id,
    )

__all__ = ["AuditAction", "AuditStatus", "log"]


def log_team(db: Session, *, actor_user_id: Optional[uuid.UUID], team_id: uuid.UUID, action: AuditAction, name: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
    payload = dict(metadata or {})
    if name:
        payload["name"] = name
    return log(
        db,
        action=action,
        target_type="team",
        target_id=team_id,
        actor_user_id=actor_user_id,
        # A deleted team cannot be referenced by its own audit row
        team_id=None if action == AuditAction.TEAM_DELETE else team_id,
        metadata=payload or None,
    )


def log_member(db: Session, *, actor_user_id: Optional[uuid.UUID], team_id: uuid.UUID, member_user_id: uuid.UUID, action: AuditAction, role: Optional[str] = None):
    return log(
        db,
        action=action,
        target_type="team_member",
        target_id=member_user_id,
        actor_user_id=actor_user_id,
        team_id=team_id,
        metadata={"role": role} if role else None,
    )


def log_role(db: Session, *, actor_user_id: Optional[uuid.UUID], role_id: uuid.UUID, action: AuditAction, name: Optional[str] = None):
    return log(
        db,
        action=action,
        target_type="role",
        target_id=role_id,
        actor_user_id=actor_user_id,
        metadata={"name": name} if name else None,
    )


def log_user(db: Session, *, actor_user_id: Optional[uuid.UUID], user_id: uuid.UUID, action: AuditAction, metadata: Optional[Dict[str, Any]] = None):
    return log(
        db,
        action=action,
        target_type="user",
        target_id=user_id,
        actor_user_id=actor_user_id,
        metadata=metadata,
    )

__all__.extend(["log_team", "log_member", "log_role", "log_user"])
