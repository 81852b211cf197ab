"""
Audit trail storage.

Rows are flushed into the caller's transaction; an audit record is only
durable when the change it describes commits.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from realtyhub.db import schemas, models


def create_audit_log(
    db: Session,
    entry: schemas.AuditLogCreate,
    actor_user_id: Optional[uuid.UUID],
    team_id: Optional[uuid.UUID] = None,
) -> models.AuditLog:
    fields = entry.model_dump()
    row = models.AuditLog(
        actor_user_id=actor_user_id,
        team_id=team_id,
        metadata_json=fields.pop('metadata', None),
        **fields,
    )
    db.add(row)
    db.flush()
    return row


def team_audit_trail(
    db: Session,
    team_id: uuid.UUID,
    *,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    actor_user_id: Optional[uuid.UUID] = None,
    since: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 50,
) -> List[models.AuditLog]:
    """Newest-first audit records of one team, optionally narrowed."""
    filters = [models.AuditLog.team_id == team_id]
    if action_type:
        filters.append(models.AuditLog.action_type == action_type)
    if target_type:
        filters.append(models.AuditLog.target_type == target_type)
    if actor_user_id:
        filters.append(models.AuditLog.actor_user_id == actor_user_id)
    if since is not None:
        filters.append(models.AuditLog.created_at >= since)
    return (
        db.query(models.AuditLog)
        .filter(*filters)
        .order_by(models.AuditLog.created_at.desc(), models.AuditLog.id)
        .offset(skip)
        .limit(min(limit, 200))
        .all()
    )
