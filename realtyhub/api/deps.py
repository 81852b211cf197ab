"""
API dependency helpers.

Provides the dependency-resolved user context, the active team (which also
switches on the team query scope for the request's session) and permission
guards for routes.
"""
import logging
import os
import uuid
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.api.auth import get_or_create_user, resolve_identity_from_headers
from realtyhub.db import models
from realtyhub.db.database import get_db
from realtyhub.db.team_scope import set_current_team
from realtyhub.services import teams as team_service

logger = logging.getLogger("realtyhub.auth")


def dev_mode_active() -> bool:
    return os.getenv("DEV_MODE", "false").lower() == "true"


# Contract:
# Returns (sqlalchemy User model, current_user_context_dict)
# Raises 401 if identity cannot be resolved.

def get_current_user_context(
    db: Session = Depends(get_db),
    x_auth_request_user: Optional[str] = Header(default=None),
    x_auth_request_email: Optional[str] = Header(default=None),
    x_forwarded_user: Optional[str] = Header(default=None),
    x_forwarded_email: Optional[str] = Header(default=None),
) -> Tuple[models.User, Dict[str, Any]]:
    if dev_mode_active():
        email = "dev@localhost"
        name = "Development User"
    else:
        name, email = resolve_identity_from_headers(
            x_auth_request_user=x_auth_request_user,
            x_auth_request_email=x_auth_request_email,
            x_forwarded_user=x_forwarded_user,
            x_forwarded_email=x_forwarded_email,
        )
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    user = get_or_create_user(db, email=email, name=name)
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account disabled")

    current_user = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "is_superadmin": bool(user.is_superadmin),
        "roles": rbac.get_role_names(user),
        "current_team_id": user.current_team_id,
    }
    return user, current_user


def get_current_team(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
    x_team_id: Optional[str] = Header(default=None),
) -> models.Team:
    """Resolve the active team and scope tenant queries on this session to it.

    ``X-Team-Id`` selects a team explicitly; otherwise the user's current team
    (falling back to their personal team) is used.
    """
    user, _ = user_context
    if x_team_id:
        try:
            team_id = uuid.UUID(x_team_id)
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-Team-Id header")
        team = db.get(models.Team, team_id)
        if team is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
        if not (user.is_superadmin or team_service.belongs_to_team(db, user, team)):
            logger.warning("team_header_rejected: user=%s team=%s", user.id, team_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not belong to this team")
    else:
        team = team_service.current_team(db, user)
        db.commit()
        if team is None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No current team selected")
    set_current_team(db, team.id)
    return team


def require_permission(name: str):
    """Dependency factory: 403 unless the current user holds ``name``."""

    def _guard(
        db: Session = Depends(get_db),
        user_context=Depends(get_current_user_context),
    ) -> models.User:
        user, _ = user_context
        if not rbac.user_can(db, user, name):
            logger.warning("permission_denied: user=%s permission=%s", user.id, name)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This action is unauthorized.")
        return user

    return _guard
