"""
Team authorization policy.

Each ability is a plain predicate; ``authorize`` raises when it fails.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from realtyhub.db import models
from realtyhub.errors import AuthorizationError
from realtyhub.services import teams as team_service
from realtyhub.utils.team_roles import PERM_ADD_MEMBER, PERM_REMOVE_MEMBER, PERM_UPDATE_MEMBER

logger = logging.getLogger("realtyhub.teams")


def view_any(db: Session, user: models.User, team: Optional[models.Team] = None) -> bool:
    return True


def view(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.belongs_to_team(db, user, team)


def create(db: Session, user: models.User, team: Optional[models.Team] = None) -> bool:
    return True


def update(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.owns_team(user, team)


def delete(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.owns_team(user, team) and not team.personal_team


def add_team_member(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.belongs_to_team(db, user, team) and team_service.has_team_permission(db, user, team, PERM_ADD_MEMBER)


def update_team_member(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.belongs_to_team(db, user, team) and team_service.has_team_permission(db, user, team, PERM_UPDATE_MEMBER)


def remove_team_member(db: Session, user: models.User, team: models.Team) -> bool:
    return team_service.belongs_to_team(db, user, team) and team_service.has_team_permission(db, user, team, PERM_REMOVE_MEMBER)


ABILITIES = {
    "viewAny": view_any,
    "view": view,
    "create": create,
    "update": update,
    "delete": delete,
    "addTeamMember": add_team_member,
    "updateTeamMember": update_team_member,
    "removeTeamMember": remove_team_member,
}


def allows(db: Session, user: models.User, ability: str, team: Optional[models.Team] = None) -> bool:
    check = ABILITIES.get(ability)
    if check is None:
        raise ValueError(f"Unknown team ability: {ability}")
    if user.is_superadmin:
        return True
    return bool(check(db, user, team))


def authorize(db: Session, user: models.User, ability: str, team: Optional[models.Team] = None) -> None:
    if not allows(db, user, ability, team):
        logger.warning(
            "team_authorization_denied: user=%s ability=%s team=%s",
            user.id, ability, team.id if team is not None else None,
        )
        raise AuthorizationError()
