"""
Team membership helpers for users.

A user owns teams (``teams.user_id``) and belongs to others through
``team_user`` rows carrying a role. Ownership always wins: an owner's role is
``owner`` regardless of any membership row, and owners hold every team
permission.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from realtyhub.db import models
from realtyhub.utils.team_roles import ROLE_OWNER, WILDCARD, team_permissions_for_role

logger = logging.getLogger("realtyhub.teams")


def owned_teams(db: Session, user: models.User) -> List[models.Team]:
    return db.query(models.Team).filter(models.Team.user_id == user.id).all()


def teams(db: Session, user: models.User) -> List[models.Team]:
    """Teams the user is a member of (excluding ownership)."""
    return (
        db.query(models.Team)
        .join(models.TeamMembership, models.TeamMembership.team_id == models.Team.id)
        .filter(models.TeamMembership.user_id == user.id)
        .all()
    )


def all_teams(db: Session, user: models.User) -> List[models.Team]:
    """Every team the user owns or belongs to, sorted by name."""
    merged = {t.id: t for t in owned_teams(db, user)}
    for t in teams(db, user):
        merged.setdefault(t.id, t)
    return sorted(merged.values(), key=lambda t: t.name)


def personal_team(db: Session, user: models.User) -> Optional[models.Team]:
    return (
        db.query(models.Team)
        .filter(models.Team.user_id == user.id, models.Team.personal_team.is_(True))
        .order_by(models.Team.created_at)
        .first()
    )


def owns_team(user: models.User, team: models.Team) -> bool:
    return bool(user.id and team.user_id and user.id == team.user_id)


def get_membership(db: Session, user: models.User, team: models.Team) -> Optional[models.TeamMembership]:
    return (
        db.query(models.TeamMembership)
        .filter(models.TeamMembership.team_id == team.id, models.TeamMembership.user_id == user.id)
        .first()
    )


def belongs_to_team(db: Session, user: models.User, team: Optional[models.Team]) -> bool:
    if team is None:
        return False
    return owns_team(user, team) or get_membership(db, user, team) is not None


def team_role(db: Session, user: models.User, team: models.Team) -> Optional[str]:
    if owns_team(user, team):
        return ROLE_OWNER
    membership = get_membership(db, user, team)
    return membership.role if membership else None


def has_team_role(db: Session, user: models.User, team: models.Team, role: str) -> bool:
    if owns_team(user, team):
        return role == ROLE_OWNER
    return team_role(db, user, team) == role


def team_permissions(db: Session, user: models.User, team: models.Team) -> List[str]:
    if owns_team(user, team):
        return [WILDCARD]
    return team_permissions_for_role(team_role(db, user, team))


def has_team_permission(db: Session, user: models.User, team: models.Team, permission: str) -> bool:
    permissions = team_permissions(db, user, team)
    return WILDCARD in permissions or permission in permissions


def switch_team(db: Session, user: models.User, team: models.Team) -> bool:
    """Make ``team`` the user's current team; False if the user is not on it."""
    if not belongs_to_team(db, user, team):
        return False
    user.current_team_id = team.id
    user.current_team = team
    db.flush()
    return True


def current_team(db: Session, user: models.User) -> Optional[models.Team]:
    """Return the user's current team, falling back to the personal team."""
    if user.current_team_id is None and user.id:
        team = personal_team(db, user)
        if team is not None:
            switch_team(db, user, team)
    if user.current_team_id is None:
        return None
    return db.get(models.Team, user.current_team_id)


def is_current_team(db: Session, user: models.User, team: models.Team) -> bool:
    current = current_team(db, user)
    return current is not None and current.id == team.id


def create_personal_team(db: Session, user: models.User) -> models.Team:
    first_name = (user.name or user.email.split("@")[0]).split(" ", 1)[0]
    team = models.Team(name=f"{first_name}'s Team", personal_team=True, user_id=user.id)
    db.add(team)
    db.flush()
    logger.info("personal_team_created: user=%s team=%s", user.id, team.id)
    return team
