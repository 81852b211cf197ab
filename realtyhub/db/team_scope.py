"""
Team ownership for tenant data.

Models mixing in ``TeamOwnedMixin`` carry a ``team_id`` and are filtered by a
global query scope: while a session has an active team (see
``set_current_team``), every ORM SELECT against a team-owned entity only
returns that team's rows, and new rows without a team are stamped with it
on flush.

Pass ``execution_options(without_team_scope=True)`` to a query to read
across teams (superadmin reports, console commands).
"""
import uuid
from typing import Optional

from sqlalchemy import Column, ForeignKey, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Session, declared_attr, relationship, with_loader_criteria

TEAM_ID_KEY = "realtyhub.team_id"
BYPASS_OPTION = "without_team_scope"


class TeamOwnedMixin:
    """Row belongs to exactly one team."""

    @declared_attr
    def team_id(cls):
        return Column(UUID(as_uuid=True), ForeignKey('teams.id', ondelete='CASCADE'), nullable=False, index=True)

    @declared_attr
    def team(cls):
        return relationship('Team')


def set_current_team(db: Session, team_id: Optional[uuid.UUID]) -> None:
    """Activate (or with ``None`` clear) the team scope on a session."""
    if team_id is None:
        db.info.pop(TEAM_ID_KEY, None)
    else:
        db.info[TEAM_ID_KEY] = team_id


def current_team_id(db: Session) -> Optional[uuid.UUID]:
    return db.info.get(TEAM_ID_KEY)


@event.listens_for(Session, "do_orm_execute")
def _apply_team_scope(execute_state):
    if (
        not execute_state.is_select
        or execute_state.is_column_load
        or execute_state.is_relationship_load
        or execute_state.execution_options.get(BYPASS_OPTION, False)
    ):
        return
    team_id = execute_state.session.info.get(TEAM_ID_KEY)
    if team_id is None:
        return
    execute_state.statement = execute_state.statement.options(
        with_loader_criteria(
            TeamOwnedMixin,
            lambda cls: cls.team_id == team_id,
            include_aliases=True,
        )
    )


@event.listens_for(Session, "before_flush")
def _stamp_team_id(session, flush_context, instances):
    team_id = session.info.get(TEAM_ID_KEY)
    if team_id is None:
        return
    for obj in session.new:
        if isinstance(obj, TeamOwnedMixin) and obj.team_id is None and obj.team is None:
            obj.team_id = team_id
