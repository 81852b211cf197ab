"""
Teams API endpoints.

Team lifecycle, switching, membership and invitations. Authorization and
validation live in the team actions; routes translate payloads and shape
responses.
"""
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub import policies
from realtyhub.actions.teams import (
    AcceptTeamInvitation,
    AddTeamMember,
    CancelTeamInvitation,
    CreateTeam,
    DeleteTeam,
    InviteTeamMember,
    RemoveTeamMember,
    UpdateTeamMemberRole,
    UpdateTeamName,
    ValidateTeamDeletion,
)
from realtyhub.api.deps import get_current_user_context
from realtyhub.audit import AuditAction, log_team
from realtyhub.db import models, schemas
from realtyhub.db.database import get_db, transaction
from realtyhub.db.repositories import audits as audit_repo
from realtyhub.services import teams as team_service


router = APIRouter(prefix="/teams", tags=["teams"])


def _get_team(db: Session, team_id: uuid.UUID) -> models.Team:
    team = db.get(models.Team, team_id)
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


def _team_payload(db: Session, user: models.User, team: models.Team) -> schemas.TeamWithRole:
    base = schemas.Team.model_validate(team).model_dump()
    return schemas.TeamWithRole(
        **base,
        role=team_service.team_role(db, user, team),
        permissions=team_service.team_permissions(db, user, team),
        is_current=team_service.is_current_team(db, user, team),
    )


@router.get("/", response_model=List[schemas.TeamWithRole])
def list_teams(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    policies.authorize(db, user, "viewAny")
    return [_team_payload(db, user, t) for t in team_service.all_teams(db, user)]


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.TeamWithRole)
def create_team(
    payload: schemas.TeamCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = CreateTeam(db).create(user, payload.model_dump())
    return _team_payload(db, user, team)


@router.get("/{team_id}", response_model=schemas.TeamWithRole)
def get_team(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    policies.authorize(db, user, "view", team)
    return _team_payload(db, user, team)


@router.put("/{team_id}", response_model=schemas.TeamWithRole)
def update_team(
    team_id: uuid.UUID,
    payload: schemas.TeamUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = UpdateTeamName(db).update(user, _get_team(db, team_id), payload.model_dump())
    return _team_payload(db, user, team)


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    ValidateTeamDeletion(db).validate(user, team)
    DeleteTeam(db).delete(team, actor=user)
    return None


@router.put("/{team_id}/switch", response_model=schemas.TeamWithRole)
def switch_team(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    with transaction(db):
        if not team_service.switch_team(db, user, team):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You do not belong to this team")
        log_team(db, actor_user_id=user.id, team_id=team.id, action=AuditAction.TEAM_SWITCH)
    return _team_payload(db, user, team)


# ---- members ---------------------------------------------------------------------

@router.get("/{team_id}/members", response_model=List[schemas.TeamMember])
def list_members(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    policies.authorize(db, user, "view", team)
    members = [schemas.TeamMember(user_id=team.owner.id, name=team.owner.name, email=team.owner.email, role="owner")]
    for m in sorted(team.memberships, key=lambda m: m.user.name):
        members.append(schemas.TeamMember(user_id=m.user_id, name=m.user.name, email=m.user.email, role=m.role))
    return members


@router.post("/{team_id}/members", status_code=status.HTTP_201_CREATED, response_model=schemas.TeamMember)
def add_member(
    team_id: uuid.UUID,
    payload: schemas.TeamMemberCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    member = AddTeamMember(db).add(user, team, payload.email, payload.role)
    return schemas.TeamMember(
        user_id=member.id, name=member.name, email=member.email,
        role=team_service.team_role(db, member, team),
    )


@router.put("/{team_id}/members/{member_id}", response_model=schemas.TeamMember)
def update_member_role(
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    payload: schemas.TeamMemberUpdate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    membership = UpdateTeamMemberRole(db).update(user, team, member_id, payload.role)
    return schemas.TeamMember(
        user_id=membership.user_id, name=membership.user.name, email=membership.user.email, role=membership.role,
    )


@router.delete("/{team_id}/members/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    team_id: uuid.UUID,
    member_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    member = db.get(models.User, member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    RemoveTeamMember(db).remove(user, team, member)
    return None


# ---- invitations -----------------------------------------------------------------

@router.get("/{team_id}/invitations", response_model=List[schemas.TeamInvitation])
def list_invitations(
    team_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    policies.authorize(db, user, "addTeamMember", team)
    return sorted(team.invitations, key=lambda i: i.email)


@router.post("/{team_id}/invitations", status_code=status.HTTP_201_CREATED, response_model=schemas.TeamInvitation)
def create_invitation(
    team_id: uuid.UUID,
    payload: schemas.TeamInvitationCreate,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return InviteTeamMember(db).invite(user, _get_team(db, team_id), payload.email, payload.role)


@router.post("/invitations/{invitation_id}/accept", response_model=schemas.TeamWithRole)
def accept_invitation(
    invitation_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    invitation = db.get(models.TeamInvitation, invitation_id)
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    team = AcceptTeamInvitation(db).accept(user, invitation)
    return _team_payload(db, user, team)


@router.delete("/{team_id}/invitations/{invitation_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_invitation(
    team_id: uuid.UUID,
    invitation_id: uuid.UUID,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    invitation = db.get(models.TeamInvitation, invitation_id)
    if invitation is None or invitation.team_id != team_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    CancelTeamInvitation(db).cancel(user, invitation)
    return None


# ---- audit trail -----------------------------------------------------------------

@router.get("/{team_id}/audits", response_model=List[schemas.AuditLog])
def list_team_audits(
    team_id: uuid.UUID,
    action_type: Optional[str] = None,
    target_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    team = _get_team(db, team_id)
    policies.authorize(db, user, "updateTeamMember", team)
    rows = audit_repo.team_audit_trail(
        db, team.id, action_type=action_type, target_type=target_type, skip=skip, limit=limit,
    )
    return [schemas.AuditLog.model_validate(r) for r in rows]
