"""
Team actions: create, rename, membership, invitations and deletion.

Each action authorizes through the team policy, validates its input into a
named error bag and performs its writes inside a single transaction.
"""
import logging
import os
import uuid
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from realtyhub import audit, policies
from realtyhub.audit import AuditAction
from realtyhub.db import models
from realtyhub.db.database import transaction
from realtyhub.errors import AuthorizationError, NotFound, ValidationError, Validator, is_valid_email
from realtyhub.services import teams as team_service
from realtyhub.utils.team_roles import INVITABLE_ROLES, MEMBER_ROLES

logger = logging.getLogger("realtyhub.teams")


def _invitation_ttl() -> timedelta:
    return timedelta(days=int(os.getenv("INVITATION_TTL_DAYS", "7")))


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class CreateTeam:
    def __init__(self, db: Session):
        self.db = db

    def create(self, user: models.User, input: Dict[str, Any]) -> models.Team:
        policies.authorize(self.db, user, "create")

        name = input.get("name")
        v = Validator(bag="createTeam")
        if v.required("name", name):
            v.max_length("name", name, 255)
        v.validate()

        with transaction(self.db):
            team = models.Team(name=name.strip(), personal_team=False, user_id=user.id)
            self.db.add(team)
            self.db.flush()
            team_service.switch_team(self.db, user, team)
            audit.log_team(self.db, actor_user_id=user.id, team_id=team.id, action=AuditAction.TEAM_CREATE, name=team.name)
        logger.info("team_created: team=%s owner=%s", team.id, user.id)
        return team


class UpdateTeamName:
    def __init__(self, db: Session):
        self.db = db

    def update(self, user: models.User, team: models.Team, input: Dict[str, Any]) -> models.Team:
        policies.authorize(self.db, user, "update", team)

        v = Validator(bag="updateTeamName")
        for field, limit in (("name", 255), ("timezone", 255), ("language", 50)):
            value = input.get(field)
            if v.required(field, value):
                v.max_length(field, value, limit)
        v.validate()

        with transaction(self.db):
            team.name = input["name"]
            team.timezone = input["timezone"]
            team.language = input["language"]
            audit.log_team(self.db, actor_user_id=user.id, team_id=team.id, action=AuditAction.TEAM_UPDATE, name=team.name)
        return team


class AddTeamMember:
    def __init__(self, db: Session):
        self.db = db

    def add(self, user: models.User, team: models.Team, email: str, role: Optional[str] = None) -> models.User:
        policies.authorize(self.db, user, "addTeamMember", team)

        email = _normalize_email(email)
        self._validate(team, email, role)

        new_member = self.db.query(models.User).filter(models.User.email == email).one()
        with transaction(self.db):
            self.db.add(models.TeamMembership(team_id=team.id, user_id=new_member.id, role=role))
            self.db.flush()
            audit.log_member(
                self.db, actor_user_id=user.id, team_id=team.id, member_user_id=new_member.id,
                action=AuditAction.MEMBER_ADD, role=role,
            )
        self.db.expire(team, ["users", "memberships"])
        # Owner notification is delivered through the log stream
        logger.info(
            "team_member_added: team=%s member=%s role=%s notify_owner=%s",
            team.id, new_member.id, role, team.owner.email if team.owner else None,
        )
        return new_member

    def _validate(self, team: models.Team, email: str, role: str) -> None:
        v = Validator(bag="addTeamMember")
        if v.required("email", email):
            v.email("email", email)
            if not v.has("email"):
                exists = self.db.query(models.User.id).filter(models.User.email == email).first()
                v.add_if(exists is None, "email", "We were unable to find a registered user with this email address.")
        if v.required("role", role):
            v.one_of("role", role, MEMBER_ROLES)
        v.add_if(bool(email) and team.has_user_with_email(email), "email", "This user already belongs to the team.")
        v.validate()


class InviteTeamMember:
    def __init__(self, db: Session):
        self.db = db

    def invite(self, user: models.User, team: models.Team, email: str, role: Optional[str] = None) -> models.TeamInvitation:
        policies.authorize(self.db, user, "addTeamMember", team)

        email = _normalize_email(email)
        cutoff = datetime.now(UTC) - _invitation_ttl()
        self._validate(team, email, role, cutoff)

        with transaction(self.db):
            # Expired invitations for the same address are replaced
            (
                self.db.query(models.TeamInvitation)
                .filter(models.TeamInvitation.team_id == team.id, models.TeamInvitation.email == email)
                .delete(synchronize_session="fetch")
            )
            invitation = models.TeamInvitation(team_id=team.id, email=email, role=role, invited_by_user_id=user.id)
            self.db.add(invitation)
            self.db.flush()
            audit.log(
                self.db, action=AuditAction.INVITATION_CREATE, target_type="team_invitation",
                target_id=invitation.id, actor_user_id=user.id, team_id=team.id,
                metadata={"email": email, "role": role},
            )
        logger.info("team_invitation_created: team=%s email=%s role=%s", team.id, email, role)
        return invitation

    def _validate(self, team: models.Team, email: str, role: str, cutoff: datetime) -> None:
        v = Validator(bag="addTeamMember")
        if not email:
            v.add("email", "The email address is required.")
        elif len(email) > 255:
            v.add("email", "The email may not be greater than 255 characters.")
        else:
            v.add_if(not is_valid_email(email), "email", "The email address must be valid.")
        if v.required("role", role):
            v.one_of("role", role, INVITABLE_ROLES)

        if email:
            existing = self.db.query(models.User).filter(models.User.email == email).first()
            if existing is not None and team_service.belongs_to_team(self.db, existing, team):
                v.add("email", "This user is already a member of the team.")
            pending = (
                self.db.query(models.TeamInvitation)
                .filter(
                    models.TeamInvitation.team_id == team.id,
                    models.TeamInvitation.email == email,
                    models.TeamInvitation.created_at > cutoff,
                )
                .first()
            )
            v.add_if(pending is not None, "email", "An invitation has already been sent to this email address.")
        v.validate()


class AcceptTeamInvitation:
    def __init__(self, db: Session):
        self.db = db

    def accept(self, user: models.User, invitation: models.TeamInvitation) -> models.Team:
        if _normalize_email(user.email) != _normalize_email(invitation.email):
            logger.warning("team_invitation_mismatch: user=%s invitation=%s", user.id, invitation.id)
            raise AuthorizationError("This invitation was sent to a different email address.")

        cutoff = datetime.now(UTC) - _invitation_ttl()
        still_valid = (
            self.db.query(models.TeamInvitation.id)
            .filter(models.TeamInvitation.id == invitation.id, models.TeamInvitation.created_at > cutoff)
            .first()
        )
        if still_valid is None:
            logger.info("team_invitation_expired: invitation=%s", invitation.id)
            raise ValidationError.with_messages(
                {"invitation": "This invitation has expired."}, bag="acceptTeamInvitation"
            )

        team = invitation.team
        with transaction(self.db):
            if not team_service.belongs_to_team(self.db, user, team):
                self.db.add(models.TeamMembership(team_id=team.id, user_id=user.id, role=invitation.role))
                self.db.flush()
            audit.log(
                self.db, action=AuditAction.INVITATION_ACCEPT, target_type="team_invitation",
                target_id=invitation.id, actor_user_id=user.id, team_id=team.id,
                metadata={"role": invitation.role},
            )
            self.db.delete(invitation)
        self.db.expire(team, ["users", "memberships", "invitations"])
        logger.info("team_invitation_accepted: team=%s user=%s", team.id, user.id)
        return team


class CancelTeamInvitation:
    def __init__(self, db: Session):
        self.db = db

    def cancel(self, user: models.User, invitation: models.TeamInvitation) -> None:
        team = invitation.team
        policies.authorize(self.db, user, "removeTeamMember", team)
        with transaction(self.db):
            audit.log(
                self.db, action=AuditAction.INVITATION_REVOKE, target_type="team_invitation",
                target_id=invitation.id, actor_user_id=user.id, team_id=team.id,
                metadata={"email": invitation.email},
            )
            self.db.delete(invitation)


class UpdateTeamMemberRole:
    def __init__(self, db: Session):
        self.db = db

    def update(self, user: models.User, team: models.Team, member_id: uuid.UUID, role: str) -> models.TeamMembership:
        policies.authorize(self.db, user, "updateTeamMember", team)

        v = Validator(bag="updateTeamMember")
        if v.required("role", role):
            v.one_of("role", role, MEMBER_ROLES)
        v.validate()

        membership = self.db.get(models.TeamMembership, (team.id, member_id))
        if membership is None:
            raise NotFound("Team member not found")
        with transaction(self.db):
            previous = membership.role
            membership.role = role
            audit.log_member(
                self.db, actor_user_id=user.id, team_id=team.id, member_user_id=member_id,
                action=AuditAction.MEMBER_ROLE_CHANGE, role=role,
            )
        logger.info("team_member_role_changed: team=%s member=%s %s->%s", team.id, member_id, previous, role)
        return membership


class RemoveTeamMember:
    def __init__(self, db: Session):
        self.db = db

    def remove(self, user: models.User, team: models.Team, member: models.User) -> None:
        if user.id != member.id:
            policies.authorize(self.db, user, "removeTeamMember", team)

        if team_service.owns_team(member, team):
            raise ValidationError.with_messages(
                {"team": "You may not leave a team that you created."}, bag="removeTeamMember"
            )

        membership = team_service.get_membership(self.db, member, team)
        if membership is None:
            raise NotFound("Team member not found")
        with transaction(self.db):
            self.db.delete(membership)
            if member.current_team_id == team.id:
                member.current_team_id = None
            audit.log_member(
                self.db, actor_user_id=user.id, team_id=team.id, member_user_id=member.id,
                action=AuditAction.MEMBER_REMOVE,
            )
        self.db.expire(team, ["users", "memberships"])
        logger.info("team_member_removed: team=%s member=%s by=%s", team.id, member.id, user.id)


class ValidateTeamDeletion:
    def __init__(self, db: Session):
        self.db = db

    def validate(self, user: models.User, team: models.Team) -> None:
        policies.authorize(self.db, user, "delete", team)
        if team.personal_team:
            raise ValidationError.with_messages(
                {"team": "You may not delete your personal team."}, bag="deleteTeam"
            )


class DeleteTeam:
    def __init__(self, db: Session):
        self.db = db

    def delete(self, team: models.Team, actor: Optional[models.User] = None) -> None:
        team_id = team.id
        with transaction(self.db):
            audit.log_team(
                self.db, actor_user_id=actor.id if actor else None, team_id=team_id,
                action=AuditAction.TEAM_DELETE, name=team.name,
            )
            purge_team(self.db, team)
        logger.info("team_deleted: team=%s", team_id)


def purge_team(db: Session, team: models.Team) -> None:
    """Detach everyone from the team and delete it with its invitations and tenant rows."""
    (
        db.query(models.User)
        .filter(models.User.current_team_id == team.id)
        .update({models.User.current_team_id: None}, synchronize_session="fetch")
    )
    for membership in list(team.memberships):
        db.delete(membership)
    for invitation in list(team.invitations):
        db.delete(invitation)
    db.flush()
    _delete_tenant_rows(db, team.id)
    db.delete(team)
    db.flush()


# Children before parents
_TENANT_MODELS = (
    models.Inquiry,
    models.Comment,
    models.Post,
    models.Media,
    models.Tag,
    models.Category,
    models.Property,
    models.Agent,
    models.Location,
    models.PropertyType,
)


def _delete_tenant_rows(db: Session, team_id: uuid.UUID) -> None:
    for model in _TENANT_MODELS:
        rows = (
            db.query(model)
            .filter(model.team_id == team_id)
            .execution_options(without_team_scope=True)
            .all()
        )
        for row in rows:
            db.delete(row)
        db.flush()
