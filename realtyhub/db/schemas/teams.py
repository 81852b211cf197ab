import uuid
from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict


class TeamBase(BaseModel):
    name: str


class TeamCreate(TeamBase):
    pass


class TeamUpdate(TeamBase):
    timezone: str
    language: str


class Team(TeamBase):
    id: uuid.UUID
    user_id: uuid.UUID
    personal_team: bool
    timezone: str | None = None
    language: str | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TeamWithRole(Team):
    role: str | None = None
    permissions: List[str] = []
    is_current: bool = False


class TeamMemberCreate(BaseModel):
    email: str
    role: str | None = None


class TeamMemberUpdate(BaseModel):
    role: str


class TeamMember(BaseModel):
    user_id: uuid.UUID
    name: str
    email: str
    role: str


class TeamInvitationCreate(BaseModel):
    email: str
    role: str | None = None


class TeamInvitation(BaseModel):
    id: uuid.UUID
    team_id: uuid.UUID
    email: str
    role: str
    invited_by_user_id: uuid.UUID | None = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
