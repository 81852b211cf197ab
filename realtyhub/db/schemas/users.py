import uuid
from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict


class UserBase(BaseModel):
    name: str
    email: str


class UserCreate(UserBase):
    password: str
    roles: List[uuid.UUID] = []


class UserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    # Empty or missing keeps the current password
    password: str | None = None
    # Missing or empty removes every role
    roles: List[uuid.UUID] | None = None


class User(UserBase):
    id: uuid.UUID
    is_superadmin: bool
    is_active: bool
    current_team_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserWithRoles(User):
    roles: List[str] = []
    permissions: List[str] = []
