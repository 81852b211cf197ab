import uuid
from typing import Dict, List
from pydantic import BaseModel, ConfigDict


class PermissionBase(BaseModel):
    name: str
    group: str | None = None
    guard_name: str = "web"


class Permission(PermissionBase):
    id: uuid.UUID
    model_config = ConfigDict(from_attributes=True)


class RoleBase(BaseModel):
    name: str
    display_name: str | None = None
    description: str | None = None
    guard_name: str = "web"


class RoleCreate(RoleBase):
    permissions: List[uuid.UUID] = []


class RoleUpdate(BaseModel):
    name: str | None = None
    display_name: str | None = None
    description: str | None = None
    guard_name: str | None = None
    # None leaves permissions alone; an empty list removes all of them
    permissions: List[uuid.UUID] | None = None


class Role(RoleBase):
    id: uuid.UUID
    is_default: bool
    permissions: List[Permission] = []
    model_config = ConfigDict(from_attributes=True)


class GroupedPermissions(BaseModel):
    groups: Dict[str, List[Permission]]
