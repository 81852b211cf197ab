import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AuditLogBase(BaseModel):
    action_type: str
    status: str
    target_type: Optional[str] = None
    target_id: Optional[uuid.UUID] = None
    reason: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None  # Pydantic field; internal SQLAlchemy column is metadata_json


class AuditLogCreate(AuditLogBase):
    pass


class AuditLog(AuditLogBase):
    id: uuid.UUID
    team_id: Optional[uuid.UUID] = None
    actor_user_id: Optional[uuid.UUID] = None
    created_at: datetime
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias=AliasChoices("metadata_json", "metadata"))
    model_config = ConfigDict(from_attributes=True)
