"""
Role and permission administration endpoints.

Everything here requires the ``assign roles`` permission.
"""
import uuid
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from realtyhub.actions.roles import DeleteRoleAction, StoreRoleAction, UpdateRoleAction
from realtyhub.api.deps import require_permission
from realtyhub.db import models, schemas
from realtyhub.db.database import get_db


router = APIRouter(prefix="/roles", tags=["roles"])
permissions_router = APIRouter(prefix="/permissions", tags=["roles"])

PERMISSION = "assign roles"


def _get_role(db: Session, role_id: uuid.UUID) -> models.Role:
    role = db.get(models.Role, role_id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found")
    return role


@router.get("/", response_model=List[schemas.Role])
def list_roles(
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    return (
        db.query(models.Role)
        .options(selectinload(models.Role.permissions))
        .order_by(models.Role.name)
        .all()
    )


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.Role)
def create_role(
    payload: schemas.RoleCreate,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    return StoreRoleAction(db, actor=actor).execute(payload.model_dump())


@router.get("/{role_id}", response_model=schemas.Role)
def get_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    return _get_role(db, role_id)


@router.put("/{role_id}", response_model=schemas.Role)
def update_role(
    role_id: uuid.UUID,
    payload: schemas.RoleUpdate,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    data = payload.model_dump(exclude_unset=True)
    return UpdateRoleAction(db, actor=actor).execute(_get_role(db, role_id), data)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(
    role_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    DeleteRoleAction(db, actor=actor).execute(_get_role(db, role_id))
    return None


@permissions_router.get("/", response_model=schemas.GroupedPermissions)
def list_permissions(
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission(PERMISSION)),
):
    groups: Dict[str, List[models.Permission]] = {}
    for permission in db.query(models.Permission).order_by(models.Permission.group, models.Permission.name):
        groups.setdefault(permission.group or "other", []).append(permission)
    return {"groups": groups}
