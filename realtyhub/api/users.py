"""
User administration endpoints and the caller's own profile.
"""
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub import rbac
from realtyhub.actions.users import DeleteUserAction, StoreUserAction, UpdateUserAction
from realtyhub.api.deps import get_current_user_context, require_permission
from realtyhub.db import models, schemas
from realtyhub.db.database import get_db


router = APIRouter(prefix="/users", tags=["users"])


def _user_payload(db: Session, user: models.User) -> schemas.UserWithRoles:
    base = schemas.User.model_validate(user).model_dump()
    return schemas.UserWithRoles(
        **base,
        roles=rbac.get_role_names(user),
        permissions=sorted(rbac.get_all_permissions(db, user)),
    )


def _get_user(db: Session, user_id: uuid.UUID) -> models.User:
    user = db.get(models.User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/me", response_model=schemas.UserWithRoles)
def get_me(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return _user_payload(db, user)


@router.get("/", response_model=List[schemas.UserWithRoles])
def list_users(
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission("view users")),
):
    users = db.query(models.User).order_by(models.User.name).offset(skip).limit(min(limit, 200)).all()
    return [_user_payload(db, u) for u in users]


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=schemas.UserWithRoles)
def create_user(
    payload: schemas.UserCreate,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission("create users")),
):
    user = StoreUserAction(db, actor=actor).execute(payload.model_dump())
    return _user_payload(db, user)


@router.put("/{user_id}", response_model=schemas.UserWithRoles)
def update_user(
    user_id: uuid.UUID,
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission("edit users")),
):
    user = UpdateUserAction(db, actor=actor).execute(_get_user(db, user_id), payload.model_dump())
    return _user_payload(db, user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    actor: models.User = Depends(require_permission("delete users")),
):
    DeleteUserAction(db).execute(actor, _get_user(db, user_id))
    return None
