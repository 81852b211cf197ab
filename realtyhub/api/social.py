"""
Social login endpoints: configured providers and the caller's linked accounts.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from realtyhub.api.deps import get_current_user_context
from realtyhub.db.database import get_db, transaction
from realtyhub.services import social_auth


router = APIRouter(prefix="/auth/social", tags=["auth"])


@router.get("/providers")
def list_providers():
    return {"providers": social_auth.available_providers()}


@router.get("/linked")
def list_linked_providers(
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    return {
        "providers": social_auth.linked_providers(db, user),
        "has_password": user.has_password,
    }


@router.delete("/{provider}")
def unlink_provider(
    provider: str,
    db: Session = Depends(get_db),
    user_context=Depends(get_current_user_context),
):
    user, _ = user_context
    social_auth.validate_provider(provider)
    if not social_auth.has_provider(db, user, provider):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No linked account found for this provider.")
    with transaction(db):
        unlinked = social_auth.unlink_provider(db, user, provider)
    if not unlinked:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You cannot unlink your only login method. Set a password first.",
        )
    return {"provider": provider, "unlinked": True}
