"""
Request identity.

The service sits behind an authenticating proxy that forwards the signed-in
user as ``X-Auth-Request-*`` (oauth2-proxy) or ``X-Forwarded-*`` headers.
The first request from a new address registers the user.
"""
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from realtyhub.actions.users import admin_emails, create_user
from realtyhub.db import models
from realtyhub.db.database import transaction


def normalize_email(email: Optional[str]) -> Optional[str]:
    cleaned = (email or "").strip().lower()
    return cleaned or None


def resolve_identity_from_headers(
    x_auth_request_user: Optional[str],
    x_auth_request_email: Optional[str],
    x_forwarded_user: Optional[str],
    x_forwarded_email: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(name, email)``; oauth2-proxy headers win over forwarded ones."""
    if x_auth_request_email or x_auth_request_user:
        return x_auth_request_user or x_forwarded_user, normalize_email(x_auth_request_email or x_forwarded_email)
    return x_forwarded_user, normalize_email(x_forwarded_email)


def get_or_create_user(db: Session, email: str, name: Optional[str] = None) -> models.User:
    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None:
        with transaction(db):
            user = create_user(db, name=name or email.split("@")[0], email=email, verified=True)
        db.refresh(user)
    elif not user.is_superadmin and email in admin_emails():
        # ADMIN_EMAILS may have changed since the user registered
        with transaction(db):
            user.is_superadmin = True
        db.refresh(user)
    return user
