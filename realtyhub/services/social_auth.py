"""
Social login accounts.

Provider credentials are read from ``SOCIAL_<PROVIDER>_CLIENT_ID`` and
``SOCIAL_<PROVIDER>_CLIENT_SECRET``; a provider is offered only when both
are set. The OAuth redirect/callback exchange happens in front of this
service, which receives the resulting ``SocialProfile``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from realtyhub import audit, rbac
from realtyhub.actions.users import create_user
from realtyhub.audit import AuditAction
from realtyhub.db import models
from realtyhub.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ["google", "github", "facebook", "twitter", "linkedin"]

PROVIDER_LABELS = {
    "google": "Continue with Google",
    "github": "Continue with GitHub",
    "facebook": "Continue with Facebook",
    "twitter": "Continue with Twitter",
    "linkedin": "Continue with LinkedIn",
}

DEFAULT_SOCIAL_ROLE = "user"


@dataclass(frozen=True)
class SocialProfile:
    """User details returned by a provider after the OAuth exchange."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None

    def metadata(self) -> Dict[str, Any]:
        return {
            "avatar": self.avatar,
            "email": self.email,
            "name": self.name,
            "nickname": self.nickname,
        }

    def expires_at(self) -> Optional[datetime]:
        if not self.expires_in:
            return None
        return datetime.now(UTC) + timedelta(seconds=self.expires_in)


def is_provider_configured(provider: str) -> bool:
    key = provider.upper()
    return bool(os.getenv(f"SOCIAL_{key}_CLIENT_ID")) and bool(os.getenv(f"SOCIAL_{key}_CLIENT_SECRET"))


def available_providers() -> List[Dict[str, str]]:
    return [
        {"name": p, "label": PROVIDER_LABELS[p], "icon": p}
        for p in SUPPORTED_PROVIDERS
        if is_provider_configured(p)
    ]


def validate_provider(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise NotFound(f"Unsupported social provider: {provider}")


# ---- per-user helpers ------------------------------------------------------------

def get_provider(db: Session, user: models.User, provider: str) -> Optional[models.SocialAccount]:
    return (
        db.query(models.SocialAccount)
        .filter(models.SocialAccount.user_id == user.id, models.SocialAccount.provider == provider)
        .first()
    )


def has_provider(db: Session, user: models.User, provider: str) -> bool:
    return get_provider(db, user, provider) is not None


def _account_count(db: Session, user: models.User) -> int:
    return db.query(models.SocialAccount).filter(models.SocialAccount.user_id == user.id).count()


def create_or_update_provider(db: Session, user: models.User, provider: str, profile: SocialProfile) -> models.SocialAccount:
    account = get_provider(db, user, provider)
    if account is None:
        account = models.SocialAccount(user_id=user.id, provider=provider)
        db.add(account)
    account.provider_id = str(profile.id)
    account.access_token = profile.token
    account.refresh_token = profile.refresh_token
    account.expires_at = profile.expires_at()
    account.metadata_json = profile.metadata()
    db.flush()
    return account


def is_social_only(db: Session, user: models.User) -> bool:
    return not user.has_password and _account_count(db, user) > 0


def can_unlink_provider(db: Session, user: models.User, provider: str) -> bool:
    # The last login method of a password-less user stays linked
    if is_social_only(db, user) and _account_count(db, user) == 1:
        return False
    return has_provider(db, user, provider)


def unlink_provider(db: Session, user: models.User, provider: str) -> bool:
    if not can_unlink_provider(db, user, provider):
        return False
    deleted = (
        db.query(models.SocialAccount)
        .filter(models.SocialAccount.user_id == user.id, models.SocialAccount.provider == provider)
        .delete(synchronize_session="fetch")
    )
    if deleted:
        audit.log_user(db, actor_user_id=user.id, user_id=user.id, action=AuditAction.SOCIAL_UNLINK, metadata={"provider": provider})
    return deleted > 0


def linked_providers(db: Session, user: models.User) -> List[Dict[str, Any]]:
    accounts = (
        db.query(models.SocialAccount)
        .filter(models.SocialAccount.user_id == user.id)
        .order_by(models.SocialAccount.created_at)
        .all()
    )
    return [
        {
            "provider": a.provider,
            "linked_at": a.created_at,
            "can_unlink": can_unlink_provider(db, user, a.provider),
            "metadata": a.metadata_json or {},
        }
        for a in accounts
    ]


def update_from_social_provider(db: Session, user: models.User, profile: SocialProfile) -> None:
    """Fill in the user's name or email when they are empty."""
    if not user.email and profile.email:
        user.email = profile.email.strip().lower()
    if not user.name and profile.name:
        user.name = profile.name
    db.flush()


# ---- login -----------------------------------------------------------------------

def login_or_register(db: Session, provider: str, profile: SocialProfile) -> models.User:
    """Resolve the local user for a provider login, registering one if needed.

    Lookup order: the linked social account, then a user with the same email,
    then a new password-less user with a personal team and the default role.
    The caller owns the transaction.
    """
    validate_provider(provider)

    account = (
        db.query(models.SocialAccount)
        .filter(models.SocialAccount.provider == provider, models.SocialAccount.provider_id == str(profile.id))
        .first()
    )
    if account is not None:
        user = account.user
        create_or_update_provider(db, user, provider, profile)
        if profile.name:
            user.name = profile.name
        db.flush()
        logger.info("social_login: provider=%s user=%s", provider, user.id)
        return user

    email = (profile.email or "").strip().lower()
    if not email:
        raise ValidationError.with_messages({"social": "The provider did not return an email address."})

    user = db.query(models.User).filter(models.User.email == email).first()
    if user is None:
        user = create_user(db, name=profile.name or "Unknown User", email=email, verified=True)
        try:
            rbac.assign_role(db, user, DEFAULT_SOCIAL_ROLE)
        except NotFound:
            logger.warning("social_register: default role '%s' missing; run acl:setup", DEFAULT_SOCIAL_ROLE)
        logger.info("social_register: provider=%s user=%s", provider, user.id)
    else:
        update_from_social_provider(db, user, profile)

    create_or_update_provider(db, user, provider, profile)
    audit.log_user(db, actor_user_id=user.id, user_id=user.id, action=AuditAction.SOCIAL_LINK, metadata={"provider": provider})
    return user
