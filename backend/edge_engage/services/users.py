# edge_engage/services/users.py
"""
Users are keyed by lowercased email. There is no registration step: the
first magic-link request for an address creates the account.
"""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from edge_engage.models.user import User

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 100
FALLBACK_NAME = "Engage User"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def display_name(name: str | None, email: str) -> str:
    """Explicit name if given, else the email local part."""
    candidate = (name or "").strip() or email.partition("@")[0]
    return candidate[:NAME_MAX_LENGTH] or FALLBACK_NAME


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).one_or_none()


def provision_user(db: Session, email: str, *, full_name: str | None = None) -> User:
    address = normalize_email(email)
    if not address:
        raise ValueError("email is required")

    user = User(email=address, full_name=display_name(full_name, address), role="member", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Provisioned user on first sign-in: id=%s email=%s", user.id, address)
    return user


def ensure_user(db: Session, email: str) -> User:
    return get_user_by_email(db, email) or provision_user(db, email)
