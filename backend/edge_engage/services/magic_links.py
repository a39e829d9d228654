# edge_engage/services/magic_links.py
"""
Sign-in links are single-use. Each emailed JWT carries a random jti whose
digest is stored here; redeeming the link stamps used_at exactly once.
Requesting a new link retires the user's outstanding ones.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from edge_engage.core.config import settings
from edge_engage.core.security import (
    create_magic_link_token,
    generate_opaque_token,
    hash_opaque_token,
    is_expired,
    utc_now,
)
from edge_engage.models.magic_link_token import MagicLinkToken
from edge_engage.models.user import User

INVALID_LINK = "Invalid or expired token"


def issue_magic_link(db: Session, user: User, redirect: str | None = None, now: datetime | None = None) -> str:
    now = now or utc_now()
    token_id = generate_opaque_token()

    # Only the latest link works.
    (
        db.query(MagicLinkToken)
        .filter(MagicLinkToken.user_id == user.id, MagicLinkToken.used_at.is_(None))
        .delete(synchronize_session=False)
    )
    db.add(
        MagicLinkToken(
            user_id=user.id,
            token_hash=hash_opaque_token(token_id),
            expires_at=now + timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES),
        )
    )
    db.commit()
    return create_magic_link_token(user.email, redirect=redirect, token_id=token_id)


def consume_magic_link(db: Session, user: User, token_id: str | None, now: datetime | None = None) -> None:
    """Raises ValueError unless this call is the one that redeems the link."""
    if not token_id:
        raise ValueError(INVALID_LINK)

    now = now or utc_now()
    record = db.query(MagicLinkToken).filter(MagicLinkToken.token_hash == hash_opaque_token(token_id)).first()
    if record is None or record.user_id != user.id or record.used_at is not None:
        raise ValueError(INVALID_LINK)
    if is_expired(record.expires_at, now):
        raise ValueError(INVALID_LINK)

    # Two tabs opening the same link: only one UPDATE matches.
    result = db.execute(
        update(MagicLinkToken)
        .where(MagicLinkToken.id == record.id, MagicLinkToken.used_at.is_(None))
        .values(used_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise ValueError(INVALID_LINK)
    db.commit()
