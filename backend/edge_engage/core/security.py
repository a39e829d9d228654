# edge_engage/core/security.py
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from edge_engage.core.config import settings

# 32 random bytes -> 64 hex chars
OPAQUE_TOKEN_BYTES = 32


# -------------------------
# Time helpers
# -------------------------
def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite round-trips tz-aware datetimes as naive. Treat naive values as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """A credential is valid only while now < expires_at."""
    if expires_at is None:
        return True
    now = now or utc_now()
    return as_utc(expires_at) <= as_utc(now)


# -------------------------
# Opaque credentials (OAuth codes / tokens)
# -------------------------
def generate_opaque_token() -> str:
    return secrets.token_hex(OPAQUE_TOKEN_BYTES)


def hash_opaque_token(raw_token: str) -> str:
    """
    Store only a digest in DB.
    HMAC keyed by JWT_SECRET so DB leaks can't be brute-forced easily.
    """
    secret = (settings.JWT_SECRET or "").encode("utf-8")
    if not secret:
        raise RuntimeError("JWT_SECRET must be set to hash OAuth credentials.")
    return hmac.new(secret, raw_token.encode("utf-8"), hashlib.sha256).hexdigest()


# -------------------------
# JWT helpers (sessions, magic links)
# -------------------------
def _require_jwt_secret() -> None:
    if not settings.JWT_SECRET or not settings.JWT_SECRET.strip():
        raise RuntimeError("JWT_SECRET must be set (auth is required).")


def _encode(subject: str, purpose: str, expires_in: timedelta, extra: dict[str, Any] | None = None) -> str:
    _require_jwt_secret()

    now = utc_now()
    exp = now + expires_in

    payload: dict[str, Any] = {
        "sub": subject,
        "purpose": purpose,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if extra:
        payload.update(extra)

    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_session_token(user_id: int) -> str:
    """
    Session cookie value for the signed-in browser.
    subject = internal user id
    """
    return _encode(str(user_id), "session", timedelta(hours=settings.SESSION_EXPIRE_HOURS))


def create_magic_link_token(email: str, redirect: str | None = None, token_id: str | None = None) -> str:
    """
    Token used for /auth/callback?token=...
    token_id becomes the jti claim; the callback accepts each jti once.
    """
    extra: dict[str, Any] = {}
    if redirect:
        extra["redirect"] = redirect
    if token_id:
        extra["jti"] = token_id
    return _encode(
        email.strip().lower(),
        "magic_link",
        timedelta(minutes=settings.MAGIC_LINK_EXPIRE_MINUTES),
        extra,
    )


def decode_token(token: str) -> dict[str, Any]:
    _require_jwt_secret()
    # Let callers decide how to handle JWTError
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def verify_token_purpose(token: str, expected_purpose: str) -> dict[str, Any]:
    try:
        payload = decode_token(token)
    except JWTError:
        raise ValueError("Invalid or expired token")

    if payload.get("purpose") != expected_purpose:
        raise ValueError("Invalid token purpose")

    return payload
