# edge_engage/services/userinfo.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edge_engage.core.errors import invalid_token, server_error
from edge_engage.core.security import is_expired, utc_now
from edge_engage.models.oauth_token import OAuthToken
from edge_engage.models.user import User
from edge_engage.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

PROFILE_SCOPES = frozenset({"profile", "read"})
PHONE_SCOPE = "phone"


def parse_bearer_token(authorization_header: str | None) -> str:
    header = authorization_header or ""
    # Case-sensitive scheme, as issued in token_type
    if not header.startswith("Bearer "):
        raise invalid_token("Missing or invalid Authorization header")
    token = header[len("Bearer "):].strip()
    if not token:
        raise invalid_token("Missing or invalid Authorization header")
    return token


def resolve_access_token(db: Session, raw_access_token: str, *, now: datetime | None = None) -> OAuthToken:
    try:
        token = CredentialStore(db).find_by_access_token(raw_access_token)
    except SQLAlchemyError:
        logger.exception("Access token lookup failed")
        raise server_error("An unexpected error occurred")

    if token is None:
        raise invalid_token("Invalid access token")
    if token.revoked_at is not None:
        raise invalid_token("Access token has been revoked")
    if is_expired(token.expires_at, now or utc_now()):
        raise invalid_token("Access token has expired")
    return token


def build_claims(user: User, scopes: list[str]) -> dict[str, Any]:
    granted = set(scopes)
    claims: dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
    }
    if granted & PROFILE_SCOPES:
        claims["name"] = user.full_name
        claims["picture"] = user.avatar_url
    if PHONE_SCOPE in granted:
        claims["phone_number"] = user.phone_number
    return claims


def get_userinfo(db: Session, authorization_header: str | None, *, now: datetime | None = None) -> dict[str, Any]:
    token = resolve_access_token(db, parse_bearer_token(authorization_header), now=now)

    try:
        user = db.query(User).filter(User.id == token.user_id).first()
    except SQLAlchemyError:
        logger.exception("User lookup failed for token id=%s", token.id)
        user = None

    if user is None:
        # A live token should never outlive its user.
        logger.error("Access token id=%s references missing user_id=%s", token.id, token.user_id)
        raise server_error("Failed to retrieve user information")

    return build_claims(user, token.scopes)
