# edge_engage/services/token_exchange.py
"""
Authorization-code redemption.

Order of checks: grant type, required fields, exact lookup, expiry (expired
rows are deleted), used flag, then the atomic mark-used. The mark-used and
the token insert share one transaction so a failed insert leaves the code
redeemable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edge_engage.core.config import settings
from edge_engage.core.errors import (
    OAuthError,
    OAuthErrorCode,
    invalid_grant,
    invalid_request,
    server_error,
)
from edge_engage.core.security import generate_opaque_token, is_expired, utc_now
from edge_engage.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

AUTHORIZATION_CODE_GRANT = "authorization_code"
TOKEN_TYPE = "Bearer"


@dataclass(frozen=True)
class TokenGrant:
    access_token: str
    refresh_token: str
    expires_in: int
    scope: str
    token_type: str = TOKEN_TYPE

    def to_response(self) -> dict:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
            "refresh_token": self.refresh_token,
            "scope": self.scope,
        }


def exchange_authorization_code(
    db: Session,
    *,
    grant_type: str | None,
    code: str | None,
    client_id: str | None,
    redirect_uri: str | None,
    now: datetime | None = None,
) -> TokenGrant:
    if grant_type != AUTHORIZATION_CODE_GRANT:
        raise OAuthError(
            OAuthErrorCode.UNSUPPORTED_GRANT_TYPE,
            "Only authorization_code grant type is supported",
        )

    if not code or not client_id or not redirect_uri:
        raise invalid_request("Missing required parameters")

    now = now or utc_now()
    store = CredentialStore(db)

    try:
        authorization = store.find_authorization(code, client_id, redirect_uri)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Authorization code lookup failed: client_id=%s", client_id)
        raise server_error("An unexpected error occurred")

    if authorization is None:
        logger.info("Rejected token exchange (no matching code): client_id=%s", client_id)
        raise invalid_grant("Invalid or expired authorization code")

    if is_expired(authorization.expires_at, now):
        try:
            store.delete_authorization(authorization)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to delete expired authorization code id=%s", authorization.id)
        logger.info("Rejected token exchange (expired code): client_id=%s", client_id)
        raise invalid_grant("Authorization code has expired")

    if authorization.used:
        logger.warning(
            "Rejected token exchange (code reuse): client_id=%s authorization_id=%s",
            client_id,
            authorization.id,
        )
        raise invalid_grant("Authorization code has already been used")

    authorization_id = authorization.id
    user_id = authorization.user_id
    scope = authorization.scope or ""

    try:
        if not store.mark_authorization_used(authorization_id, now):
            db.rollback()
            logger.warning(
                "Rejected token exchange (lost redemption race): client_id=%s authorization_id=%s",
                client_id,
                authorization_id,
            )
            raise invalid_grant("Authorization code has already been used")

        access_token = generate_opaque_token()
        refresh_token = generate_opaque_token()
        expires_in = settings.OAUTH_ACCESS_TOKEN_TTL_SECONDS

        store.create_token_pair(
            raw_access_token=access_token,
            raw_refresh_token=refresh_token,
            user_id=user_id,
            client_id=client_id,
            scope=scope,
            expires_at=now + timedelta(seconds=expires_in),
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error storing token: client_id=%s authorization_id=%s", client_id, authorization_id)
        raise server_error("Failed to generate access token")

    logger.info("Issued access token: user_id=%s client_id=%s scope=%r", user_id, client_id, scope)
    return TokenGrant(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires_in,
        scope=scope,
    )
