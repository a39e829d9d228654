# edge_engage/services/credential_store.py
"""
Persistence for OAuth authorization codes and token pairs.

Responsibilities:
- Hash raw codes/tokens before they touch the database
- Exact-match code lookup (code + client_id + redirect_uri)
- Atomic "mark used WHERE used = false" transition for codes
- Token pair insert, lookup and revocation

Writes only flush; transaction boundaries belong to the calling service.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from edge_engage.core.security import hash_opaque_token
from edge_engage.models.oauth_authorization import OAuthAuthorization
from edge_engage.models.oauth_token import OAuthToken


class CredentialStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    # -----------------------------
    # Authorization codes
    # -----------------------------
    def create_authorization(
        self,
        *,
        raw_code: str,
        user_id: int,
        client_id: str,
        redirect_uri: str,
        scope: str,
        expires_at: datetime,
    ) -> OAuthAuthorization:
        authorization = OAuthAuthorization(
            code_hash=hash_opaque_token(raw_code),
            user_id=user_id,
            client_id=client_id,
            redirect_uri=redirect_uri,
            scope=scope,
            expires_at=expires_at,
            used=False,
            used_at=None,
        )
        self.db.add(authorization)
        self.db.flush()
        return authorization

    def find_authorization(self, raw_code: str, client_id: str, redirect_uri: str) -> OAuthAuthorization | None:
        return (
            self.db.query(OAuthAuthorization)
            .filter(
                OAuthAuthorization.code_hash == hash_opaque_token(raw_code),
                OAuthAuthorization.client_id == client_id,
                OAuthAuthorization.redirect_uri == redirect_uri,
            )
            .first()
        )

    def delete_authorization(self, authorization: OAuthAuthorization) -> None:
        self.db.delete(authorization)
        self.db.flush()

    def mark_authorization_used(self, authorization_id: int, now: datetime) -> bool:
        """
        Compare-and-swap on the used flag.

        Returns True only for the caller whose UPDATE flipped used false -> true.
        Concurrent redeemers block on the row lock and then match zero rows.
        """
        result = self.db.execute(
            update(OAuthAuthorization)
            .where(
                OAuthAuthorization.id == authorization_id,
                OAuthAuthorization.used.is_(False),
            )
            .values(used=True, used_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # -----------------------------
    # Token pairs
    # -----------------------------
    def create_token_pair(
        self,
        *,
        raw_access_token: str,
        raw_refresh_token: str,
        user_id: int,
        client_id: str,
        scope: str,
        expires_at: datetime,
    ) -> OAuthToken:
        token = OAuthToken(
            access_token_hash=hash_opaque_token(raw_access_token),
            refresh_token_hash=hash_opaque_token(raw_refresh_token),
            user_id=user_id,
            client_id=client_id,
            scope=scope,
            expires_at=expires_at,
            revoked_at=None,
        )
        self.db.add(token)
        self.db.flush()
        return token

    def find_by_access_token(self, raw_access_token: str) -> OAuthToken | None:
        return (
            self.db.query(OAuthToken)
            .filter(OAuthToken.access_token_hash == hash_opaque_token(raw_access_token))
            .first()
        )

    def find_by_any_token(self, raw_token: str) -> OAuthToken | None:
        digest = hash_opaque_token(raw_token)
        return (
            self.db.query(OAuthToken)
            .filter(or_(OAuthToken.access_token_hash == digest, OAuthToken.refresh_token_hash == digest))
            .first()
        )

    def revoke_token(self, token: OAuthToken, now: datetime) -> None:
        if token.revoked_at is None:
            token.revoked_at = now
            self.db.flush()
