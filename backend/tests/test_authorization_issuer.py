from __future__ import annotations

import re
from datetime import timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from edge_engage.auth.consent import ConsentDecision, ConsentRequest
from edge_engage.core.errors import OAuthError, OAuthErrorCode
from edge_engage.core.security import as_utc, hash_opaque_token, utc_now
from edge_engage.models.oauth_authorization import OAuthAuthorization
from edge_engage.services import authorization_issuer
from edge_engage.services.credential_store import CredentialStore

HEX64 = re.compile(r"^[0-9a-f]{64}$")


def _consent(**overrides) -> ConsentRequest:
    params = {"client_id": "c1", "redirect_uri": "https://app/cb", "scope": "read profile", "state": "xyz"}
    params.update(overrides)
    return ConsentRequest.from_params(params)


def test_issue_stores_digest_with_ten_minute_expiry(db_session, users):
    user_a, _ = users
    now = utc_now()

    raw = authorization_issuer.issue_authorization_code(db_session, user_a, _consent(), now=now)

    assert HEX64.match(raw)
    row = db_session.query(OAuthAuthorization).one()
    assert row.code_hash == hash_opaque_token(raw)
    assert row.code_hash != raw
    assert row.user_id == user_a.id
    assert row.client_id == "c1"
    assert row.redirect_uri == "https://app/cb"
    assert row.scope == "read profile"
    assert row.used is False
    assert row.used_at is None
    assert as_utc(row.expires_at) == now + timedelta(seconds=600)


def test_codes_are_unique(db_session, users):
    user_a, _ = users
    codes = {authorization_issuer.issue_authorization_code(db_session, user_a, _consent()) for _ in range(5)}
    assert len(codes) == 5


def test_respond_approve_redirects_with_code(db_session, users):
    user_a, _ = users

    target = authorization_issuer.respond_to_consent(db_session, user_a, _consent(), ConsentDecision.APPROVE)

    m = re.match(r"^https://app/cb\?code=([0-9a-f]{64})&state=xyz$", target.url)
    assert m is not None
    assert db_session.query(OAuthAuthorization).count() == 1


def test_respond_deny_creates_no_code(db_session, users):
    user_a, _ = users

    target = authorization_issuer.respond_to_consent(db_session, user_a, _consent(), ConsentDecision.DENY)

    assert target.url == "https://app/cb?error=access_denied&error_description=User%20denied%20access&state=xyz"
    assert db_session.query(OAuthAuthorization).count() == 0


def test_respond_missing_client_fails_without_redirect(db_session, users):
    user_a, _ = users

    with pytest.raises(OAuthError) as exc:
        authorization_issuer.respond_to_consent(
            db_session, user_a, _consent(redirect_uri=None), ConsentDecision.APPROVE
        )

    assert exc.value.code is OAuthErrorCode.INVALID_REQUEST
    assert db_session.query(OAuthAuthorization).count() == 0


def test_store_failure_returns_no_code(db_session, users, monkeypatch):
    user_a, _ = users

    def _boom(self, **kwargs):
        raise SQLAlchemyError("insert failed")

    monkeypatch.setattr(CredentialStore, "create_authorization", _boom)

    with pytest.raises(OAuthError) as exc:
        authorization_issuer.respond_to_consent(db_session, user_a, _consent(), ConsentDecision.APPROVE)

    assert exc.value.code is OAuthErrorCode.SERVER_ERROR
    assert exc.value.description == "Failed to grant authorization"
    assert "insert failed" not in exc.value.description
    assert db_session.query(OAuthAuthorization).count() == 0
