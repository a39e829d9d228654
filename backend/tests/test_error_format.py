from __future__ import annotations

import pytest

from edge_engage.core.errors import OAuthError, OAuthErrorCode


def _assert_error_shape(res, *, error: str | None = None):
    data = res.json()
    assert isinstance(data, dict)
    assert isinstance(data.get("error"), str) and data["error"]
    assert isinstance(data.get("message"), str) and data["message"]
    if error is not None:
        assert data["error"] == error


def _assert_oauth_shape(res, *, error: str):
    data = res.json()
    assert set(data) == {"error", "error_description"}
    assert data["error"] == error
    assert isinstance(data["error_description"], str) and data["error_description"]
    assert res.headers["cache-control"] == "no-store"


def test_error_shape_401_consent_without_session(anon_client):
    res = anon_client.post("/oauth/consent", data={"decision": "approve"})
    assert res.status_code == 401
    _assert_error_shape(res, error="UNAUTHORIZED")


def test_error_shape_404_project_not_found(client):
    res = client.get("/projects/999999")
    assert res.status_code == 404
    _assert_error_shape(res, error="NOT_FOUND")


def test_error_shape_422_request_validation_error(anon_client):
    res = anon_client.post("/login", json={"email": 12})
    assert res.status_code == 422
    _assert_error_shape(res, error="VALIDATION_ERROR")
    body = res.json()
    assert isinstance(body.get("details"), dict)
    assert isinstance(body["details"].get("errors"), list)


def test_oauth_error_shape_400(anon_client):
    res = anon_client.post("/api/oauth/token", data={"grant_type": "password"})
    assert res.status_code == 400
    _assert_oauth_shape(res, error="unsupported_grant_type")


def test_oauth_error_shape_401(anon_client):
    res = anon_client.get("/api/oauth/userinfo", headers={"Authorization": "Bearer nope"})
    assert res.status_code == 401
    _assert_oauth_shape(res, error="invalid_token")


def test_oauth_server_error_hides_detail(client, monkeypatch):
    from sqlalchemy.exc import SQLAlchemyError

    from edge_engage.services.credential_store import CredentialStore

    def _boom(self, *args, **kwargs):
        raise SQLAlchemyError("connection to 10.0.0.5 refused")

    monkeypatch.setattr(CredentialStore, "find_authorization", _boom)

    res = client.post(
        "/api/oauth/token",
        data={"grant_type": "authorization_code", "code": "x", "client_id": "c1", "redirect_uri": "https://app/cb"},
    )
    assert res.status_code == 500
    _assert_oauth_shape(res, error="server_error")
    assert "10.0.0.5" not in res.text


@pytest.mark.parametrize(
    "code,status",
    [
        (OAuthErrorCode.INVALID_REQUEST, 400),
        (OAuthErrorCode.INVALID_GRANT, 400),
        (OAuthErrorCode.UNSUPPORTED_GRANT_TYPE, 400),
        (OAuthErrorCode.INVALID_TOKEN, 401),
        (OAuthErrorCode.SERVER_ERROR, 500),
        (OAuthErrorCode.ACCESS_DENIED, 403),
    ],
)
def test_every_oauth_code_has_a_status(code, status):
    err = OAuthError(code, "x")
    assert err.status_code == status
    assert err.to_dict() == {"error": code.value, "error_description": "x"}


def test_only_invalid_token_sets_www_authenticate():
    assert OAuthError(OAuthErrorCode.INVALID_TOKEN, "x").headers() == {
        "WWW-Authenticate": 'Bearer error="invalid_token"'
    }
    assert OAuthError(OAuthErrorCode.INVALID_GRANT, "x").headers() is None
