# tests/test_consent.py
"""
Unit tests for the pure consent decision.

Nothing here touches the database or HTTP: ``decide`` maps a consent request
and a decision to the redirect the user agent should follow.
"""
from __future__ import annotations

import pytest

from edge_engage.auth.consent import (
    ConsentDecision,
    ConsentRequest,
    RedirectTarget,
    append_query,
    decide,
    describe_scopes,
)
from edge_engage.core.errors import OAuthError, OAuthErrorCode

CODE = "ab" * 32


def _request(**overrides) -> ConsentRequest:
    params = {"client_id": "c1", "redirect_uri": "https://app/cb", "scope": "read profile", "state": "xyz"}
    params.update(overrides)
    return ConsentRequest.from_params(params)


# ---------------------------------------------------------------------------
# Tests: ConsentRequest.from_params()
# ---------------------------------------------------------------------------


def test_from_params_defaults():
    req = ConsentRequest.from_params({"client_id": "c1", "redirect_uri": "https://app/cb"})

    assert req.scope == "read"
    assert req.response_type == "code"
    assert req.state is None
    assert req.scopes == ["read"]


def test_from_params_blank_values_are_absent():
    req = ConsentRequest.from_params({"client_id": "  ", "redirect_uri": "", "scope": " ", "state": ""})

    assert req.client_id is None
    assert req.redirect_uri is None
    assert req.scope == "read"
    assert req.state is None


@pytest.mark.parametrize("missing", ["client_id", "redirect_uri"])
def test_require_client_rejects_missing_destination(missing):
    req = _request(**{missing: None})

    with pytest.raises(OAuthError) as exc:
        req.require_client()

    assert exc.value.code is OAuthErrorCode.INVALID_REQUEST
    assert exc.value.description == "Missing required OAuth parameters"


# ---------------------------------------------------------------------------
# Tests: decide()
# ---------------------------------------------------------------------------


def test_approve_carries_code_and_state():
    target = decide(_request(), ConsentDecision.APPROVE, code=CODE)

    assert isinstance(target, RedirectTarget)
    assert target.url == f"https://app/cb?code={CODE}&state=xyz"


def test_deny_redirect_is_exact():
    target = decide(_request(), ConsentDecision.DENY)

    assert target.url == "https://app/cb?error=access_denied&error_description=User%20denied%20access&state=xyz"


def test_state_omitted_when_not_supplied():
    target = decide(_request(state=None), ConsentDecision.APPROVE, code=CODE)

    assert target.url == f"https://app/cb?code={CODE}"
    assert "state" not in target.url


def test_existing_query_string_is_extended():
    target = decide(_request(redirect_uri="https://app/cb?tenant=7"), ConsentDecision.DENY)

    assert target.url.startswith("https://app/cb?tenant=7&error=access_denied&")


def test_state_is_percent_encoded():
    target = decide(_request(state="a b/c"), ConsentDecision.APPROVE, code=CODE)

    assert target.url.endswith("&state=a%20b%2Fc")


def test_deny_ignores_code():
    target = decide(_request(), ConsentDecision.DENY, code=CODE)

    assert "code=" not in target.url


def test_approve_without_code_is_a_programming_error():
    with pytest.raises(ValueError):
        decide(_request(), ConsentDecision.APPROVE)


def test_decide_requires_client():
    with pytest.raises(OAuthError):
        decide(_request(client_id=None), ConsentDecision.DENY)


# ---------------------------------------------------------------------------
# Tests: helpers
# ---------------------------------------------------------------------------


def test_describe_scopes_known_and_unknown():
    assert describe_scopes("read phone custom:thing") == [
        "View your profile and project information",
        "View your phone number",
        "Access to custom:thing",
    ]


def test_append_query_separator():
    assert append_query("https://x/cb", {"a": "1"}) == "https://x/cb?a=1"
    assert append_query("https://x/cb?z=0", {"a": "1"}) == "https://x/cb?z=0&a=1"
