# edge_engage/auth/consent.py
"""
Consent decisions as pure values.

The consent screen never navigates on its own: ``decide`` turns a consent
request plus the user's decision into the ``RedirectTarget`` the HTTP layer
sends back to the user agent. Nothing here touches the database.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping
from urllib.parse import quote, urlencode

from edge_engage.core.errors import OAuthErrorCode, invalid_request

DEFAULT_SCOPE = "read"
DEFAULT_RESPONSE_TYPE = "code"
DENIED_DESCRIPTION = "User denied access"

SCOPE_DESCRIPTIONS: dict[str, str] = {
    "read": "View your profile and project information",
    "write": "Create and modify projects on your behalf",
    "projects:read": "View your projects and project details",
    "projects:write": "Create, update, and delete projects",
    "files:read": "View files and assets in your projects",
    "files:write": "Upload and manage files in your projects",
    "notifications:send": "Send notifications to you",
    "profile": "View your name and profile picture",
    "phone": "View your phone number",
}


class ConsentDecision(str, Enum):
    APPROVE = "approve"
    DENY = "deny"


@dataclass(frozen=True)
class ConsentRequest:
    client_id: str | None
    redirect_uri: str | None
    scope: str = DEFAULT_SCOPE
    state: str | None = None
    response_type: str = DEFAULT_RESPONSE_TYPE

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> ConsentRequest:
        """Build from query/form parameters, blank values treated as absent."""

        def _get(key: str) -> str | None:
            value = params.get(key)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        return cls(
            client_id=_get("client_id"),
            redirect_uri=_get("redirect_uri"),
            scope=_get("scope") or DEFAULT_SCOPE,
            state=_get("state"),
            response_type=_get("response_type") or DEFAULT_RESPONSE_TYPE,
        )

    def require_client(self) -> None:
        # No redirect is possible without a destination, so this fails locally.
        if not self.client_id or not self.redirect_uri:
            raise invalid_request("Missing required OAuth parameters")

    @property
    def scopes(self) -> list[str]:
        return self.scope.split()


@dataclass(frozen=True)
class RedirectTarget:
    url: str


def describe_scopes(scope: str) -> list[str]:
    return [SCOPE_DESCRIPTIONS.get(s, f"Access to {s}") for s in scope.split()]


def append_query(uri: str, params: Mapping[str, str]) -> str:
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}{urlencode(params, quote_via=quote)}"


def decide(
    request: ConsentRequest,
    decision: ConsentDecision,
    *,
    code: str | None = None,
) -> RedirectTarget:
    """
    Compute where the user agent goes after a consent decision.

    APPROVE requires the freshly issued ``code``; DENY never carries one.
    ``state`` is echoed back only when the client supplied it.
    """
    request.require_client()
    redirect_uri = str(request.redirect_uri)

    params: dict[str, str] = {}
    if decision is ConsentDecision.APPROVE:
        if not code:
            raise ValueError("An approved consent needs an authorization code")
        params["code"] = code
    else:
        params["error"] = OAuthErrorCode.ACCESS_DENIED.value
        params["error_description"] = DENIED_DESCRIPTION

    if request.state:
        params["state"] = request.state

    return RedirectTarget(url=append_query(redirect_uri, params))
