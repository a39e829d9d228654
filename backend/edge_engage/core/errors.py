# edge_engage/core/errors.py
"""
OAuth 2.0 error taxonomy.

Every OAuth failure is raised as an ``OAuthError`` carrying one of the
``OAuthErrorCode`` members. ``main.py`` registers a handler that renders it as
``{"error": <code>, "error_description": <text>}`` with the code's HTTP status.
"""
from __future__ import annotations

from enum import Enum


class OAuthErrorCode(str, Enum):
    INVALID_REQUEST = "invalid_request"
    INVALID_GRANT = "invalid_grant"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    INVALID_TOKEN = "invalid_token"
    SERVER_ERROR = "server_error"
    ACCESS_DENIED = "access_denied"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_CODE[self]


_STATUS_BY_CODE: dict[OAuthErrorCode, int] = {
    OAuthErrorCode.INVALID_REQUEST: 400,
    OAuthErrorCode.INVALID_GRANT: 400,
    OAuthErrorCode.UNSUPPORTED_GRANT_TYPE: 400,
    OAuthErrorCode.INVALID_TOKEN: 401,
    OAuthErrorCode.SERVER_ERROR: 500,
    OAuthErrorCode.ACCESS_DENIED: 403,
}


class OAuthError(Exception):
    """Raised by the OAuth services; never escapes the endpoint boundary."""

    def __init__(self, code: OAuthErrorCode, description: str) -> None:
        super().__init__(description)
        self.code = code
        self.description = description

    @property
    def status_code(self) -> int:
        return self.code.status_code

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code.value, "error_description": self.description}

    def headers(self) -> dict[str, str] | None:
        if self.code is OAuthErrorCode.INVALID_TOKEN:
            return {"WWW-Authenticate": 'Bearer error="invalid_token"'}
        return None


def invalid_request(description: str) -> OAuthError:
    return OAuthError(OAuthErrorCode.INVALID_REQUEST, description)


def invalid_grant(description: str) -> OAuthError:
    return OAuthError(OAuthErrorCode.INVALID_GRANT, description)


def invalid_token(description: str) -> OAuthError:
    return OAuthError(OAuthErrorCode.INVALID_TOKEN, description)


def server_error(description: str) -> OAuthError:
    return OAuthError(OAuthErrorCode.SERVER_ERROR, description)
