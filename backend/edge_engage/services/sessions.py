# edge_engage/services/sessions.py
"""
Session cookie handling for the browser side of Edge Engage.

The cookie holds a signed session JWT (see core.security.create_session_token).
It is HttpOnly, Secure in prod, and lives as long as the JWT itself.
"""
from __future__ import annotations

from fastapi import Request, Response

from edge_engage.core.config import settings

# "none" would send the session on cross-site consent POSTs, so it is not honored.
SAMESITE_VALUES = ("lax", "strict")


def session_max_age_seconds() -> int:
    return settings.SESSION_EXPIRE_HOURS * 3600


def cookie_name() -> str:
    return settings.SESSION_COOKIE_NAME or "engage_session"


def cookie_path() -> str:
    return settings.SESSION_COOKIE_PATH or "/"


def cookie_samesite() -> str:
    value = (settings.SESSION_COOKIE_SAMESITE or "").strip().lower()
    return value if value in SAMESITE_VALUES else "lax"


def set_session_cookie(resp: Response, session_token: str) -> None:
    resp.set_cookie(
        key=cookie_name(),
        value=session_token,
        max_age=session_max_age_seconds(),
        path=cookie_path(),
        httponly=True,
        # Local dev runs over plain http
        secure=settings.is_prod,
        samesite=cookie_samesite(),
    )


def clear_session_cookie(resp: Response) -> None:
    resp.delete_cookie(key=cookie_name(), path=cookie_path())


def read_session_cookie(req: Request) -> str | None:
    return (req.cookies.get(cookie_name()) or "").strip() or None
