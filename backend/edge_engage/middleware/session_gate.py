from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from edge_engage.auth.identity import Identity
from edge_engage.auth.session import IdentityProvider, SessionIdentityProvider
from edge_engage.core.config import settings

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/projects",)
AUTH_PREFIXES = ("/login", "/auth")
CALLBACK_PREFIX = "/auth/callback"


@dataclass(frozen=True)
class GateDecision:
    redirect_to: str | None = None

    @property
    def passes(self) -> bool:
        return self.redirect_to is None


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def is_protected_route(path: str) -> bool:
    return any(_under(path, p) for p in PROTECTED_PREFIXES)


def is_auth_route(path: str) -> bool:
    return any(_under(path, p) for p in AUTH_PREFIXES)


def is_callback_route(path: str) -> bool:
    return _under(path, CALLBACK_PREFIX)


def login_redirect_url(return_to: str, login_path: str | None = None) -> str:
    login_path = login_path or settings.LOGIN_PATH
    return f"{login_path}?{urlencode({'redirect': return_to}, quote_via=quote)}"


def evaluate_gate(
    path: str,
    has_session: bool,
    *,
    login_path: str | None = None,
    landing_path: str | None = None,
) -> GateDecision:
    """
    protected and no session         -> sign-in, carrying the path back
    auth route, session, not callback -> default landing route
    anything else                     -> pass through
    """
    if is_protected_route(path) and not has_session:
        return GateDecision(redirect_to=login_redirect_url(path, login_path))

    if is_auth_route(path) and has_session and not is_callback_route(path):
        return GateDecision(redirect_to=landing_path or settings.DEFAULT_LANDING_PATH)

    return GateDecision()


def _identity_provider(request: Request) -> IdentityProvider:
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        provider = SessionIdentityProvider()
        request.app.state.identity_provider = provider
    return provider


def register_session_gate(app: FastAPI) -> None:
    @app.middleware("http")
    async def session_gate(request: Request, call_next):
        """
        Resolve the session on every request (no caching) and apply the gate.

        The signed-in user, if any, is stored on request.state.user and the
        matching Identity on request.state.identity.
        """
        request.state.identity = Identity.unauthenticated()
        request.state.user = None

        # Allow CORS preflight to flow through CORSMiddleware unchanged
        if request.method.upper() == "OPTIONS":
            return await call_next(request)

        user = _identity_provider(request).get_current_user(request)
        if user is not None:
            request.state.user = user
            request.state.identity = Identity.from_session(user.id, user.email)

        path = request.url.path
        decision = evaluate_gate(path, has_session=user is not None)
        if not decision.passes:
            logger.debug("Session gate redirect: path=%s -> %s", path, decision.redirect_to)
            return RedirectResponse(url=decision.redirect_to, status_code=307)

        return await call_next(request)
