# edge_engage/dependencies/auth.py
from __future__ import annotations

from fastapi import HTTPException, Request, status

from edge_engage.auth.identity import Identity
from edge_engage.models.user import User


def _unauthorized(detail: str = "Sign in required") -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def get_identity(request: Request) -> Identity:
    """Identity resolved by the session gate, unauthenticated when absent."""
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, Identity):
        return identity
    return Identity.unauthenticated()


def get_optional_user(request: Request) -> User | None:
    return getattr(request.state, "user", None)


def get_current_user(request: Request) -> User:
    """
    Signed-in user for browser routes.

    The session gate has already resolved the cookie; this only enforces
    that a user is present and active.
    """
    user = get_optional_user(request)
    if user is None:
        raise _unauthorized()
    if not getattr(user, "is_active", True):
        raise _unauthorized("User is inactive")
    return user
