# edge_engage/auth/session.py
"""
Session identity provider.

The session gate asks a provider "who is signed in on this request?". The
default provider reads the signed session cookie minted at /auth/callback and
loads the user; any failure (missing cookie, bad signature, expired, unknown
or inactive user) means "no session".
"""
from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Callable, Protocol

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from edge_engage.core.database import session_scope
from edge_engage.core.security import verify_token_purpose
from edge_engage.models.user import User
from edge_engage.services.sessions import read_session_cookie
from edge_engage.services.users import get_user_by_id

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AbstractContextManager[Session]]


class IdentityProvider(Protocol):
    def get_current_user(self, request: Request) -> User | None:
        ...


class SessionIdentityProvider:
    def __init__(self, session_factory: SessionFactory = session_scope) -> None:
        self._session_factory = session_factory

    def get_current_user(self, request: Request) -> User | None:
        token = read_session_cookie(request)
        if not token:
            return None

        try:
            payload = verify_token_purpose(token, expected_purpose="session")
        except ValueError:
            logger.info("Ignoring invalid or expired session cookie")
            return None

        try:
            user_id = int(payload.get("sub") or "")
        except (TypeError, ValueError):
            return None

        try:
            with self._session_factory() as db:
                user = get_user_by_id(db, user_id)
        except SQLAlchemyError:
            logger.exception("Session user lookup failed for user_id=%s", user_id)
            return None

        if user is None or not getattr(user, "is_active", True):
            return None
        return user
