# edge_engage/auth/identity.py
"""
Who is making this request.

The session gate resolves the session cookie once per request and stores the
result on ``request.state.identity``. Handlers read it from there (via
``dependencies.auth.get_identity``) and never decode cookies themselves.

Internal only: never serialize an Identity into a response.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

SESSION_PROVIDER = "session"


@dataclass(frozen=True)
class Identity:
    """
    user_id: internal user id as a string, None when signed out.
    auth_provider: "session" for magic-link sessions, None when signed out.
    email: lowercased address of the signed-in user.
    """

    user_id: str | None = None
    auth_provider: str | None = None
    email: str | None = None
    is_authenticated: bool = False

    @classmethod
    def unauthenticated(cls) -> Identity:
        return cls()

    @classmethod
    def from_session(cls, user_id: int | str, email: str | None = None) -> Identity:
        normalized = email.strip().lower() if email else None
        return cls(user_id=str(user_id), auth_provider=SESSION_PROVIDER, email=normalized, is_authenticated=True)

    def to_debug_dict(self) -> dict[str, str | bool | None]:
        return asdict(self)
