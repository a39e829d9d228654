import os

# Settings are read at import time: give the app a JWT secret and an in-memory
# database before anything from edge_engage is imported.
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("EMAIL_ENABLED", "false")

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from edge_engage.auth.session import SessionIdentityProvider
from edge_engage.core.base import Base
from edge_engage.core import config as app_config
from edge_engage.core.database import get_db
from edge_engage.core.security import create_session_token

# Import models so they register with SQLAlchemy metadata.
from edge_engage.models.user import User  # noqa: F401
from edge_engage.models.project import Project  # noqa: F401
from edge_engage.models.oauth_authorization import OAuthAuthorization  # noqa: F401
from edge_engage.models.oauth_token import OAuthToken  # noqa: F401
from edge_engage.models.magic_link_token import MagicLinkToken  # noqa: F401


class FakeEmailSender:
    """Records outgoing mail instead of delivering it."""

    enabled = True

    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, to_email: str, subject: str, body: str) -> str | None:
        self.sent.append({"to_email": to_email, "subject": subject, "body": body})
        return f"msg_test_{len(self.sent)}"


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def db_session(db_engine):
    # Important: because we use an in-memory SQLite DB with StaticPool, the DB
    # persists across tests. Reset schema per test to avoid cross-test coupling.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak global settings (app_config.settings.*). Because that object is
    process-global, we must restore values after each test to avoid cross-test coupling.
    """
    keys = [
        "JWT_SECRET",
        "EMAIL_ENABLED",
        "EMAIL_PROVIDER",
        "FROM_EMAIL",
        "RESEND_API_KEY",
        "AWS_REGION",
        "OAUTH_CODE_TTL_SECONDS",
        "OAUTH_ACCESS_TOKEN_TTL_SECONDS",
        "SESSION_COOKIE_SAMESITE",
        "MAGIC_LINK_EXPIRE_MINUTES",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)


@pytest.fixture()
def email_outbox():
    return FakeEmailSender()


@pytest.fixture()
def app(db_session, email_outbox):
    app_config.settings.JWT_SECRET = app_config.settings.JWT_SECRET or "test_jwt_secret"

    import edge_engage.main as main

    fastapi_app = main.app

    @contextmanager
    def test_session_scope():
        # The gate shares the test session; closing it is the db_session fixture's job.
        yield db_session

    def override_get_db():
        yield db_session

    original_provider = fastapi_app.state.identity_provider
    original_sender = fastapi_app.state.email_sender

    fastapi_app.state.identity_provider = SessionIdentityProvider(session_factory=test_session_scope)
    fastapi_app.state.email_sender = email_outbox
    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.identity_provider = original_provider
    fastapi_app.state.email_sender = original_sender


@pytest.fixture()
def users(db_session):
    """
    Two distinct active users for ownership / isolation tests.
    """
    user_a = User(
        email="test@example.com",
        full_name="Test User",
        avatar_url="https://cdn.example.com/avatars/test.png",
        phone_number="+15555550100",
        is_active=True,
    )
    user_b = User(
        email="other@example.com",
        full_name="Other User",
        is_active=True,
    )
    db_session.add_all([user_a, user_b])
    db_session.commit()
    db_session.refresh(user_a)
    db_session.refresh(user_b)
    return user_a, user_b


@pytest.fixture()
def anon_client(app):
    """Client with no session cookie."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def client(app, users):
    """
    Default client signed in as user_a via a real session cookie.
    """
    user_a, _ = users
    cookies = {app_config.settings.SESSION_COOKIE_NAME: create_session_token(user_a.id)}
    with TestClient(app, cookies=cookies) as c:
        yield c


@pytest.fixture()
def client_for(app):
    """
    Context manager to create a client signed in as an arbitrary user.

    Usage:
        with client_for(user) as c:
            ...
    """

    @contextmanager
    def _client_for(user: User):
        cookies = {app_config.settings.SESSION_COOKIE_NAME: create_session_token(user.id)}
        with TestClient(app, cookies=cookies) as c:
            yield c

    return _client_for
