# edge_engage/core/config.py
import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

TRUTHY = frozenset({"1", "true", "yes", "on"})

LOCAL_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    return int(raw) if raw else default


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY


def split_origins(raw: str | None, *extra: str) -> list[str]:
    """Comma-separated origins plus ``extra``, first occurrence wins."""
    ordered: dict[str, None] = {}
    for origin in [*(raw or "").split(","), *extra]:
        origin = origin.strip()
        if origin:
            ordered.setdefault(origin, None)
    return list(ordered)


class Settings:
    def __init__(self) -> None:
        self.ENV = env_str("ENV", "dev").lower()  # dev | prod
        # .env is a local convenience; prod gets its environment from the service.
        if self.ENV != "prod":
            load_dotenv()

        # --- database ---
        # DATABASE_URL short-circuits the DB_* parts (tests, local sqlite).
        self.DATABASE_URL = env_str("DATABASE_URL")
        self.DB_HOST = env_str("DB_HOST")
        self.DB_PORT = env_str("DB_PORT", "5432")
        self.DB_NAME = env_str("DB_NAME")
        self.DB_APP_USER = env_str("DB_APP_USER")
        self.DB_APP_PASSWORD = os.getenv("DB_APP_PASSWORD", "")
        self.DB_MIGRATOR_USER = env_str("DB_MIGRATOR_USER")
        self.DB_MIGRATOR_PASSWORD = os.getenv("DB_MIGRATOR_PASSWORD", "")
        self.DB_SSLMODE = env_str("DB_SSLMODE", "require").lower()

        # --- browser origins ---
        local = () if self.ENV == "prod" else LOCAL_ORIGINS
        self.CORS_ORIGINS = split_origins(os.getenv("CORS_ORIGINS"), *local)
        default_base = "" if self.ENV == "prod" else "http://localhost:8000"
        self.PUBLIC_BASE_URL = env_str("PUBLIC_BASE_URL", default_base).rstrip("/")

        # --- signed tokens: session cookie + magic links ---
        self.JWT_SECRET = os.getenv("JWT_SECRET", "")
        self.JWT_ALGORITHM = env_str("JWT_ALGORITHM", "HS256")
        self.MAGIC_LINK_EXPIRE_MINUTES = env_int("MAGIC_LINK_EXPIRE_MINUTES", 15)
        self.SESSION_EXPIRE_HOURS = env_int("SESSION_EXPIRE_HOURS", 168)
        self.SESSION_COOKIE_NAME = env_str("SESSION_COOKIE_NAME", "engage_session")
        self.SESSION_COOKIE_SAMESITE = env_str("SESSION_COOKIE_SAMESITE", "lax")
        self.SESSION_COOKIE_PATH = env_str("SESSION_COOKIE_PATH", "/")

        # --- OAuth provider ---
        self.OAUTH_CODE_TTL_SECONDS = env_int("OAUTH_CODE_TTL_SECONDS", 600)
        self.OAUTH_ACCESS_TOKEN_TTL_SECONDS = env_int("OAUTH_ACCESS_TOKEN_TTL_SECONDS", 3600)

        # --- session gate routing ---
        self.LOGIN_PATH = env_str("LOGIN_PATH", "/login")
        self.DEFAULT_LANDING_PATH = env_str("DEFAULT_LANDING_PATH", "/projects")

        # --- magic-link email ---
        self.EMAIL_ENABLED = env_flag("EMAIL_ENABLED")
        self.EMAIL_PROVIDER = env_str("EMAIL_PROVIDER", "resend").lower()  # resend | ses
        self.FROM_EMAIL = env_str("FROM_EMAIL")
        self.RESEND_API_KEY = env_str("RESEND_API_KEY")
        self.AWS_REGION = env_str("AWS_REGION")

        if self.is_prod:
            self._check_prod()

    @property
    def is_prod(self) -> bool:
        return self.ENV == "prod"

    def _check_prod(self) -> None:
        required = {
            "JWT_SECRET": self.JWT_SECRET,
            "PUBLIC_BASE_URL": self.PUBLIC_BASE_URL,
            "CORS_ORIGINS": self.CORS_ORIGINS,
        }
        if not self.DATABASE_URL:
            required.update(
                DB_HOST=self.DB_HOST,
                DB_NAME=self.DB_NAME,
                DB_APP_USER=self.DB_APP_USER,
                DB_APP_PASSWORD=self.DB_APP_PASSWORD,
            )
            if self.DB_SSLMODE != "require":
                raise RuntimeError("DB_SSLMODE must be 'require' in prod")

        if any(host in origin for origin in self.CORS_ORIGINS for host in ("localhost", "127.0.0.1")):
            raise RuntimeError("CORS_ORIGINS must not include local dev origins in prod")
        if self.PUBLIC_BASE_URL and not self.PUBLIC_BASE_URL.startswith("https://"):
            raise RuntimeError("PUBLIC_BASE_URL must be https in prod")

        missing = [name for name, value in required.items() if not value]
        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

    def _postgres_url(self, user: str, password: str) -> str:
        return (
            f"postgresql+psycopg2://{user}:{quote_plus(password)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?sslmode={self.DB_SSLMODE}"
        )

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or self._postgres_url(self.DB_APP_USER, self.DB_APP_PASSWORD)

    @property
    def migrations_database_url(self) -> str:
        """DDL-capable credentials for Alembic; same as the app URL when DATABASE_URL is set."""
        return self.DATABASE_URL or self._postgres_url(self.DB_MIGRATOR_USER, self.DB_MIGRATOR_PASSWORD)


settings = Settings()


def require_jwt_secret() -> None:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET must be set before the app starts")
