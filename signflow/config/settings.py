"""Configuration settings from environment variables.

Environment Variables:
- ENVIRONMENT: "development" (default) or "production"
- DATABASE_URL: PostgreSQL connection string (stubs are used when unset)
- CLICKSIGN_ACCESS_TOKEN: Provider API token (a "Bearer " prefix is stripped)
- CLICKSIGN_API_BASE: Provider API base URL
- CLICKSIGN_TIMEOUT_SECONDS: HTTP timeout (default: 30)
- CLICKSIGN_DOCUMENT_CHECK_INTERVAL: Seconds between upload checks (default: 2.0)
- CLICKSIGN_DOCUMENT_CHECK_RETRIES: Upload checks before giving up (default: 15)
- CLICKSIGN_REQUIREMENT_RETRY_DELAY: Seconds between requirement attempts (default: 2.0)
- CLICKSIGN_REQUIREMENT_RETRIES: Attempts per requirement (default: 5)
- CERTIFICATE_PASSWORD_KEY: 64 hex chars or exactly 32 UTF-8 bytes
- BLOB_STORAGE_DIR: Root directory for uploaded files (default: ./var/blobs)
- SESSION_COOKIE_NAME: Session cookie name (default: signflow_session)
- SESSION_TTL_DAYS: Session lifetime in days (default: 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv
from structlog import get_logger

logger = get_logger()

PRODUCTION_API_BASE = "https://app.clicksign.com/api/v3"
SANDBOX_API_BASE = "https://sandbox.clicksign.com/api/v3"

# Required only when ENVIRONMENT=production
REQUIRED_IN_PRODUCTION = (
    "DATABASE_URL",
    "CLICKSIGN_ACCESS_TOKEN",
    "CERTIFICATE_PASSWORD_KEY",
)


def _get_int_env(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class ClicksignConfig:
    """Clicksign API configuration."""

    access_token: str | None
    api_base: str = SANDBOX_API_BASE
    timeout_seconds: float = 30.0
    document_check_interval: float = 2.0
    document_check_retries: int = 15
    requirement_retry_delay: float = 2.0
    requirement_retries: int = 5

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)


@dataclass(frozen=True)
class SessionConfig:
    """Session cookie configuration."""

    cookie_name: str = "signflow_session"
    ttl_days: int = 30
    secure_cookie: bool = False


@dataclass(frozen=True)
class Settings:
    """Application configuration."""

    environment: str
    clicksign: ClicksignConfig
    session: SessionConfig = field(default_factory=SessionConfig)
    database_url: str | None = None
    certificate_password_key: str | None = field(default=None, repr=False)
    blob_storage_dir: Path = Path("var/blobs")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _load_dotenv() -> None:
    # Look for .env in current dir or parent dir
    env_path = Path(".env")
    if not env_path.exists():
        env_path = Path("../.env")
    if env_path.exists():
        load_dotenv(env_path)


def _clean_token(token: str | None) -> str | None:
    if not token:
        return None
    token = token.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    return token or None


def load_settings() -> Settings:
    """Load configuration from environment variables.

    Returns:
        Settings object with all values resolved.

    Raises:
        ValueError: In production, if required environment variables are
            missing.
    """
    _load_dotenv()

    environment = os.environ.get("ENVIRONMENT", "development").lower()

    missing = [name for name in REQUIRED_IN_PRODUCTION if not os.environ.get(name)]
    if missing:
        if environment == "production":
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )
        logger.warning("optional_settings_missing", missing=missing)

    default_base = PRODUCTION_API_BASE if environment == "production" else SANDBOX_API_BASE

    return Settings(
        environment=environment,
        database_url=os.environ.get("DATABASE_URL") or None,
        certificate_password_key=os.environ.get("CERTIFICATE_PASSWORD_KEY") or None,
        blob_storage_dir=Path(os.environ.get("BLOB_STORAGE_DIR", "var/blobs")),
        clicksign=ClicksignConfig(
            access_token=_clean_token(os.environ.get("CLICKSIGN_ACCESS_TOKEN")),
            api_base=os.environ.get("CLICKSIGN_API_BASE", default_base).rstrip("/"),
            timeout_seconds=_get_float_env("CLICKSIGN_TIMEOUT_SECONDS", 30.0),
            document_check_interval=_get_float_env(
                "CLICKSIGN_DOCUMENT_CHECK_INTERVAL", 2.0
            ),
            document_check_retries=_get_int_env("CLICKSIGN_DOCUMENT_CHECK_RETRIES", 15),
            requirement_retry_delay=_get_float_env(
                "CLICKSIGN_REQUIREMENT_RETRY_DELAY", 2.0
            ),
            requirement_retries=_get_int_env("CLICKSIGN_REQUIREMENT_RETRIES", 5),
        ),
        session=SessionConfig(
            cookie_name=os.environ.get("SESSION_COOKIE_NAME", "signflow_session"),
            ttl_days=_get_int_env("SESSION_TTL_DAYS", 30),
            secure_cookie=environment == "production",
        ),
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton for testing."""
    global _settings
    _settings = None
