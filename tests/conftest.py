"""
Pytest configuration and shared fixtures for Signflow tests.

Testing Standards:
- Async tests run without markers (asyncio auto mode in pyproject.toml)
- Services are wired to the in-memory stubs via tests.helpers.Harness
- Unit tests go in tests/unit/
"""

from collections.abc import Iterator
from pathlib import Path

import pytest

from signflow.bootstrap.database import reset_database_bootstrap
from signflow.bootstrap.repositories import reset_repositories
from signflow.bootstrap.services import reset_services
from signflow.config.settings import reset_settings
from signflow.domain.models.user import User, UserRole
from signflow.infrastructure.monitoring.metrics import reset_metrics_collector
from tests.helpers import Harness, make_user
from tests.helpers.harness import TEST_PASSWORD_KEY


def _reset_singletons() -> None:
    reset_settings()
    reset_metrics_collector()
    reset_services()
    reset_repositories()
    reset_database_bootstrap()


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Development settings, no database, no provider token, no stray .env."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("CERTIFICATE_PASSWORD_KEY", TEST_PASSWORD_KEY)
    monkeypatch.setenv("BLOB_STORAGE_DIR", str(tmp_path / "blobs"))
    for name in ("DATABASE_URL", "CLICKSIGN_ACCESS_TOKEN", "CLICKSIGN_API_BASE"):
        monkeypatch.delenv(name, raising=False)
    _reset_singletons()
    yield
    _reset_singletons()


@pytest.fixture
def harness() -> Harness:
    return Harness()


@pytest.fixture
def user() -> User:
    return make_user()


@pytest.fixture
def other_user() -> User:
    return make_user(email="other@example.com", first_name="Pedro", last_name="Lima")


@pytest.fixture
def admin() -> User:
    return make_user(role=UserRole.ADMIN, email="admin@example.com", first_name="Ana")
