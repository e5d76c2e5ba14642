"""Unit tests for adapter and service wiring."""

from __future__ import annotations

import pytest

from signflow.bootstrap.database import (
    MIGRATIONS_DIR,
    get_engine,
    mask_url,
    split_statements,
    to_async_url,
)
from signflow.bootstrap.repositories import (
    get_blob_storage,
    get_repositories,
    get_signing_provider,
    reset_repositories,
)
from signflow.bootstrap.services import (
    get_document_service,
    get_signer_service,
    get_signing_workflow_service,
)
from signflow.infrastructure.adapters.clicksign import ClicksignClient
from signflow.infrastructure.adapters.storage import LocalBlobStorage
from signflow.infrastructure.stubs import SigningProviderStub, UserRepositoryStub


class TestRepositoryWiring:
    def test_stubs_without_database_url(self) -> None:
        repositories = get_repositories()

        assert isinstance(repositories.users, UserRepositoryStub)
        assert get_repositories() is repositories

    def test_stub_provider_without_token(self) -> None:
        assert isinstance(get_signing_provider(), SigningProviderStub)

    def test_clicksign_client_with_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLICKSIGN_ACCESS_TOKEN", "Bearer token")

        assert isinstance(get_signing_provider(), ClicksignClient)

    def test_blob_storage_is_local(self) -> None:
        assert isinstance(get_blob_storage(), LocalBlobStorage)

    def test_reset_builds_new_adapters(self) -> None:
        first = get_repositories()

        reset_repositories()

        assert get_repositories() is not first


class TestServiceWiring:
    def test_services_share_adapters(self) -> None:
        workflow = get_signing_workflow_service()

        assert get_document_service() is get_document_service()
        assert get_signer_service() is get_signer_service()
        assert get_signing_workflow_service() is workflow


class TestDatabaseUrls:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("postgresql://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgres://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("postgresql+asyncpg://u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
            ("u:p@db/app", "postgresql+asyncpg://u:p@db/app"),
        ],
    )
    def test_to_async_url(self, url: str, expected: str) -> None:
        assert to_async_url(url) == expected

    def test_mask_url_hides_password(self) -> None:
        assert mask_url("postgresql://admin:secret@db:5432/app") == (
            "postgresql://admin:***@db:5432/app"
        )
        assert mask_url("postgresql://db/app") == "postgresql://db/app"


class TestMigrations:
    def test_initial_schema_splits_into_create_statements(self) -> None:
        script = (MIGRATIONS_DIR / "001_initial_schema.sql").read_text(encoding="utf-8")

        statements = split_statements(script)

        assert statements[0].startswith("CREATE TABLE IF NOT EXISTS users")
        assert all(s.startswith("CREATE ") for s in statements)
        assert not any("--" in s for s in statements)

    def test_split_drops_comments_and_blanks(self) -> None:
        script = "-- header\nCREATE TABLE a (id INT);\n\n  -- note\nCREATE INDEX i ON a (id);\n"

        assert split_statements(script) == [
            "CREATE TABLE a (id INT)",
            "CREATE INDEX i ON a (id)",
        ]

    def test_engine_requires_database_url(self) -> None:
        with pytest.raises(ValueError, match="DATABASE_URL"):
            get_engine()
