"""Bootstrap wiring for persistence, storage and provider adapters.

PostgreSQL repositories are used when DATABASE_URL is configured,
otherwise in-memory stubs. The Clicksign client is used when an access
token is configured, otherwise the in-memory provider stub.
"""

from __future__ import annotations

from dataclasses import dataclass

from structlog import get_logger

from signflow.application.ports.audit_repository import AuditRepositoryProtocol
from signflow.application.ports.blob_storage import BlobStorageProtocol
from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.application.ports.user_repository import (
    SessionRepositoryProtocol,
    UserRepositoryProtocol,
)
from signflow.config.settings import get_settings
from signflow.infrastructure.adapters.clicksign import ClicksignClient
from signflow.infrastructure.adapters.storage import LocalBlobStorage
from signflow.infrastructure.stubs import (
    AuditRepositoryStub,
    CertificateRepositoryStub,
    DocumentRepositoryStub,
    SessionRepositoryStub,
    SigningProviderStub,
    UserRepositoryStub,
)

logger = get_logger()


@dataclass(frozen=True)
class Repositories:
    users: UserRepositoryProtocol
    sessions: SessionRepositoryProtocol
    certificates: CertificateRepositoryProtocol
    documents: DocumentRepositoryProtocol
    audit: AuditRepositoryProtocol


_repositories: Repositories | None = None
_blob_storage: BlobStorageProtocol | None = None
_signing_provider: SigningProviderProtocol | None = None


def _postgres_repositories() -> Repositories:
    from signflow.bootstrap.database import get_session_factory
    from signflow.infrastructure.adapters.persistence import (
        PostgresAuditRepository,
        PostgresCertificateRepository,
        PostgresDocumentRepository,
        PostgresSessionRepository,
        PostgresUserRepository,
    )

    session_factory = get_session_factory()
    return Repositories(
        users=PostgresUserRepository(session_factory),
        sessions=PostgresSessionRepository(session_factory),
        certificates=PostgresCertificateRepository(session_factory),
        documents=PostgresDocumentRepository(session_factory),
        audit=PostgresAuditRepository(session_factory),
    )


def _stub_repositories() -> Repositories:
    return Repositories(
        users=UserRepositoryStub(),
        sessions=SessionRepositoryStub(),
        certificates=CertificateRepositoryStub(),
        documents=DocumentRepositoryStub(),
        audit=AuditRepositoryStub(),
    )


def get_repositories() -> Repositories:
    """Get the repository set (singleton).

    Returns PostgreSQL repositories if DATABASE_URL is configured,
    otherwise in-memory stubs.
    """
    global _repositories
    if _repositories is None:
        if get_settings().database_url:
            _repositories = _postgres_repositories()
            logger.info("repositories_initialized", repository_type="PostgreSQL")
        else:
            logger.warning(
                "repositories_initialized",
                repository_type="InMemoryStub",
                message="DATABASE_URL not set - using in-memory stubs (data will not persist)",
            )
            _repositories = _stub_repositories()
    return _repositories


def get_blob_storage() -> BlobStorageProtocol:
    """Get the file-system blob storage rooted at BLOB_STORAGE_DIR."""
    global _blob_storage
    if _blob_storage is None:
        _blob_storage = LocalBlobStorage(get_settings().blob_storage_dir)
    return _blob_storage


def get_signing_provider() -> SigningProviderProtocol:
    """Get the signing provider adapter.

    Returns the Clicksign client if an access token is configured,
    otherwise the in-memory provider stub.
    """
    global _signing_provider
    if _signing_provider is None:
        config = get_settings().clicksign
        if config.is_configured:
            _signing_provider = ClicksignClient(config)
            logger.info(
                "signing_provider_initialized",
                provider="clicksign",
                api_base=config.api_base,
            )
        else:
            logger.warning(
                "signing_provider_initialized",
                provider="stub",
                message="CLICKSIGN_ACCESS_TOKEN not set - using in-memory provider stub",
            )
            _signing_provider = SigningProviderStub()
    return _signing_provider


def reset_repositories() -> None:
    """Reset adapter singletons (for testing)."""
    global _repositories, _blob_storage, _signing_provider
    _repositories = None
    _blob_storage = None
    _signing_provider = None
