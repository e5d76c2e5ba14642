"""In-memory implementations of the application ports.

Used when DATABASE_URL or provider credentials are not configured, and
throughout the test suite.
"""

from signflow.infrastructure.stubs.audit_repository_stub import AuditRepositoryStub
from signflow.infrastructure.stubs.blob_storage_stub import BlobStorageStub
from signflow.infrastructure.stubs.certificate_repository_stub import (
    CertificateRepositoryStub,
)
from signflow.infrastructure.stubs.document_repository_stub import (
    DocumentRepositoryStub,
)
from signflow.infrastructure.stubs.signing_provider_stub import SigningProviderStub
from signflow.infrastructure.stubs.user_repository_stub import (
    SessionRepositoryStub,
    UserRepositoryStub,
)

__all__: list[str] = [
    "AuditRepositoryStub",
    "BlobStorageStub",
    "CertificateRepositoryStub",
    "DocumentRepositoryStub",
    "SessionRepositoryStub",
    "SigningProviderStub",
    "UserRepositoryStub",
]
