"""Application ports (interfaces implemented by infrastructure adapters)."""

from signflow.application.ports.audit_repository import AuditRepositoryProtocol
from signflow.application.ports.blob_storage import BlobStorageProtocol
from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.application.ports.crypto import (
    CertificateReaderProtocol,
    PageCounterProtocol,
    PasswordCipherProtocol,
    PasswordHasherProtocol,
)
from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.application.ports.signing_provider import SigningProviderProtocol
from signflow.application.ports.user_repository import (
    SessionRepositoryProtocol,
    UserRepositoryProtocol,
)

__all__: list[str] = [
    "AuditRepositoryProtocol",
    "BlobStorageProtocol",
    "CertificateReaderProtocol",
    "CertificateRepositoryProtocol",
    "DocumentRepositoryProtocol",
    "PageCounterProtocol",
    "PasswordCipherProtocol",
    "PasswordHasherProtocol",
    "SessionRepositoryProtocol",
    "SigningProviderProtocol",
    "UserRepositoryProtocol",
]
