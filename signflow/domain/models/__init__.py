"""Domain models for SignFlow."""

from signflow.domain.models.audit import AuditAction, AuditEntry, AuditFilter
from signflow.domain.models.certificate import (
    Certificate,
    CertificateStatus,
    PersonType,
)
from signflow.domain.models.document import (
    Document,
    DocumentStatus,
    Signer,
    SignerStatus,
)
from signflow.domain.models.provider import (
    CommunicateEvents,
    ProviderDocument,
    ProviderEnvelope,
    ProviderEvent,
    ProviderRequirement,
    ProviderSigner,
    SignerInput,
)
from signflow.domain.models.user import Session, User, UserRole

__all__: list[str] = [
    "AuditAction",
    "AuditEntry",
    "AuditFilter",
    "Certificate",
    "CertificateStatus",
    "CommunicateEvents",
    "Document",
    "DocumentStatus",
    "PersonType",
    "ProviderDocument",
    "ProviderEnvelope",
    "ProviderEvent",
    "ProviderRequirement",
    "ProviderSigner",
    "Session",
    "Signer",
    "SignerInput",
    "SignerStatus",
    "User",
    "UserRole",
]
