"""Document and signer domain models.

A document is a PDF uploaded by a user and mirrored into a provider
envelope. Signers belong to exactly one document and are ordered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from signflow.domain.models.certificate import PersonType


class DocumentStatus(Enum):
    """Local lifecycle status of a document.

    States:
        PENDING: Uploaded, no signers yet
        WAITING_SIGNERS: Signers added, envelope not yet running
        SIGNING: Envelope running, signatures outstanding
        SIGNED: Every signer has signed
        COMPLETED: Envelope closed by the provider
        FAILED: Workflow could not be completed
    """

    PENDING = "pending"
    WAITING_SIGNERS = "waiting_signers"
    SIGNING = "signing"
    SIGNED = "signed"
    COMPLETED = "completed"
    FAILED = "failed"


class SignerStatus(Enum):
    """Local status of a signer."""

    PENDING = "pending"
    SIGNING = "signing"
    SIGNED = "signed"
    ERROR = "error"


@dataclass(frozen=True)
class Signer:
    """A person expected to sign a document.

    Attributes:
        id: Unique signer identifier.
        document_id: Document this signer belongs to.
        name: Full name.
        email: Contact email.
        document_number: CPF or CNPJ digits.
        document_type: PF or PJ.
        phone_number: Contact phone.
        identification: Free-form identification (role, title).
        order: Signing order, starting at 1.
        signature_type: "electronic" unless set otherwise.
        status: Local signer status.
        provider_signer_key: Signer id at the provider.
        provider_requirement_key: Requirement id at the provider.
        certificate_id: Certificate backing the signature, if any.
        signed_at: When the signer signed.
    """

    id: UUID
    document_id: UUID
    name: str
    email: str
    document_number: str
    document_type: PersonType
    phone_number: str
    identification: str
    order: int
    signature_type: str = "electronic"
    status: SignerStatus = SignerStatus.PENDING
    provider_signer_key: str | None = None
    provider_requirement_key: str | None = None
    certificate_id: UUID | None = None
    signed_at: datetime | None = None


@dataclass(frozen=True)
class Document:
    """An uploaded PDF and its signing state.

    Attributes:
        id: Unique document identifier.
        user_id: Owner of the document.
        name: Display name.
        file_name: Original file name.
        file_size: Size in bytes.
        page_count: Number of PDF pages (0 when unknown).
        hash: SHA-256 hex digest of the original PDF.
        status: Local lifecycle status.
        envelope_key: Envelope id at the provider.
        document_key: Document id at the provider.
        blob_path: Storage key of the original PDF.
        signed_hash: SHA-256 hex digest of the signed PDF, when known.
        uploaded_at: Upload time (UTC).
        signed_at: When the provider finished the document.
        signers: Signers ordered by ``order``.
    """

    id: UUID
    user_id: UUID
    name: str
    file_name: str
    file_size: int
    page_count: int
    hash: str
    status: DocumentStatus = DocumentStatus.PENDING
    envelope_key: str | None = None
    document_key: str | None = None
    blob_path: str | None = None
    signed_hash: str | None = None
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    signed_at: datetime | None = None
    signers: tuple[Signer, ...] = ()

    @property
    def has_provider_keys(self) -> bool:
        return bool(self.envelope_key and self.document_key)
