"""Value objects describing e-signature provider resources.

These mirror the envelope/document/signer/requirement resource model of
the provider closely enough for synchronisation, without tying the
application layer to the provider's JSON:API payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Envelope statuses after which the provider no longer accepts changes
ENVELOPE_ACTIVE_STATUSES = frozenset({"active", "running", "closed"})
ENVELOPE_FINISHED_STATUSES = frozenset({"closed", "canceled"})
DOCUMENT_FINISHED_STATUSES = frozenset({"closed", "finalized", "canceled"})
DOCUMENT_PROCESSING_STATUSES = frozenset({"processing", "uploading", "pending", "queued"})


@dataclass(frozen=True)
class ProviderEnvelope:
    """Envelope as reported by the provider."""

    id: str
    status: str
    name: str | None = None


@dataclass(frozen=True)
class ProviderDocument:
    """Document status and download links as reported by the provider."""

    id: str
    status: str
    finished_at: str | None = None
    signed_url: str | None = None
    original_url: str | None = None


@dataclass(frozen=True)
class ProviderSigner:
    """Signer as reported by the provider."""

    id: str
    name: str
    email: str
    status: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class ProviderRequirement:
    """Signature or authentication requirement attached to a signer."""

    id: str
    action: str
    role: str | None = None
    auth: str | None = None
    document_id: str | None = None
    signer_id: str | None = None


@dataclass(frozen=True)
class ProviderEvent:
    """Entry of an envelope or document event timeline."""

    id: str
    type: str
    name: str
    created_at: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CommunicateEvents:
    """Notification channel per event ("email", "sms", "whatsapp" or "none")."""

    document_signed: str = "whatsapp"
    signature_request: str = "whatsapp"
    signature_reminder: str = "email"

    def to_dict(self) -> dict[str, str]:
        return {
            "document_signed": self.document_signed,
            "signature_request": self.signature_request,
            "signature_reminder": self.signature_reminder,
        }


@dataclass(frozen=True)
class SignerInput:
    """Attributes used to create a signer at the provider."""

    name: str
    email: str
    phone_number: str | None = None
    birthday: str | None = None
    has_documentation: bool | None = None
    refusable: bool | None = None
    group: int | None = None
    communicate_events: CommunicateEvents | None = None
