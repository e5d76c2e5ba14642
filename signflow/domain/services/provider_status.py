"""Mapping of provider envelope/document statuses to local statuses.

Envelope statuses: draft, active, running, closed, canceled.
Document statuses: draft, available, ready, processing, running, closed,
finalized, canceled.
"""

from __future__ import annotations

from collections.abc import Iterable

from signflow.domain.models.document import DocumentStatus, SignerStatus
from signflow.domain.models.provider import (
    DOCUMENT_FINISHED_STATUSES,
    ENVELOPE_FINISHED_STATUSES,
)


def derive_document_status(
    envelope_status: str | None,
    document_status: str | None,
    signer_statuses: Iterable[SignerStatus],
    current: DocumentStatus,
) -> DocumentStatus:
    """Derive the local document status from the provider's view.

    Args:
        envelope_status: Envelope status reported by the provider.
        document_status: Document status reported by the provider.
        signer_statuses: Local statuses of the document's signers.
        current: Status to keep when nothing matches.

    Returns:
        The mapped DocumentStatus.
    """
    statuses = list(signer_statuses)
    if (
        envelope_status in ENVELOPE_FINISHED_STATUSES
        or document_status in DOCUMENT_FINISHED_STATUSES
    ):
        return DocumentStatus.COMPLETED
    if envelope_status == "running" or document_status == "running":
        all_signed = bool(statuses) and all(s == SignerStatus.SIGNED for s in statuses)
        return DocumentStatus.SIGNED if all_signed else DocumentStatus.SIGNING
    if envelope_status in ("active", "draft"):
        return DocumentStatus.WAITING_SIGNERS if statuses else DocumentStatus.PENDING
    return current


def map_signer_status(provider_status: str | None) -> SignerStatus:
    """Map a provider signer status onto the local signer status."""
    if provider_status == "signed":
        return SignerStatus.SIGNED
    if provider_status == "error":
        return SignerStatus.ERROR
    return SignerStatus.PENDING


def is_signed_or_closed(status: str | None) -> bool:
    """Whether the provider considers the document finished."""
    return status in ("closed", "finalized")
