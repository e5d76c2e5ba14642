"""Unit tests for mapping provider statuses onto local statuses."""

import pytest

from signflow.domain.models.document import DocumentStatus, SignerStatus
from signflow.domain.services.provider_status import (
    derive_document_status,
    is_signed_or_closed,
    map_signer_status,
)


class TestDeriveDocumentStatus:
    @pytest.mark.parametrize(
        ("envelope", "document"),
        [("closed", "running"), ("canceled", None), ("running", "closed"), (None, "finalized")],
    )
    def test_finished_is_completed(self, envelope: str | None, document: str | None) -> None:
        status = derive_document_status(envelope, document, [], DocumentStatus.SIGNING)
        assert status == DocumentStatus.COMPLETED

    def test_running_with_all_signed_is_signed(self) -> None:
        status = derive_document_status(
            "running",
            "running",
            [SignerStatus.SIGNED, SignerStatus.SIGNED],
            DocumentStatus.SIGNING,
        )
        assert status == DocumentStatus.SIGNED

    def test_running_with_outstanding_signers_is_signing(self) -> None:
        status = derive_document_status(
            "running",
            None,
            [SignerStatus.SIGNED, SignerStatus.PENDING],
            DocumentStatus.WAITING_SIGNERS,
        )
        assert status == DocumentStatus.SIGNING

    def test_running_without_signers_is_signing(self) -> None:
        status = derive_document_status("running", None, [], DocumentStatus.PENDING)
        assert status == DocumentStatus.SIGNING

    @pytest.mark.parametrize("envelope", ["draft", "active"])
    def test_draft_depends_on_signers(self, envelope: str) -> None:
        assert (
            derive_document_status(envelope, "draft", [], DocumentStatus.FAILED)
            == DocumentStatus.PENDING
        )
        assert (
            derive_document_status(envelope, "draft", [SignerStatus.PENDING], DocumentStatus.FAILED)
            == DocumentStatus.WAITING_SIGNERS
        )

    def test_unknown_keeps_current(self) -> None:
        status = derive_document_status("weird", "other", [], DocumentStatus.SIGNED)
        assert status == DocumentStatus.SIGNED


class TestSignerStatus:
    @pytest.mark.parametrize(
        ("provider", "expected"),
        [
            ("signed", SignerStatus.SIGNED),
            ("error", SignerStatus.ERROR),
            ("pending", SignerStatus.PENDING),
            (None, SignerStatus.PENDING),
        ],
    )
    def test_maps(self, provider: str | None, expected: SignerStatus) -> None:
        assert map_signer_status(provider) == expected

    def test_is_signed_or_closed(self) -> None:
        assert is_signed_or_closed("closed")
        assert is_signed_or_closed("finalized")
        assert not is_signed_or_closed("running")
        assert not is_signed_or_closed(None)
