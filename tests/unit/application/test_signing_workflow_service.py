"""Unit tests for SigningWorkflowService against the in-memory provider."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from signflow.application.services.signing_workflow_service import SignerData
from signflow.domain.errors import (
    CertificateNotUsableError,
    NotFoundError,
    SigningProviderError,
)
from signflow.domain.models.certificate import CertificateStatus, PersonType
from signflow.domain.models.provider import ProviderDocument
from signflow.domain.models.user import User
from tests.helpers import VALID_CPF, Harness, make_certificate


def signer_data(**overrides: object) -> SignerData:
    values: dict[str, object] = {
        "name": "Joao Souza",
        "email": "joao@example.com",
        "document_number": VALID_CPF,
        "document_type": PersonType.PF,
        "phone_number": "+5511999999999",
        "identification": "Diretor",
        "order": 1,
    }
    values.update(overrides)
    return SignerData(**values)  # type: ignore[arg-type]


async def envelope_with_document(harness: Harness) -> tuple[str, str]:
    envelope = await harness.workflow.create_envelope("Contrato")
    document_id = await harness.workflow.upload_document(
        envelope.envelope_id, "contrato.pdf", "data:application/pdf;base64,AA=="
    )
    return envelope.envelope_id, document_id


class TestEnvelopeAndDocument:
    async def test_create_envelope_reports_draft(self, harness: Harness) -> None:
        envelope = await harness.workflow.create_envelope("Contrato")

        assert envelope.status == "draft"
        assert harness.provider.called("create_envelope") == [("Contrato",)]

    async def test_upload_returns_once_document_is_processed(self, harness: Harness) -> None:
        _, document_id = await envelope_with_document(harness)

        assert document_id in harness.provider.documents
        assert harness.sleeps == []

    async def test_upload_retries_failed_status_checks(self, harness: Harness) -> None:
        harness.provider.fail_next(
            "get_document_status", SigningProviderError("not found", status_code=404)
        )

        await envelope_with_document(harness)

        assert len(harness.provider.called("get_document_status")) == 2
        assert harness.sleeps == [0.0]

    async def test_upload_gives_up_waiting_but_returns_id(
        self, harness: Harness, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            harness.provider,
            "get_document_status",
            AsyncMock(return_value=ProviderDocument(id="doc", status="processing")),
        )

        _, document_id = await envelope_with_document(harness)

        assert document_id.startswith("doc-")
        assert harness.sleeps == [0.0]


class TestAddSigner:
    async def test_creates_signer_with_both_requirements(
        self, harness: Harness, user: User
    ) -> None:
        envelope_id, document_id = await envelope_with_document(harness)

        added = await harness.workflow.add_signer(envelope_id, document_id, signer_data(), user.id)

        assert added.signature_requirement.action == "agree"
        assert added.auth_requirement.auth == "icp_brasil"
        [(_, sent)] = harness.provider.called("add_signer")
        assert sent.group == 1
        assert sent.has_documentation is True
        assert sent.refusable is False

    async def test_requirement_retried_while_document_unavailable(
        self, harness: Harness, user: User
    ) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        harness.provider.fail_next(
            "add_signature_requirement",
            SigningProviderError("Documento não está disponível", status_code=422),
        )

        await harness.workflow.add_signer(envelope_id, document_id, signer_data(), user.id)

        assert len(harness.provider.called("add_signature_requirement")) == 2
        assert harness.sleeps == [0.0]

    async def test_other_requirement_errors_propagate(self, harness: Harness, user: User) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        harness.provider.fail_next("add_auth_requirement")

        with pytest.raises(SigningProviderError, match="add_auth_requirement failed"):
            await harness.workflow.add_signer(envelope_id, document_id, signer_data(), user.id)

    async def test_certificate_must_exist(self, harness: Harness, user: User) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        certificate = make_certificate(user.id)

        with pytest.raises(NotFoundError):
            await harness.workflow.add_signer(
                envelope_id, document_id, signer_data(certificate_id=certificate.id), user.id
            )
        assert harness.provider.called("add_signer") == []

    @pytest.mark.parametrize(
        "overrides",
        [
            {"status": CertificateStatus.REVOKED},
            {"valid_to": datetime.now(timezone.utc) - timedelta(days=1)},
        ],
    )
    async def test_certificate_must_be_usable(
        self, harness: Harness, user: User, overrides: dict[str, object]
    ) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        certificate = await harness.certificates.create(make_certificate(user.id, **overrides))

        with pytest.raises(CertificateNotUsableError):
            await harness.workflow.add_signer(
                envelope_id, document_id, signer_data(certificate_id=certificate.id), user.id
            )

    async def test_certificate_of_another_user(
        self, harness: Harness, user: User, other_user: User
    ) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        certificate = await harness.certificates.create(make_certificate(other_user.id))

        with pytest.raises(CertificateNotUsableError, match="does not belong"):
            await harness.workflow.add_signer(
                envelope_id, document_id, signer_data(certificate_id=certificate.id), user.id
            )


class TestActivation:
    async def test_verify_counts_agree_requirements(self, harness: Harness, user: User) -> None:
        envelope_id, document_id = await envelope_with_document(harness)
        await harness.workflow.add_signer(envelope_id, document_id, signer_data(), user.id)

        assert await harness.workflow.verify_all_signers_have_requirements(envelope_id, 1)
        assert not await harness.workflow.verify_all_signers_have_requirements(envelope_id, 2)

    async def test_verify_treats_provider_failure_as_success(self, harness: Harness) -> None:
        harness.provider.fail_next("get_requirements")

        assert await harness.workflow.verify_all_signers_have_requirements("env-x", 3)

    async def test_activate(self, harness: Harness) -> None:
        envelope_id, _ = await envelope_with_document(harness)

        assert await harness.workflow.activate_envelope(envelope_id) == "running"

    async def test_activate_translates_empty_envelope_error(self, harness: Harness) -> None:
        envelope_id, _ = await envelope_with_document(harness)
        harness.provider.fail_next(
            "activate_envelope", SigningProviderError("invalid", status_code=422, code="100")
        )

        with pytest.raises(SigningProviderError, match="no documents or signers"):
            await harness.workflow.activate_envelope(envelope_id)

    async def test_activate_requires_active_status(
        self, harness: Harness, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        envelope_id, _ = await envelope_with_document(harness)
        monkeypatch.setattr(
            harness.provider, "get_envelope_status", AsyncMock(return_value="draft")
        )

        with pytest.raises(SigningProviderError, match="Current status: draft"):
            await harness.workflow.activate_envelope(envelope_id)


class TestRequirements:
    async def test_bulk_update_passes_operations_through(self, harness: Harness) -> None:
        envelope_id, _ = await envelope_with_document(harness)
        operations = [
            {"op": "remove", "ref": {"type": "requirements", "id": "req-1"}},
            {"op": "add", "data": {"type": "requirements", "attributes": {"action": "agree"}}},
        ]

        result = await harness.workflow.bulk_update_requirements(envelope_id, operations)

        assert result == []
        assert harness.provider.called("bulk_requirements") == [(envelope_id, operations)]
