"""Unit tests for SignerService."""

from dataclasses import replace

import pytest

from signflow.application.services.signer_service import (
    BatchSignersError,
    SignerChanges,
    SignerRequest,
)
from signflow.domain.errors import SigningProviderError, ValidationError
from signflow.domain.models.audit import AuditAction
from signflow.domain.models.certificate import PersonType
from signflow.domain.models.document import DocumentStatus, SignerStatus
from signflow.domain.models.user import User
from tests.helpers import VALID_CNPJ, VALID_CPF, Harness


def request(name: str = "Joao Souza", **overrides: object) -> SignerRequest:
    values: dict[str, object] = {
        "name": name,
        "email": f"{name.split()[0].lower()}@example.com",
        "document_number": VALID_CPF,
        "document_type": "PF",
        "phone_number": "+5511999999999",
        "identification": "Diretor",
    }
    values.update(overrides)
    return SignerRequest(**values)  # type: ignore[arg-type]


class TestAdd:
    async def test_creates_signer_at_provider_and_locally(
        self, harness: Harness, user: User
    ) -> None:
        document = await harness.upload(user)

        signer = await harness.signer_service.add(
            user, document.id, request(document_number="529.982.247-25"), ip="1.2.3.4"
        )

        assert signer.order == 1
        assert signer.document_number == VALID_CPF
        assert signer.signature_type == "electronic"
        assert signer.provider_signer_key in harness.provider.signers
        assert signer.provider_requirement_key is not None
        stored = await harness.documents.get(document.id)
        assert stored is not None
        assert stored.status == DocumentStatus.WAITING_SIGNERS
        assert [s.id for s in stored.signers] == [signer.id]
        assert harness.audit_log.entries[-1].action == AuditAction.SIGNER_ADD

    async def test_order_follows_existing_signers(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        await harness.add_signer(user, document, "Joao Souza")

        second = await harness.add_signer(user, document, "Ana Costa")

        assert second.order == 2

    async def test_legal_entity_signer(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)

        signer = await harness.add_signer(
            user, document, "Empresa Ltda", document_number=VALID_CNPJ, document_type="PJ"
        )

        assert signer.document_type == PersonType.PJ

    @pytest.mark.parametrize(
        ("overrides", "field"),
        [
            ({"name": "J"}, "name"),
            ({"phone_number": " "}, "phoneNumber"),
            ({"identification": None}, "identification"),
            ({"document_type": "XX"}, "documentType"),
            ({"document_number": "11111111111"}, "documentNumber"),
            ({"document_number": ""}, "documentNumber"),
        ],
    )
    async def test_validation(
        self, harness: Harness, user: User, overrides: dict[str, object], field: str
    ) -> None:
        document = await harness.upload(user)

        with pytest.raises(ValidationError) as exc_info:
            await harness.signer_service.add(user, document.id, request(**overrides))
        assert exc_info.value.field == field
        assert harness.provider.called("add_signer") == []

    async def test_provider_failure_saves_nothing(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        harness.provider.fail_next("add_signer")

        with pytest.raises(SigningProviderError):
            await harness.signer_service.add(user, document.id, request())
        stored = await harness.documents.get(document.id)
        assert stored is not None and stored.signers == ()


class TestUpdate:
    async def test_updates_fields(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        updated = await harness.signer_service.update(
            user,
            document.id,
            signer.id,
            SignerChanges(
                name=" Joao S. Souza ",
                document_number=VALID_CNPJ,
                document_type="PJ",
                order=3,
            ),
        )

        assert updated.name == "Joao S. Souza"
        assert updated.document_type == PersonType.PJ
        assert updated.document_number == VALID_CNPJ
        assert updated.order == 3

    async def test_invalid_number_with_type(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        with pytest.raises(ValidationError):
            await harness.signer_service.update(
                user,
                document.id,
                signer.id,
                SignerChanges(document_number="123", document_type="PF"),
            )

    async def test_number_alone_is_checked_against_stored_type(
        self, harness: Harness, user: User
    ) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        with pytest.raises(ValidationError, match="Invalid CPF") as exc_info:
            await harness.signer_service.update(
                user, document.id, signer.id, SignerChanges(document_number="123.456.789-00")
            )

        assert exc_info.value.field == "documentNumber"
        stored = await harness.documents.get_signer(signer.id)
        assert stored is not None
        assert stored.document_number == VALID_CPF

    async def test_number_alone_is_stored_as_digits(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        updated = await harness.signer_service.update(
            user, document.id, signer.id, SignerChanges(document_number="529.982.247-25")
        )

        assert updated.document_number == VALID_CPF
        assert updated.document_type == PersonType.PF

    async def test_type_change_rechecks_stored_number(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        with pytest.raises(ValidationError, match="Invalid CNPJ"):
            await harness.signer_service.update(
                user, document.id, signer.id, SignerChanges(document_type="PJ")
            )

    async def test_empty_type_is_a_validation_error(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        with pytest.raises(ValidationError) as exc_info:
            await harness.signer_service.update(
                user,
                document.id,
                signer.id,
                SignerChanges(document_type="", document_number=VALID_CPF),
            )

        assert exc_info.value.field == "documentType"

    async def test_signed_signer_is_frozen(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)
        await harness.documents.update_signer(replace(signer, status=SignerStatus.SIGNED))

        with pytest.raises(ValidationError, match="already signed"):
            await harness.signer_service.update(
                user, document.id, signer.id, SignerChanges(name="Novo Nome")
            )
        with pytest.raises(ValidationError, match="already signed"):
            await harness.signer_service.remove(user, document.id, signer.id)


class TestRemove:
    async def test_removes_at_provider_and_locally(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        await harness.signer_service.remove(user, document.id, signer.id)

        assert harness.provider.called("delete_signer") == [
            (document.envelope_key, signer.provider_signer_key)
        ]
        assert await harness.documents.get_signer(signer.id) is None
        assert harness.audit_log.entries[-1].action == AuditAction.SIGNER_REMOVE

    async def test_finished_envelope_keeps_signer(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)
        harness.provider.set_envelope_status(document.envelope_key, "closed")

        with pytest.raises(ValidationError, match="finished envelope"):
            await harness.signer_service.remove(user, document.id, signer.id)
        assert await harness.documents.get_signer(signer.id) is not None


class TestBatch:
    async def test_all_created(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)

        result = await harness.signer_service.add_batch(
            user, document.id, [request("Joao Souza"), request("Ana Costa")]
        )

        assert not result.partial
        assert [s.order for s in result.created] == [1, 2]
        assert result.document is not None
        assert result.document.status == DocumentStatus.WAITING_SIGNERS
        assert len(result.document.signers) == 2

    async def test_partial_failure(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        harness.provider.fail_next("add_signer")

        result = await harness.signer_service.add_batch(
            user, document.id, [request("Joao Souza"), request("Ana Costa")]
        )

        assert result.partial
        assert [(e.index, e.name) for e in result.errors] == [(0, "Joao Souza")]
        assert [s.name for s in result.created] == ["Ana Costa"]
        assert result.created[0].order == 2

    async def test_every_entry_failed(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        harness.provider.fail_next("add_signer")

        with pytest.raises(BatchSignersError) as exc_info:
            await harness.signer_service.add_batch(user, document.id, [request()])
        assert exc_info.value.message == "add_signer failed"
        assert len(exc_info.value.errors) == 1

    @pytest.mark.parametrize(
        ("entry", "match"),
        [
            (request(name="Joao"), "first and last name"),
            (request(email="not-an-email"), "email"),
            (request(document_number="00000000000"), "Invalid CPF"),
            (request(phone_number=None), "Every signer must have"),
        ],
    )
    async def test_entries_validated_up_front(
        self, harness: Harness, user: User, entry: SignerRequest, match: str
    ) -> None:
        document = await harness.upload(user)

        with pytest.raises(ValidationError, match=match):
            await harness.signer_service.add_batch(user, document.id, [request(), entry])
        assert harness.provider.called("add_signer") == []

    async def test_empty_batch(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)

        with pytest.raises(ValidationError, match="cannot be empty"):
            await harness.signer_service.add_batch(user, document.id, [])

    async def test_local_insert_failure_propagates(self, harness: Harness, user: User) -> None:
        document = await harness.upload(user)
        harness.documents.fail_add_signers = True

        with pytest.raises(RuntimeError):
            await harness.signer_service.add_batch(user, document.id, [request()])
        stored = await harness.documents.get(document.id)
        assert stored is not None and stored.signers == ()
