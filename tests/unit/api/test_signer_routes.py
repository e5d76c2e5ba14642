"""Unit tests for the signer routes."""

from collections.abc import Awaitable, Callable

from httpx import AsyncClient

from signflow.domain.models.user import User
from tests.helpers import VALID_CPF, Harness

Login = Callable[[User], Awaitable[None]]


def signer_body(name: str = "Joao Souza", **overrides: object) -> dict[str, object]:
    body: dict[str, object] = {
        "name": name,
        "email": f"{name.split()[0].lower()}@example.com",
        "documentNumber": VALID_CPF,
        "documentType": "PF",
        "phoneNumber": "+5511999999999",
        "identification": "Diretor",
    }
    body.update(overrides)
    return body


class TestSingleSigner:
    async def test_add_update_remove(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)
        base = f"/v1/documents/{document.id}/signers"

        created = await client.post(base, json=signer_body())
        assert created.status_code == 201
        signer = created.json()
        assert signer["order"] == 1
        assert signer["status"] == "pending"
        assert signer["providerSignerKey"]

        updated = await client.patch(
            f"{base}/{signer['id']}", json={"identification": "Testemunha"}
        )
        assert updated.json()["identification"] == "Testemunha"

        removed = await client.delete(f"{base}/{signer['id']}")
        assert removed.json() == {"success": True, "message": "Signer removed"}
        assert harness.provider.called("delete_signer")

    async def test_invalid_cpf(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)

        response = await client.post(
            f"/v1/documents/{document.id}/signers",
            json=signer_body(documentNumber="12345678900"),
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["detail"] == "Invalid CPF"
        assert detail["field"] == "documentNumber"

    async def test_update_rejects_invalid_cpf(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)
        url = f"/v1/documents/{document.id}/signers/{signer.id}"

        response = await client.patch(url, json={"documentNumber": "12345678900"})

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "documentNumber"
        stored = await harness.documents.get_signer(signer.id)
        assert stored is not None
        assert stored.document_number == VALID_CPF

    async def test_update_with_empty_type(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)
        signer = await harness.add_signer(user, document)

        response = await client.patch(
            f"/v1/documents/{document.id}/signers/{signer.id}",
            json={"documentType": "", "documentNumber": VALID_CPF},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "documentType"


class TestBatch:
    async def test_all_created(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)

        response = await client.post(
            f"/v1/documents/{document.id}/signers/batch",
            json={"signers": [signer_body("Joao Souza"), signer_body("Ana Costa")]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["totalSigners"] == 2
        assert body["documentStatus"] == "waiting_signers"

    async def test_partial_is_multi_status(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)
        harness.provider.fail_next("add_signer")

        response = await client.post(
            f"/v1/documents/{document.id}/signers/batch",
            json={"signers": [signer_body("Joao Souza"), signer_body("Ana Costa")]},
        )

        assert response.status_code == 207
        body = response.json()
        assert body["partial"] is True
        assert (body["created"], body["failed"]) == (1, 1)
        assert body["errors"] == [
            {"index": 0, "name": "Joao Souza", "error": "add_signer failed"}
        ]
        assert [s["name"] for s in body["signers"]] == ["Ana Costa"]

    async def test_all_failed(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)
        harness.provider.fail_next("add_signer")

        response = await client.post(
            f"/v1/documents/{document.id}/signers/batch",
            json={"signers": [signer_body()]},
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["type"] == "urn:signflow:signers:batch-failed"
        assert detail["created"] == 0
        assert detail["errors"][0]["name"] == "Joao Souza"

    async def test_invalid_entry(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        document = await harness.upload(user)

        response = await client.post(
            f"/v1/documents/{document.id}/signers/batch",
            json={"signers": [signer_body("Joao")]},
        )

        assert response.status_code == 400
        assert "first and last name" in response.json()["detail"]["detail"]
