"""Unit tests for the certificate routes."""

from collections.abc import Awaitable, Callable
from dataclasses import replace
from uuid import UUID

from httpx import AsyncClient

from signflow.domain.models.user import User
from tests.helpers import VALID_CPF, Harness, make_pkcs12

Login = Callable[[User], Awaitable[None]]


async def upload(
    client: AsyncClient, password: str = "secret123", name: str = "Meu A1"
) -> dict:
    response = await client.post(
        "/v1/certificates",
        files={"file": ("cert.pfx", make_pkcs12(), "application/x-pkcs12")},
        data={"name": name, "type": "PF", "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestUpload:
    async def test_upload_and_list(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)

        certificate = await upload(client)
        listing = await client.get("/v1/certificates")

        assert certificate["cpfCnpj"] == VALID_CPF
        assert certificate["type"] == "PF"
        assert certificate["hasPassword"] is True
        assert certificate["validity"]["status"] == "valid"
        assert "encryptedPassword" not in certificate
        assert [c["id"] for c in listing.json()["certificates"]] == [certificate["id"]]

    async def test_wrong_password(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)

        response = await client.post(
            "/v1/certificates",
            files={"file": ("cert.pfx", make_pkcs12(), "application/x-pkcs12")},
            data={"name": "A1", "type": "PF", "password": "wrong"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["type"] == (
            "urn:signflow:certificates:certificate-password"
        )

    async def test_missing_file(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)

        response = await client.post(
            "/v1/certificates", data={"name": "A1", "type": "PF", "password": "secret123"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["field"] == "file"

    async def test_requires_session(self, client: AsyncClient) -> None:
        response = await client.get("/v1/certificates")

        assert response.status_code == 401

    async def test_bulk(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)

        response = await client.post(
            "/v1/certificates/bulk",
            files=[
                ("files", ("one.pfx", make_pkcs12(), "application/x-pkcs12")),
                ("files", ("two.pfx", make_pkcs12(), "application/x-pkcs12")),
            ],
            data={
                "names": ["One", "Two"],
                "types": ["PF", "PF"],
                "passwords": ["secret123", "wrong"],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == {"total": 2, "success": 1, "errors": 1}
        assert [r["success"] for r in body["results"]] == [True, False]


class TestManage:
    async def test_other_user_is_forbidden(
        self, client: AsyncClient, login: Login, user: User, other_user: User
    ) -> None:
        await login(user)
        certificate = await upload(client)
        await login(other_user)

        response = await client.get(f"/v1/certificates/{certificate['id']}")

        assert response.status_code == 403

    async def test_update_and_delete(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)
        certificate = await upload(client)
        url = f"/v1/certificates/{certificate['id']}"

        renamed = await client.patch(url, json={"name": "Renomeado", "status": "revoked"})
        assert renamed.json()["name"] == "Renomeado"
        assert renamed.json()["status"] == "revoked"

        deleted = await client.delete(url)
        assert deleted.json() == {"success": True, "message": "Certificate deleted"}
        assert (await client.get(url)).status_code == 404


class TestPasswordAndFile:
    async def test_reveal_password(self, client: AsyncClient, login: Login, user: User) -> None:
        await login(user)
        certificate = await upload(client)

        response = await client.get(f"/v1/certificates/{certificate['id']}/password")

        assert response.json() == {
            "password": "secret123",
            "certificateId": certificate["id"],
            "certificateName": "Meu A1",
        }

    async def test_get_file_is_not_allowed(
        self, client: AsyncClient, login: Login, user: User
    ) -> None:
        await login(user)
        certificate = await upload(client)

        response = await client.get(f"/v1/certificates/{certificate['id']}/file")

        assert response.status_code == 405
        assert response.headers["allow"] == "POST"

    async def test_download_with_stored_password(
        self, client: AsyncClient, login: Login, user: User
    ) -> None:
        await login(user)
        certificate = await upload(client)

        response = await client.post(f"/v1/certificates/{certificate['id']}/file", json={})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/x-pkcs12"
        assert 'filename="Meu A1.pfx"' in response.headers["content-disposition"]
        assert response.headers["cache-control"] == "no-store"
        assert response.content

    async def test_wrong_password_is_unauthorized(
        self, client: AsyncClient, harness: Harness, login: Login, user: User
    ) -> None:
        await login(user)
        certificate_id = UUID((await upload(client))["id"])
        stored = await harness.certificates.get(certificate_id)
        assert stored is not None
        await harness.certificates.update(replace(stored, encrypted_password=None))

        missing = await client.post(f"/v1/certificates/{certificate_id}/file", json={})
        wrong = await client.post(
            f"/v1/certificates/{certificate_id}/file", json={"password": "wrong"}
        )

        assert missing.status_code == 400
        assert wrong.status_code == 401
