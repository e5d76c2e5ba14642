"""Unit tests for CertificateService."""

from dataclasses import replace
from unittest.mock import AsyncMock

import pytest

from signflow.application.services.uploads import UploadedFile
from signflow.domain.errors import (
    CertificatePasswordError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from signflow.domain.models.audit import AuditAction
from signflow.domain.models.certificate import CertificateStatus, PersonType
from signflow.domain.models.user import User
from tests.helpers import VALID_CPF, Harness, make_pkcs12


def pfx(name: str = "cert.pfx", password: str = "secret123", **kwargs: object) -> UploadedFile:
    return UploadedFile(name, make_pkcs12(password=password, **kwargs))  # type: ignore[arg-type]


class TestUpload:
    async def test_stores_metadata_blob_and_encrypted_password(
        self, harness: Harness, user: User
    ) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), " Meu A1 ", "PF", "secret123", ip="10.0.0.1"
        )

        assert certificate.name == "Meu A1"
        assert certificate.type == PersonType.PF
        assert certificate.cpf_cnpj == VALID_CPF
        assert certificate.issued_by == "AC Teste v5"
        assert certificate.serial_number == "abc123"
        assert certificate.status == CertificateStatus.ACTIVE
        assert certificate.encrypted_password not in (None, "secret123")
        assert harness.cipher.decrypt(certificate.encrypted_password) == "secret123"
        assert certificate.blob_path.startswith(f"certificates/{user.id}/")
        assert certificate.blob_path in harness.storage.blobs
        assert harness.audit_log.entries[-1].action == AuditAction.CERTIFICATE_ADD
        assert harness.audit_log.entries[-1].ip == "10.0.0.1"

    @pytest.mark.parametrize(
        ("file", "name", "kind", "password", "field"),
        [
            (None, "A1", "PF", "secret123", "file"),
            (UploadedFile("a.pfx", b"x"), "  ", "PF", "secret123", "name"),
            (UploadedFile("a.pfx", b"x"), "A1", "XX", "secret123", "type"),
            (UploadedFile("a.pfx", b"x"), "A1", "PF", "", "password"),
            (UploadedFile("a.pem", b"x"), "A1", "PF", "secret123", "file"),
        ],
    )
    async def test_input_checks(
        self,
        harness: Harness,
        user: User,
        file: UploadedFile | None,
        name: str,
        kind: str,
        password: str,
        field: str,
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await harness.certificate_service.upload(user, file, name, kind, password)
        assert exc_info.value.field == field
        assert harness.storage.blobs == {}

    async def test_rejects_oversized_file(self, harness: Harness, user: User) -> None:
        big = UploadedFile("a.p12", b"0" * (5 * 1024 * 1024 + 1))

        with pytest.raises(ValidationError, match="5MB"):
            await harness.certificate_service.upload(user, big, "A1", "PF", "secret123")

    async def test_wrong_password(self, harness: Harness, user: User) -> None:
        with pytest.raises(CertificatePasswordError):
            await harness.certificate_service.upload(user, pfx(), "A1", "PF", "wrong")
        assert harness.storage.blobs == {}
        assert harness.audit_log.entries == []

    async def test_blob_removed_when_save_fails(
        self, harness: Harness, user: User, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            harness.certificates, "create", AsyncMock(side_effect=RuntimeError("db down"))
        )

        with pytest.raises(RuntimeError):
            await harness.certificate_service.upload(user, pfx(), "A1", "PF", "secret123")
        assert harness.storage.blobs == {}


class TestBulkUpload:
    async def test_each_file_succeeds_or_fails_alone(self, harness: Harness, user: User) -> None:
        result = await harness.certificate_service.upload_bulk(
            user,
            [pfx("one.pfx"), pfx("two.pfx")],
            ["One", "Two"],
            ["PF", "PF"],
            ["secret123", "wrong"],
        )

        assert (result.total, result.succeeded, result.failed) == (2, 1, 1)
        assert result.results[0].certificate_id is not None
        assert result.results[1].file_name == "two.pfx"
        assert "password" in (result.results[1].error or "")

    async def test_mismatched_lists(self, harness: Harness, user: User) -> None:
        with pytest.raises(ValidationError, match="must match"):
            await harness.certificate_service.upload_bulk(
                user, [pfx()], ["One", "Two"], ["PF"], ["secret123"]
            )


class TestAccess:
    async def test_other_user_is_denied_admin_allowed(
        self, harness: Harness, user: User, other_user: User, admin: User
    ) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), "A1", "PF", "secret123"
        )

        with pytest.raises(PermissionDeniedError):
            await harness.certificate_service.get(other_user, certificate.id)
        assert (await harness.certificate_service.get(admin, certificate.id)).id == certificate.id

    async def test_update_and_delete(self, harness: Harness, user: User) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), "A1", "PF", "secret123"
        )

        updated = await harness.certificate_service.update(
            user, certificate.id, name="Renamed", status="revoked"
        )
        assert updated.name == "Renamed"
        assert updated.status == CertificateStatus.REVOKED

        with pytest.raises(ValidationError):
            await harness.certificate_service.update(user, certificate.id, status="lost")

        await harness.certificate_service.delete(user, certificate.id)
        assert harness.storage.blobs == {}
        assert harness.audit_log.entries[-1].action == AuditAction.CERTIFICATE_REMOVE
        with pytest.raises(NotFoundError):
            await harness.certificate_service.get(user, certificate.id)


class TestPasswordAndDownload:
    async def test_reveal_password(self, harness: Harness, user: User) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), "A1", "PF", "secret123"
        )

        _, password = await harness.certificate_service.reveal_password(user, certificate.id)

        assert password == "secret123"

    async def test_download_with_stored_password(self, harness: Harness, user: User) -> None:
        upload = pfx()
        certificate = await harness.certificate_service.upload(
            user, upload, "Meu A1", "PF", "secret123"
        )

        content = await harness.certificate_service.download_file(user, certificate.id)

        assert content.data == upload.data
        assert content.file_name == "Meu A1.pfx"
        assert content.content_type == "application/x-pkcs12"

    async def test_download_without_stored_password_saves_when_asked(
        self, harness: Harness, user: User
    ) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), "A1", "PF", "secret123"
        )
        await harness.certificates.update(replace(certificate, encrypted_password=None))

        with pytest.raises(ValidationError) as exc_info:
            await harness.certificate_service.download_file(user, certificate.id)
        assert exc_info.value.field == "password"
        with pytest.raises(NotFoundError):
            await harness.certificate_service.reveal_password(user, certificate.id)
        with pytest.raises(CertificatePasswordError):
            await harness.certificate_service.download_file(user, certificate.id, "wrong")

        await harness.certificate_service.download_file(
            user, certificate.id, "secret123", save_password=True
        )

        stored = await harness.certificates.get(certificate.id)
        assert stored is not None and stored.has_password
        assert harness.cipher.decrypt(stored.encrypted_password) == "secret123"

    async def test_undecryptable_password_falls_back_to_provided(
        self, harness: Harness, user: User
    ) -> None:
        certificate = await harness.certificate_service.upload(
            user, pfx(), "A1", "PF", "secret123"
        )
        await harness.certificates.update(
            replace(certificate, encrypted_password="garbage:garbage:garbage")
        )

        with pytest.raises(ValidationError, match="saved password"):
            await harness.certificate_service.download_file(user, certificate.id)
        content = await harness.certificate_service.download_file(
            user, certificate.id, "secret123"
        )
        assert content.data
