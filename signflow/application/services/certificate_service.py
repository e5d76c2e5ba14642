"""Certificate service: A1 (PKCS#12) certificate management.

Uploaded bundles are parsed with their password to extract metadata,
stored as blobs, and the password is kept encrypted so that the bundle
can be handed back to its owner later without asking again.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.blob_storage import BlobStorageProtocol
from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.application.ports.crypto import (
    CertificateReaderProtocol,
    PasswordCipherProtocol,
)
from signflow.application.services.access import ensure_owner_or_admin
from signflow.application.services.audit_service import AuditService
from signflow.application.services.base import LoggingMixin
from signflow.application.services.uploads import FileContent, UploadedFile
from signflow.domain.errors import (
    NotFoundError,
    PasswordEncryptionError,
    ValidationError,
)
from signflow.domain.exceptions import SignflowError
from signflow.domain.models.audit import AuditAction
from signflow.domain.models.certificate import (
    Certificate,
    CertificateStatus,
    PersonType,
)
from signflow.domain.models.user import User

MAX_CERTIFICATE_SIZE = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = (".pfx", ".p12")
PKCS12_CONTENT_TYPE = "application/x-pkcs12"


@dataclass(frozen=True)
class BulkItemResult:
    file_name: str
    success: bool
    certificate_id: UUID | None = None
    error: str | None = None


@dataclass(frozen=True)
class BulkUploadResult:
    results: list[BulkItemResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded


def parse_person_type(value: str | PersonType | None) -> PersonType:
    if isinstance(value, PersonType):
        return value
    try:
        return PersonType(value or "")
    except ValueError:
        raise ValidationError(
            "Invalid certificate type (must be PF or PJ)", field="type"
        ) from None


def parse_certificate_status(value: str) -> CertificateStatus:
    try:
        return CertificateStatus(value)
    except ValueError:
        raise ValidationError(
            "Status must be one of: active, expired, revoked", field="status"
        ) from None


class CertificateService(LoggingMixin):
    """Upload, inspection and retrieval of A1 certificates."""

    def __init__(
        self,
        repository: CertificateRepositoryProtocol,
        storage: BlobStorageProtocol,
        reader: CertificateReaderProtocol,
        cipher: PasswordCipherProtocol,
        audit: AuditService,
    ) -> None:
        self._repository = repository
        self._storage = storage
        self._reader = reader
        self._cipher = cipher
        self._audit = audit
        self._init_logger(component="certificates")

    async def list_for_user(self, user: User) -> list[Certificate]:
        return await self._repository.list_for_user(user.id)

    async def upload(
        self,
        user: User,
        file: UploadedFile | None,
        name: str | None,
        kind: str | PersonType | None,
        password: str | None,
        ip: str | None = None,
    ) -> Certificate:
        """Validate, parse and store a PKCS#12 certificate.

        Checks run in this order: file present, name, type, password,
        extension, size. The blob is removed again when the metadata
        cannot be saved.

        Raises:
            ValidationError: If any input check fails.
            CertificatePasswordError: If the bundle cannot be opened.
        """
        if file is None or not file.data:
            raise ValidationError("No file provided", field="file")
        if not name or not name.strip():
            raise ValidationError("Certificate name is required", field="name")
        person_type = parse_person_type(kind)
        if not password:
            raise ValidationError("Certificate password is required", field="password")
        if not file.file_name.lower().endswith(ALLOWED_EXTENSIONS):
            raise ValidationError("Only .pfx or .p12 files are allowed", field="file")
        if file.size > MAX_CERTIFICATE_SIZE:
            raise ValidationError("File too large. Maximum size: 5MB", field="file")

        log = self._log_operation("upload_certificate", user_id=str(user.id))
        details = self._reader.read(file.data, password, person_type)
        encrypted_password = self._cipher.encrypt(password)

        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        blob_path = await self._storage.save(
            f"certificates/{user.id}/{timestamp}-{file.safe_name}",
            file.data,
        )
        certificate = Certificate(
            id=uuid7(),
            user_id=user.id,
            name=name.strip(),
            type=person_type,
            cpf_cnpj=details.cpf_cnpj,
            issued_by=details.issued_by,
            serial_number=details.serial_number,
            valid_from=details.valid_from,
            valid_to=details.valid_to,
            blob_path=blob_path,
            status=CertificateStatus.ACTIVE,
            encrypted_password=encrypted_password,
        )
        try:
            certificate = await self._repository.create(certificate)
        except Exception:
            await self._storage.delete(blob_path)
            raise

        await self._audit.record(
            user,
            AuditAction.CERTIFICATE_ADD,
            ip=ip,
            details={"certificate_id": str(certificate.id), "name": certificate.name},
        )
        log.info(
            "certificate_uploaded",
            certificate_id=str(certificate.id),
            valid_to=certificate.valid_to.isoformat(),
        )
        return certificate

    async def upload_bulk(
        self,
        user: User,
        files: list[UploadedFile],
        names: list[str],
        kinds: list[str],
        passwords: list[str],
        ip: str | None = None,
    ) -> BulkUploadResult:
        """Upload several certificates; each one succeeds or fails on its own.

        Raises:
            ValidationError: If no file is given or the parallel lists differ
                in length.
        """
        if not files:
            raise ValidationError("No files provided", field="files")
        if not (len(files) == len(names) == len(kinds) == len(passwords)):
            raise ValidationError("Number of files, names, types and passwords must match")

        results: list[BulkItemResult] = []
        for file, name, kind, password in zip(files, names, kinds, passwords):
            try:
                certificate = await self.upload(user, file, name, kind, password, ip=ip)
            except SignflowError as e:
                results.append(
                    BulkItemResult(file_name=file.file_name, success=False, error=e.message)
                )
                continue
            results.append(
                BulkItemResult(
                    file_name=file.file_name, success=True, certificate_id=certificate.id
                )
            )

        outcome = BulkUploadResult(results=results)
        self._log_operation("upload_bulk", user_id=str(user.id)).info(
            "certificates_bulk_uploaded",
            total=outcome.total,
            succeeded=outcome.succeeded,
            failed=outcome.failed,
        )
        return outcome

    async def get(self, user: User, certificate_id: UUID) -> Certificate:
        certificate = await self._repository.get(certificate_id)
        if certificate is None:
            raise NotFoundError("certificate", certificate_id)
        ensure_owner_or_admin(user, certificate.user_id, "certificate")
        return certificate

    async def update(
        self,
        user: User,
        certificate_id: UUID,
        name: str | None = None,
        status: str | None = None,
    ) -> Certificate:
        certificate = await self.get(user, certificate_id)
        changes: dict[str, object] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Certificate name is required", field="name")
            changes["name"] = name.strip()
        if status is not None:
            changes["status"] = parse_certificate_status(status)
        return await self._repository.update(replace(certificate, **changes))

    async def delete(self, user: User, certificate_id: UUID, ip: str | None = None) -> None:
        certificate = await self.get(user, certificate_id)
        log = self._log_operation("delete_certificate", certificate_id=str(certificate_id))
        if not await self._storage.delete(certificate.blob_path):
            log.warning("certificate_blob_missing")
        await self._repository.delete(certificate_id)
        await self._audit.record(
            user,
            AuditAction.CERTIFICATE_REMOVE,
            ip=ip,
            details={"certificate_id": str(certificate_id), "name": certificate.name},
        )
        log.info("certificate_deleted")

    async def reveal_password(self, user: User, certificate_id: UUID) -> tuple[Certificate, str]:
        """Decrypt the stored password.

        Raises:
            NotFoundError: If the certificate has no stored password.
            PasswordEncryptionError: If decryption fails.
        """
        certificate = await self.get(user, certificate_id)
        if not certificate.encrypted_password:
            raise NotFoundError("certificate password", certificate_id)
        password = self._cipher.decrypt(certificate.encrypted_password)
        self._log_operation("reveal_password", certificate_id=str(certificate_id)).info(
            "certificate_password_revealed"
        )
        return certificate, password

    async def download_file(
        self,
        user: User,
        certificate_id: UUID,
        password: str | None = None,
        save_password: bool = False,
    ) -> FileContent:
        """Return the PKCS#12 bundle after proving the password opens it.

        The stored password is preferred; a provided one is used when none
        is stored or the stored one cannot be decrypted, and is saved when
        ``save_password`` is set and none was stored.

        Raises:
            ValidationError: If no usable password is available.
            CertificatePasswordError: If the password does not open the bundle.
        """
        certificate = await self.get(user, certificate_id)
        log = self._log_operation("download_certificate", certificate_id=str(certificate_id))

        should_save = False
        if certificate.encrypted_password:
            try:
                resolved = self._cipher.decrypt(certificate.encrypted_password)
            except PasswordEncryptionError:
                if not password:
                    raise ValidationError(
                        "Could not read the saved password. Please provide it manually.",
                        field="password",
                    ) from None
                resolved = password
        else:
            if not password:
                raise ValidationError(
                    "Certificate password is required. This certificate has no saved password.",
                    field="password",
                )
            resolved = password
            should_save = save_password

        data = await self._storage.load(certificate.blob_path)
        self._reader.read(data, resolved, certificate.type)

        if should_save:
            try:
                await self._repository.update(
                    replace(certificate, encrypted_password=self._cipher.encrypt(resolved))
                )
            except SignflowError as e:
                log.warning("certificate_password_save_failed", error=e.message)
            else:
                log.info("certificate_password_saved")

        return FileContent(
            data=data,
            file_name=f"{certificate.name}.pfx",
            content_type=PKCS12_CONTENT_TYPE,
        )
