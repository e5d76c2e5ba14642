"""Certificate API models."""

from datetime import datetime, timezone
from uuid import UUID

from signflow.api.models.base import CamelModel, DateTimeWithZ
from signflow.application.services.certificate_service import BulkUploadResult
from signflow.domain.models.certificate import Certificate
from signflow.domain.services.certificate_validity import validity_status


class ValidityResponse(CamelModel):
    status: str
    days_remaining: int


class CertificateResponse(CamelModel):
    id: UUID
    name: str
    type: str
    cpf_cnpj: str
    issued_by: str
    serial_number: str
    valid_from: DateTimeWithZ
    valid_to: DateTimeWithZ
    status: str
    created_at: DateTimeWithZ
    has_password: bool
    validity: ValidityResponse

    @classmethod
    def from_certificate(
        cls, certificate: Certificate, now: datetime | None = None
    ) -> "CertificateResponse":
        validity = validity_status(certificate.valid_to, now or datetime.now(timezone.utc))
        return cls(
            id=certificate.id,
            name=certificate.name,
            type=certificate.type.value,
            cpf_cnpj=certificate.cpf_cnpj,
            issued_by=certificate.issued_by,
            serial_number=certificate.serial_number,
            valid_from=certificate.valid_from,
            valid_to=certificate.valid_to,
            status=certificate.status.value,
            created_at=certificate.created_at,
            has_password=certificate.has_password,
            validity=ValidityResponse(
                status=validity.status.value, days_remaining=validity.days_remaining
            ),
        )


class CertificateListResponse(CamelModel):
    certificates: list[CertificateResponse]


class UpdateCertificateRequest(CamelModel):
    name: str | None = None
    status: str | None = None


class CertificatePasswordResponse(CamelModel):
    password: str
    certificate_id: UUID
    certificate_name: str


class CertificateFileRequest(CamelModel):
    password: str | None = None
    save_password: bool = False


class BulkItemResponse(CamelModel):
    file_name: str
    success: bool
    certificate_id: UUID | None = None
    error: str | None = None


class BulkSummary(CamelModel):
    total: int
    success: int
    errors: int


class BulkUploadResponse(CamelModel):
    results: list[BulkItemResponse]
    summary: BulkSummary

    @classmethod
    def from_result(cls, result: BulkUploadResult) -> "BulkUploadResponse":
        return cls(
            results=[
                BulkItemResponse(
                    file_name=r.file_name,
                    success=r.success,
                    certificate_id=r.certificate_id,
                    error=r.error,
                )
                for r in result.results
            ],
            summary=BulkSummary(
                total=result.total, success=result.succeeded, errors=result.failed
            ),
        )
