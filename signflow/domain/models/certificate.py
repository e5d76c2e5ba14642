"""A1 digital certificate domain model.

Certificates are PKCS#12 bundles uploaded by users. The bundle itself is
kept in blob storage; this model carries the metadata extracted from it
and, optionally, the encrypted bundle password.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID


class PersonType(Enum):
    """Brazilian taxpayer kind.

    PF: natural person (CPF, 11 digits).
    PJ: legal entity (CNPJ, 14 digits).
    """

    PF = "PF"
    PJ = "PJ"


class CertificateStatus(Enum):
    """Lifecycle status of a stored certificate."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass(frozen=True)
class Certificate:
    """Stored certificate metadata.

    Attributes:
        id: Unique certificate identifier.
        user_id: Owner of the certificate.
        name: Display name chosen by the owner.
        type: PF or PJ.
        cpf_cnpj: Tax id extracted from the certificate subject.
        issued_by: Issuer common name.
        serial_number: Certificate serial number (hex).
        valid_from: Start of validity (UTC).
        valid_to: End of validity (UTC).
        blob_path: Storage key of the PKCS#12 bundle.
        status: Lifecycle status.
        encrypted_password: AES-GCM encrypted password, if saved.
        created_at: Upload time (UTC).
    """

    id: UUID
    user_id: UUID
    name: str
    type: PersonType
    cpf_cnpj: str
    issued_by: str
    serial_number: str
    valid_from: datetime
    valid_to: datetime
    blob_path: str
    status: CertificateStatus = CertificateStatus.ACTIVE
    encrypted_password: str | None = field(default=None, repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def has_password(self) -> bool:
        return bool(self.encrypted_password)

    def is_expired(self, now: datetime) -> bool:
        return self.valid_to < now
