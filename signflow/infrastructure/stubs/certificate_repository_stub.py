"""In-memory certificate repository."""

from __future__ import annotations

from uuid import UUID

from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.domain.models.certificate import Certificate


class CertificateRepositoryStub(CertificateRepositoryProtocol):
    """Stub implementation of CertificateRepositoryProtocol."""

    def __init__(self) -> None:
        self._certificates: dict[UUID, Certificate] = {}

    def clear(self) -> None:
        self._certificates.clear()

    async def create(self, certificate: Certificate) -> Certificate:
        self._certificates[certificate.id] = certificate
        return certificate

    async def get(self, certificate_id: UUID) -> Certificate | None:
        return self._certificates.get(certificate_id)

    async def list_for_user(self, user_id: UUID) -> list[Certificate]:
        owned = [c for c in self._certificates.values() if c.user_id == user_id]
        return sorted(owned, key=lambda c: c.valid_to)

    async def update(self, certificate: Certificate) -> Certificate:
        self._certificates[certificate.id] = certificate
        return certificate

    async def delete(self, certificate_id: UUID) -> bool:
        return self._certificates.pop(certificate_id, None) is not None
