"""Certificate repository port."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from signflow.domain.models.certificate import Certificate


class CertificateRepositoryProtocol(Protocol):
    """Persistence for certificate metadata."""

    async def create(self, certificate: Certificate) -> Certificate: ...

    async def get(self, certificate_id: UUID) -> Certificate | None: ...

    async def list_for_user(self, user_id: UUID) -> list[Certificate]:
        """List a user's certificates ordered by valid_to ascending."""
        ...

    async def update(self, certificate: Certificate) -> Certificate: ...

    async def delete(self, certificate_id: UUID) -> bool: ...
