"""Audit log repository port."""

from __future__ import annotations

from typing import Protocol

from signflow.domain.models.audit import AuditEntry, AuditFilter


class AuditRepositoryProtocol(Protocol):
    """Append-only store of audit entries."""

    async def add(self, entry: AuditEntry) -> None: ...

    async def list(
        self, audit_filter: AuditFilter, limit: int, offset: int
    ) -> tuple[list[AuditEntry], int]:
        """List matching entries newest first with the total match count."""
        ...
