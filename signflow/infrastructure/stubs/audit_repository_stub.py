"""In-memory audit log."""

from __future__ import annotations

from signflow.application.ports.audit_repository import AuditRepositoryProtocol
from signflow.domain.models.audit import AuditEntry, AuditFilter


class AuditRepositoryStub(AuditRepositoryProtocol):
    """Stub implementation of AuditRepositoryProtocol."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def clear(self) -> None:
        self.entries.clear()

    async def add(self, entry: AuditEntry) -> None:
        self.entries.append(entry)

    async def list(
        self, audit_filter: AuditFilter, limit: int, offset: int
    ) -> tuple[list[AuditEntry], int]:
        matching = sorted(
            (e for e in self.entries if audit_filter.matches(e)),
            key=lambda e: e.timestamp,
            reverse=True,
        )
        return matching[offset : offset + limit], len(matching)
