"""Audit service: records and queries user activity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.audit_repository import AuditRepositoryProtocol
from signflow.application.services.base import LoggingMixin
from signflow.domain.models.audit import AuditAction, AuditEntry, AuditFilter
from signflow.domain.models.user import User

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class AuditPage:
    entries: list[AuditEntry]
    total: int
    limit: int
    offset: int


class AuditService(LoggingMixin):
    """Append-only activity log."""

    def __init__(self, repository: AuditRepositoryProtocol) -> None:
        self._repository = repository
        self._init_logger(component="audit")

    async def record(
        self,
        user: User,
        action: AuditAction,
        ip: str | None = None,
        document_id: UUID | None = None,
        document_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditEntry:
        entry = AuditEntry(
            id=uuid7(),
            timestamp=datetime.now(timezone.utc),
            user_id=user.id,
            user_name=user.full_name,
            action=action,
            ip=ip or "unknown",
            document_id=document_id,
            document_name=document_name,
            details=details or {},
        )
        await self._repository.add(entry)
        self._log_operation("record", action=action.value, user_id=str(user.id)).debug(
            "audit_entry_recorded"
        )
        return entry

    async def list(
        self,
        audit_filter: AuditFilter,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> AuditPage:
        entries, total = await self._repository.list(audit_filter, limit, offset)
        return AuditPage(entries=entries, total=total, limit=limit, offset=offset)
