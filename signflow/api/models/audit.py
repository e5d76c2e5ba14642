"""Audit log API models."""

from typing import Any
from uuid import UUID

from pydantic import Field

from signflow.api.models.base import CamelModel, DateTimeWithZ
from signflow.domain.models.audit import AuditEntry


class AuditEntryResponse(CamelModel):
    id: UUID
    timestamp: DateTimeWithZ
    user_id: UUID
    user_name: str
    action: str
    ip: str
    document_id: UUID | None = None
    document_name: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_entry(cls, entry: AuditEntry) -> "AuditEntryResponse":
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            user_id=entry.user_id,
            user_name=entry.user_name,
            action=entry.action.value,
            ip=entry.ip,
            document_id=entry.document_id,
            document_name=entry.document_name,
            details=entry.details,
        )


class AuditListResponse(CamelModel):
    entries: list[AuditEntryResponse]
    total: int
    limit: int
    offset: int
