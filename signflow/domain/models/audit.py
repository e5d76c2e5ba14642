"""Audit log domain model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID


class AuditAction(Enum):
    """Kinds of user activity recorded in the audit log."""

    UPLOAD = "upload"
    SIGNATURE = "signature"
    DELETE = "delete"
    FAILURE = "failure"
    CERTIFICATE_ADD = "certificate_add"
    CERTIFICATE_REMOVE = "certificate_remove"
    SIGNER_ADD = "signer_add"
    SIGNER_REMOVE = "signer_remove"


@dataclass(frozen=True)
class AuditEntry:
    """One recorded action.

    Attributes:
        id: Entry identifier.
        timestamp: When the action happened (UTC).
        user_id: Acting user.
        user_name: Display name of the acting user at the time.
        action: What happened.
        ip: Client address, "unknown" when unavailable.
        document_id: Related document, if any.
        document_name: Related document name, if any.
        details: Free-form context.
    """

    id: UUID
    timestamp: datetime
    user_id: UUID
    user_name: str
    action: AuditAction
    ip: str = "unknown"
    document_id: UUID | None = None
    document_name: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditFilter:
    """Query filter for audit entries. Unset fields match everything."""

    action: AuditAction | None = None
    user_id: UUID | None = None
    document_id: UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    def matches(self, entry: AuditEntry) -> bool:
        if self.action is not None and entry.action != self.action:
            return False
        if self.user_id is not None and entry.user_id != self.user_id:
            return False
        if self.document_id is not None and entry.document_id != self.document_id:
            return False
        if self.start_date is not None and entry.timestamp < self.start_date:
            return False
        if self.end_date is not None and entry.timestamp > self.end_date:
            return False
        return True
