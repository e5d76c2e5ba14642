"""Dashboard service: per-user summary counters."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from signflow.application.ports.certificate_repository import (
    CertificateRepositoryProtocol,
)
from signflow.application.ports.document_repository import DocumentRepositoryProtocol
from signflow.application.services.audit_service import AuditService
from signflow.application.services.base import LoggingMixin
from signflow.domain.models.audit import AuditEntry, AuditFilter
from signflow.domain.models.certificate import Certificate, CertificateStatus
from signflow.domain.models.document import Document, DocumentStatus
from signflow.domain.models.user import User
from signflow.domain.services.certificate_validity import (
    ValidityStatus,
    validity_status,
)

MONTHS_SHOWN = 6
RECENT_ACTIVITY_LIMIT = 10

PENDING_STATUSES = frozenset({DocumentStatus.PENDING, DocumentStatus.WAITING_SIGNERS})
SIGNED_STATUSES = frozenset({DocumentStatus.SIGNED, DocumentStatus.COMPLETED})


@dataclass(frozen=True)
class MonthlyCount:
    year: int
    month: int
    count: int

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class DashboardSummary:
    total_certificates: int
    active_certificates: int
    pending_documents: int
    signing_documents: int
    signed_documents: int
    expiring_certificates: list[Certificate] = field(default_factory=list)
    signatures_per_month: list[MonthlyCount] = field(default_factory=list)
    recent_activity: list[AuditEntry] = field(default_factory=list)


def last_months(now: datetime, count: int = MONTHS_SHOWN) -> list[tuple[int, int]]:
    """(year, month) pairs for the ``count`` months ending at ``now``, oldest first."""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(months))


def signatures_per_month(
    documents: list[Document], now: datetime, count: int = MONTHS_SHOWN
) -> list[MonthlyCount]:
    """Count documents by the month of ``signed_at``."""
    buckets = {key: 0 for key in last_months(now, count)}
    for document in documents:
        if document.signed_at is None:
            continue
        key = (document.signed_at.year, document.signed_at.month)
        if key in buckets:
            buckets[key] += 1
    return [MonthlyCount(year=y, month=m, count=c) for (y, m), c in buckets.items()]


class DashboardService(LoggingMixin):
    """Builds the dashboard summary from stored state, without provider calls."""

    def __init__(
        self,
        certificates: CertificateRepositoryProtocol,
        documents: DocumentRepositoryProtocol,
        audit: AuditService,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._certificates = certificates
        self._documents = documents
        self._audit = audit
        self._clock = clock
        self._init_logger(component="dashboard")

    async def summary(self, user: User) -> DashboardSummary:
        now = self._clock()
        certificates, documents, activity = await asyncio.gather(
            self._certificates.list_for_user(user.id),
            self._documents.list(user.id),
            self._audit.list(AuditFilter(user_id=user.id), limit=RECENT_ACTIVITY_LIMIT),
        )

        active = [c for c in certificates if c.status == CertificateStatus.ACTIVE]
        expiring = [
            c
            for c in active
            if validity_status(c.valid_to, now).status == ValidityStatus.EXPIRING_SOON
        ]
        summary = DashboardSummary(
            total_certificates=len(certificates),
            active_certificates=len(active),
            pending_documents=sum(1 for d in documents if d.status in PENDING_STATUSES),
            signing_documents=sum(1 for d in documents if d.status == DocumentStatus.SIGNING),
            signed_documents=sum(1 for d in documents if d.status in SIGNED_STATUSES),
            expiring_certificates=expiring,
            signatures_per_month=signatures_per_month(documents, now),
            recent_activity=activity.entries,
        )
        self._log_operation("summary", user_id=str(user.id)).debug(
            "dashboard_built", documents=len(documents), certificates=len(certificates)
        )
        return summary
