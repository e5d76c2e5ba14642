"""Dashboard API model."""

from signflow.api.models.audit import AuditEntryResponse
from signflow.api.models.base import CamelModel
from signflow.api.models.certificates import CertificateResponse
from signflow.application.services.dashboard_service import DashboardSummary


class MonthlySignatures(CamelModel):
    month: str
    count: int


class DashboardResponse(CamelModel):
    total_certificates: int
    active_certificates: int
    pending_documents: int
    signing_documents: int
    signed_documents: int
    expiring_certificates: list[CertificateResponse]
    signatures_per_month: list[MonthlySignatures]
    recent_activity: list[AuditEntryResponse]

    @classmethod
    def from_summary(cls, summary: DashboardSummary) -> "DashboardResponse":
        return cls(
            total_certificates=summary.total_certificates,
            active_certificates=summary.active_certificates,
            pending_documents=summary.pending_documents,
            signing_documents=summary.signing_documents,
            signed_documents=summary.signed_documents,
            expiring_certificates=[
                CertificateResponse.from_certificate(c) for c in summary.expiring_certificates
            ],
            signatures_per_month=[
                MonthlySignatures(month=m.label, count=m.count)
                for m in summary.signatures_per_month
            ],
            recent_activity=[AuditEntryResponse.from_entry(e) for e in summary.recent_activity],
        )
