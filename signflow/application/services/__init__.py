"""Application services - Use case orchestration.

Available services:
- AuthService: Email/password sign-up, sign-in and cookie sessions
- UserAdminService: Administrative user management and admin seeding
- CertificateService: A1 certificate upload, inspection and retrieval
- SigningWorkflowService: Provider envelope/document/signer orchestration
- DocumentService: PDF upload, provider sync, download and signing
- SignerService: Signer creation, editing, removal and batches
- AuditService: Activity log recording and querying
- DashboardService: Per-user summary counters
"""

from signflow.application.services.audit_service import (
    DEFAULT_PAGE_SIZE,
    AuditPage,
    AuditService,
)
from signflow.application.services.auth_service import (
    AuthenticatedSession,
    AuthService,
)
from signflow.application.services.certificate_service import (
    BulkItemResult,
    BulkUploadResult,
    CertificateService,
)
from signflow.application.services.dashboard_service import (
    DashboardService,
    DashboardSummary,
    MonthlyCount,
)
from signflow.application.services.document_service import (
    BatchDeleteResult,
    DocumentService,
    SignOutcome,
)
from signflow.application.services.signer_service import (
    BatchSignerError,
    BatchSignersError,
    BatchSignersResult,
    SignerChanges,
    SignerRequest,
    SignerService,
)
from signflow.application.services.signing_workflow_service import (
    AddedSigner,
    CreatedEnvelope,
    SignerData,
    SigningWorkflowService,
)
from signflow.application.services.uploads import FileContent, UploadedFile
from signflow.application.services.user_admin_service import (
    UserAdminService,
    UserPage,
)

__all__: list[str] = [
    "DEFAULT_PAGE_SIZE",
    "AddedSigner",
    "AuditPage",
    "AuditService",
    "AuthService",
    "AuthenticatedSession",
    "BatchDeleteResult",
    "BatchSignerError",
    "BatchSignersError",
    "BatchSignersResult",
    "BulkItemResult",
    "BulkUploadResult",
    "CertificateService",
    "CreatedEnvelope",
    "DashboardService",
    "DashboardSummary",
    "DocumentService",
    "FileContent",
    "MonthlyCount",
    "SignOutcome",
    "SignerChanges",
    "SignerData",
    "SignerRequest",
    "SignerService",
    "SigningWorkflowService",
    "UploadedFile",
    "UserAdminService",
    "UserPage",
]
