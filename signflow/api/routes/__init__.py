"""
API routes for Signflow.

Routes are organized by domain concern.

Available routers:
- health: Liveness check
- metrics: Prometheus scrape endpoint
- auth: Sign-up, sign-in, sign-out and current user
- users: Administrative user management
- admin: Initial administrator seeding
- certificates: A1 certificate upload and retrieval
- documents: PDF upload, provider views, download and signing
- signers: Signers of a document
- audit: Activity log (admin)
- dashboard: Per-user summary
"""

from signflow.api.routes.admin import router as admin_router
from signflow.api.routes.audit import router as audit_router
from signflow.api.routes.auth import router as auth_router
from signflow.api.routes.certificates import router as certificates_router
from signflow.api.routes.dashboard import router as dashboard_router
from signflow.api.routes.documents import router as documents_router
from signflow.api.routes.health import router as health_router
from signflow.api.routes.metrics import router as metrics_router
from signflow.api.routes.signers import router as signers_router
from signflow.api.routes.users import router as users_router

__all__: list[str] = [
    "admin_router",
    "audit_router",
    "auth_router",
    "certificates_router",
    "dashboard_router",
    "documents_router",
    "health_router",
    "metrics_router",
    "signers_router",
    "users_router",
]
