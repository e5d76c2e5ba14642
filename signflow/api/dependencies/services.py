"""Service dependencies backed by the bootstrap singletons."""

from fastapi import Request

from signflow.application.services.audit_service import AuditService
from signflow.application.services.auth_service import AuthService
from signflow.application.services.certificate_service import CertificateService
from signflow.application.services.dashboard_service import DashboardService
from signflow.application.services.document_service import DocumentService
from signflow.application.services.signer_service import SignerService
from signflow.application.services.user_admin_service import UserAdminService
from signflow.bootstrap import services


def client_ip(request: Request) -> str:
    """Client address, preferring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def get_auth_service() -> AuthService:
    return services.get_auth_service()


def get_user_admin_service() -> UserAdminService:
    return services.get_user_admin_service()


def get_audit_service() -> AuditService:
    return services.get_audit_service()


def get_certificate_service() -> CertificateService:
    return services.get_certificate_service()


def get_document_service() -> DocumentService:
    return services.get_document_service()


def get_signer_service() -> SignerService:
    return services.get_signer_service()


def get_dashboard_service() -> DashboardService:
    return services.get_dashboard_service()
