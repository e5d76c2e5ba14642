"""Bootstrap wiring for application services."""

from __future__ import annotations

from datetime import timedelta

from signflow.application.services.audit_service import AuditService
from signflow.application.services.auth_service import AuthService
from signflow.application.services.certificate_service import CertificateService
from signflow.application.services.dashboard_service import DashboardService
from signflow.application.services.document_service import DocumentService
from signflow.application.services.signer_service import SignerService
from signflow.application.services.signing_workflow_service import (
    SigningWorkflowService,
)
from signflow.application.services.user_admin_service import UserAdminService
from signflow.bootstrap.repositories import (
    get_blob_storage,
    get_repositories,
    get_signing_provider,
)
from signflow.config.settings import get_settings
from signflow.infrastructure.crypto import (
    AesGcmPasswordCipher,
    BcryptPasswordHasher,
    Pkcs12CertificateReader,
)
from signflow.infrastructure.pdf import PypdfPageCounter

_audit_service: AuditService | None = None
_auth_service: AuthService | None = None
_user_admin_service: UserAdminService | None = None
_certificate_service: CertificateService | None = None
_workflow_service: SigningWorkflowService | None = None
_document_service: DocumentService | None = None
_signer_service: SignerService | None = None
_dashboard_service: DashboardService | None = None
_password_hasher: BcryptPasswordHasher | None = None


def get_password_hasher() -> BcryptPasswordHasher:
    global _password_hasher
    if _password_hasher is None:
        _password_hasher = BcryptPasswordHasher()
    return _password_hasher


def get_audit_service() -> AuditService:
    global _audit_service
    if _audit_service is None:
        _audit_service = AuditService(get_repositories().audit)
    return _audit_service


def get_auth_service() -> AuthService:
    """Get the session authentication service (singleton)."""
    global _auth_service
    if _auth_service is None:
        repositories = get_repositories()
        _auth_service = AuthService(
            users=repositories.users,
            sessions=repositories.sessions,
            hasher=get_password_hasher(),
            session_ttl=timedelta(days=get_settings().session.ttl_days),
        )
    return _auth_service


def get_user_admin_service() -> UserAdminService:
    global _user_admin_service
    if _user_admin_service is None:
        repositories = get_repositories()
        _user_admin_service = UserAdminService(
            users=repositories.users,
            sessions=repositories.sessions,
            hasher=get_password_hasher(),
        )
    return _user_admin_service


def get_certificate_service() -> CertificateService:
    global _certificate_service
    if _certificate_service is None:
        _certificate_service = CertificateService(
            repository=get_repositories().certificates,
            storage=get_blob_storage(),
            reader=Pkcs12CertificateReader(),
            cipher=AesGcmPasswordCipher(get_settings().certificate_password_key),
            audit=get_audit_service(),
        )
    return _certificate_service


def get_signing_workflow_service() -> SigningWorkflowService:
    global _workflow_service
    if _workflow_service is None:
        _workflow_service = SigningWorkflowService(
            provider=get_signing_provider(),
            certificates=get_repositories().certificates,
            config=get_settings().clicksign,
        )
    return _workflow_service


def get_document_service() -> DocumentService:
    global _document_service
    if _document_service is None:
        _document_service = DocumentService(
            documents=get_repositories().documents,
            storage=get_blob_storage(),
            page_counter=PypdfPageCounter(),
            workflow=get_signing_workflow_service(),
            provider=get_signing_provider(),
            audit=get_audit_service(),
        )
    return _document_service


def get_signer_service() -> SignerService:
    global _signer_service
    if _signer_service is None:
        _signer_service = SignerService(
            documents=get_repositories().documents,
            document_service=get_document_service(),
            workflow=get_signing_workflow_service(),
            provider=get_signing_provider(),
            audit=get_audit_service(),
        )
    return _signer_service


def get_dashboard_service() -> DashboardService:
    global _dashboard_service
    if _dashboard_service is None:
        repositories = get_repositories()
        _dashboard_service = DashboardService(
            certificates=repositories.certificates,
            documents=repositories.documents,
            audit=get_audit_service(),
        )
    return _dashboard_service


def reset_services() -> None:
    """Reset service singletons (for testing)."""
    global _audit_service, _auth_service, _user_admin_service, _certificate_service
    global _workflow_service, _document_service, _signer_service, _dashboard_service
    global _password_hasher
    _audit_service = None
    _auth_service = None
    _user_admin_service = None
    _certificate_service = None
    _workflow_service = None
    _document_service = None
    _signer_service = None
    _dashboard_service = None
    _password_hasher = None
