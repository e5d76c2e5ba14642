"""FastAPI dependency providers.

Routes depend on these functions rather than on bootstrap directly so
tests can swap services through ``app.dependency_overrides``.
"""

from signflow.api.dependencies.services import (
    client_ip,
    get_audit_service,
    get_auth_service,
    get_certificate_service,
    get_dashboard_service,
    get_document_service,
    get_signer_service,
    get_user_admin_service,
)

__all__: list[str] = [
    "client_ip",
    "get_audit_service",
    "get_auth_service",
    "get_certificate_service",
    "get_dashboard_service",
    "get_document_service",
    "get_signer_service",
    "get_user_admin_service",
]
