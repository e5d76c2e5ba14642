"""PostgreSQL repositories (SQLAlchemy async with raw SQL)."""

from signflow.infrastructure.adapters.persistence.audit_repository import (
    PostgresAuditRepository,
)
from signflow.infrastructure.adapters.persistence.certificate_repository import (
    PostgresCertificateRepository,
)
from signflow.infrastructure.adapters.persistence.document_repository import (
    PostgresDocumentRepository,
)
from signflow.infrastructure.adapters.persistence.user_repository import (
    PostgresSessionRepository,
    PostgresUserRepository,
)

__all__: list[str] = [
    "PostgresAuditRepository",
    "PostgresCertificateRepository",
    "PostgresDocumentRepository",
    "PostgresSessionRepository",
    "PostgresUserRepository",
]
