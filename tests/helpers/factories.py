"""Domain object factories."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from uuid6 import uuid7

from signflow.domain.models.certificate import Certificate, CertificateStatus, PersonType
from signflow.domain.models.document import Document, DocumentStatus, Signer
from signflow.domain.models.user import User, UserRole

VALID_CPF = "52998224725"
VALID_CNPJ = "11222333000181"
ADMIN_PASSWORD = "admin-pass"


def make_user(role: UserRole = UserRole.USER, **overrides: Any) -> User:
    values: dict[str, Any] = {
        "id": uuid7(),
        "email": f"user-{uuid7().hex[:8]}@example.com",
        "first_name": "Maria",
        "last_name": "Silva",
        "role": role,
    }
    values.update(overrides)
    return User(**values)


def make_certificate(user_id: UUID, **overrides: Any) -> Certificate:
    now = datetime.now(timezone.utc)
    values: dict[str, Any] = {
        "id": uuid7(),
        "user_id": user_id,
        "name": "Meu certificado",
        "type": PersonType.PF,
        "cpf_cnpj": VALID_CPF,
        "issued_by": "AC Teste v5",
        "serial_number": "abc123",
        "valid_from": now - timedelta(days=10),
        "valid_to": now + timedelta(days=200),
        "blob_path": f"certificates/{user_id}/cert.pfx",
        "status": CertificateStatus.ACTIVE,
    }
    values.update(overrides)
    return Certificate(**values)


def make_document(user_id: UUID, **overrides: Any) -> Document:
    values: dict[str, Any] = {
        "id": uuid7(),
        "user_id": user_id,
        "name": "Contrato",
        "file_name": "contrato.pdf",
        "file_size": 1024,
        "page_count": 1,
        "hash": "0" * 64,
        "status": DocumentStatus.PENDING,
    }
    values.update(overrides)
    return Document(**values)


def make_signer(document_id: UUID, order: int = 1, **overrides: Any) -> Signer:
    values: dict[str, Any] = {
        "id": uuid7(),
        "document_id": document_id,
        "name": f"Signer {order}",
        "email": f"signer{order}@example.com",
        "document_number": VALID_CPF,
        "document_type": PersonType.PF,
        "phone_number": "+5511999999999",
        "identification": "Diretor",
        "order": order,
    }
    values.update(overrides)
    return Signer(**values)
