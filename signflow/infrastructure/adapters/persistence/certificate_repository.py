"""PostgreSQL certificate repository."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signflow.domain.models.certificate import (
    Certificate,
    CertificateStatus,
    PersonType,
)

_COLUMNS = (
    "id, user_id, name, type, cpf_cnpj, issued_by, serial_number, valid_from, "
    "valid_to, blob_path, status, encrypted_password, created_at"
)


def _from_row(row: Any) -> Certificate:
    return Certificate(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        type=PersonType(row["type"]),
        cpf_cnpj=row["cpf_cnpj"],
        issued_by=row["issued_by"],
        serial_number=row["serial_number"],
        valid_from=row["valid_from"],
        valid_to=row["valid_to"],
        blob_path=row["blob_path"],
        status=CertificateStatus(row["status"]),
        encrypted_password=row["encrypted_password"],
        created_at=row["created_at"],
    )


def _params(certificate: Certificate) -> dict[str, Any]:
    return {
        "id": certificate.id,
        "user_id": certificate.user_id,
        "name": certificate.name,
        "type": certificate.type.value,
        "cpf_cnpj": certificate.cpf_cnpj,
        "issued_by": certificate.issued_by,
        "serial_number": certificate.serial_number,
        "valid_from": certificate.valid_from,
        "valid_to": certificate.valid_to,
        "blob_path": certificate.blob_path,
        "status": certificate.status.value,
        "encrypted_password": certificate.encrypted_password,
        "created_at": certificate.created_at,
    }


class PostgresCertificateRepository:
    """Certificate repository on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, certificate: Certificate) -> Certificate:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO certificates ({_COLUMNS})
                    VALUES (
                        :id, :user_id, :name, :type, :cpf_cnpj, :issued_by,
                        :serial_number, :valid_from, :valid_to, :blob_path,
                        :status, :encrypted_password, :created_at
                    )
                """),
                _params(certificate),
            )
        return certificate

    async def get(self, certificate_id: UUID) -> Certificate | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_COLUMNS} FROM certificates WHERE id = :id"),
                {"id": certificate_id},
            )
            row = result.mappings().first()
        return _from_row(row) if row else None

    async def list_for_user(self, user_id: UUID) -> list[Certificate]:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_COLUMNS} FROM certificates
                    WHERE user_id = :user_id
                    ORDER BY valid_to ASC
                """),
                {"user_id": user_id},
            )
            return [_from_row(row) for row in result.mappings()]

    async def update(self, certificate: Certificate) -> Certificate:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    UPDATE certificates
                    SET name = :name, status = :status,
                        encrypted_password = :encrypted_password
                    WHERE id = :id
                """),
                {
                    "id": certificate.id,
                    "name": certificate.name,
                    "status": certificate.status.value,
                    "encrypted_password": certificate.encrypted_password,
                },
            )
        return certificate

    async def delete(self, certificate_id: UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("DELETE FROM certificates WHERE id = :id"), {"id": certificate_id}
            )
        return result.rowcount > 0
