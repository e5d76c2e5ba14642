"""PostgreSQL document repository (documents and signers)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signflow.domain.models.certificate import PersonType
from signflow.domain.models.document import (
    Document,
    DocumentStatus,
    Signer,
    SignerStatus,
)

_DOCUMENT_COLUMNS = (
    "id, user_id, name, file_name, file_size, page_count, hash, signed_hash, "
    "status, envelope_key, document_key, blob_path, uploaded_at, signed_at"
)
_SIGNER_COLUMNS = (
    "id, document_id, name, email, document_number, document_type, phone_number, "
    "identification, signer_order, signature_type, status, provider_signer_key, "
    "provider_requirement_key, certificate_id, signed_at"
)


def _document_from_row(row: Any, signers: Sequence[Signer] = ()) -> Document:
    return Document(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        file_name=row["file_name"],
        file_size=row["file_size"],
        page_count=row["page_count"],
        hash=row["hash"],
        signed_hash=row["signed_hash"],
        status=DocumentStatus(row["status"]),
        envelope_key=row["envelope_key"],
        document_key=row["document_key"],
        blob_path=row["blob_path"],
        uploaded_at=row["uploaded_at"],
        signed_at=row["signed_at"],
        signers=tuple(signers),
    )


def _signer_from_row(row: Any) -> Signer:
    return Signer(
        id=row["id"],
        document_id=row["document_id"],
        name=row["name"],
        email=row["email"],
        document_number=row["document_number"],
        document_type=PersonType(row["document_type"]),
        phone_number=row["phone_number"],
        identification=row["identification"],
        order=row["signer_order"],
        signature_type=row["signature_type"],
        status=SignerStatus(row["status"]),
        provider_signer_key=row["provider_signer_key"],
        provider_requirement_key=row["provider_requirement_key"],
        certificate_id=row["certificate_id"],
        signed_at=row["signed_at"],
    )


def _signer_params(signer: Signer) -> dict[str, Any]:
    return {
        "id": signer.id,
        "document_id": signer.document_id,
        "name": signer.name,
        "email": signer.email,
        "document_number": signer.document_number,
        "document_type": signer.document_type.value,
        "phone_number": signer.phone_number,
        "identification": signer.identification,
        "signer_order": signer.order,
        "signature_type": signer.signature_type,
        "status": signer.status.value,
        "provider_signer_key": signer.provider_signer_key,
        "provider_requirement_key": signer.provider_requirement_key,
        "certificate_id": signer.certificate_id,
        "signed_at": signer.signed_at,
    }


_INSERT_SIGNER = text(f"""
    INSERT INTO signers ({_SIGNER_COLUMNS})
    VALUES (
        :id, :document_id, :name, :email, :document_number, :document_type,
        :phone_number, :identification, :signer_order, :signature_type, :status,
        :provider_signer_key, :provider_requirement_key, :certificate_id, :signed_at
    )
""")


class PostgresDocumentRepository:
    """Document repository on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _attach_signers(
        self, session: AsyncSession, rows: Sequence[Any]
    ) -> list[Document]:
        if not rows:
            return []
        ids = [row["id"] for row in rows]
        result = await session.execute(
            text(f"""
                SELECT {_SIGNER_COLUMNS} FROM signers
                WHERE document_id IN :ids
                ORDER BY signer_order ASC
            """).bindparams(bindparam("ids", expanding=True)),
            {"ids": ids},
        )
        by_document: dict[UUID, list[Signer]] = {}
        for signer_row in result.mappings():
            signer = _signer_from_row(signer_row)
            by_document.setdefault(signer.document_id, []).append(signer)
        return [_document_from_row(row, by_document.get(row["id"], [])) for row in rows]

    async def create(self, document: Document) -> Document:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO documents ({_DOCUMENT_COLUMNS})
                    VALUES (
                        :id, :user_id, :name, :file_name, :file_size, :page_count,
                        :hash, :signed_hash, :status, :envelope_key, :document_key,
                        :blob_path, :uploaded_at, :signed_at
                    )
                """),
                {
                    "id": document.id,
                    "user_id": document.user_id,
                    "name": document.name,
                    "file_name": document.file_name,
                    "file_size": document.file_size,
                    "page_count": document.page_count,
                    "hash": document.hash,
                    "signed_hash": document.signed_hash,
                    "status": document.status.value,
                    "envelope_key": document.envelope_key,
                    "document_key": document.document_key,
                    "blob_path": document.blob_path,
                    "uploaded_at": document.uploaded_at,
                    "signed_at": document.signed_at,
                },
            )
            for signer in document.signers:
                await session.execute(_INSERT_SIGNER, _signer_params(signer))
        return document

    async def get(self, document_id: UUID) -> Document | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_DOCUMENT_COLUMNS} FROM documents WHERE id = :id"),
                {"id": document_id},
            )
            rows = result.mappings().all()
            documents = await self._attach_signers(session, rows)
        return documents[0] if documents else None

    async def list(self, user_id: UUID | None = None) -> list[Document]:
        where = "WHERE user_id = :user_id" if user_id is not None else ""
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_DOCUMENT_COLUMNS} FROM documents {where}
                    ORDER BY uploaded_at DESC
                """),
                {"user_id": user_id} if user_id is not None else {},
            )
            return await self._attach_signers(session, result.mappings().all())

    async def get_many(
        self, document_ids: Sequence[UUID], user_id: UUID | None = None
    ) -> list[Document]:
        if not document_ids:
            return []
        owner_clause = "AND user_id = :user_id" if user_id is not None else ""
        params: dict[str, Any] = {"ids": list(document_ids)}
        if user_id is not None:
            params["user_id"] = user_id
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_DOCUMENT_COLUMNS} FROM documents
                    WHERE id IN :ids {owner_clause}
                    ORDER BY uploaded_at DESC
                """).bindparams(bindparam("ids", expanding=True)),
                params,
            )
            return await self._attach_signers(session, result.mappings().all())

    async def update(self, document: Document) -> Document:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    UPDATE documents
                    SET name = :name, status = :status, signed_hash = :signed_hash,
                        envelope_key = :envelope_key, document_key = :document_key,
                        signed_at = :signed_at
                    WHERE id = :id
                """),
                {
                    "id": document.id,
                    "name": document.name,
                    "status": document.status.value,
                    "signed_hash": document.signed_hash,
                    "envelope_key": document.envelope_key,
                    "document_key": document.document_key,
                    "signed_at": document.signed_at,
                },
            )
        return document

    async def delete(self, document_id: UUID) -> bool:
        # signers are removed by ON DELETE CASCADE
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("DELETE FROM documents WHERE id = :id"), {"id": document_id}
            )
        return result.rowcount > 0

    async def count_by_envelope(
        self, envelope_key: str, exclude_document_id: UUID | None = None
    ) -> int:
        exclude = "AND id <> :exclude_id" if exclude_document_id is not None else ""
        params: dict[str, Any] = {"envelope_key": envelope_key}
        if exclude_document_id is not None:
            params["exclude_id"] = exclude_document_id
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT COUNT(*) FROM documents
                    WHERE envelope_key = :envelope_key {exclude}
                """),
                params,
            )
            return result.scalar() or 0

    async def add_signers(self, signers: Sequence[Signer]) -> list[Signer]:
        async with self._session_factory() as session, session.begin():
            for signer in signers:
                await session.execute(_INSERT_SIGNER, _signer_params(signer))
        return list(signers)

    async def get_signer(self, signer_id: UUID) -> Signer | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_SIGNER_COLUMNS} FROM signers WHERE id = :id"),
                {"id": signer_id},
            )
            row = result.mappings().first()
        return _signer_from_row(row) if row else None

    async def update_signer(self, signer: Signer) -> Signer:
        params = _signer_params(signer)
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    UPDATE signers
                    SET name = :name, email = :email,
                        document_number = :document_number,
                        document_type = :document_type,
                        phone_number = :phone_number,
                        identification = :identification,
                        signer_order = :signer_order,
                        signature_type = :signature_type, status = :status,
                        provider_signer_key = :provider_signer_key,
                        provider_requirement_key = :provider_requirement_key,
                        certificate_id = :certificate_id, signed_at = :signed_at
                    WHERE id = :id
                """),
                {k: v for k, v in params.items() if k != "document_id"},
            )
        return signer

    async def delete_signer(self, signer_id: UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("DELETE FROM signers WHERE id = :id"), {"id": signer_id}
            )
        return result.rowcount > 0
