"""PostgreSQL audit log repository."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from signflow.domain.models.audit import AuditAction, AuditEntry, AuditFilter

_COLUMNS = (
    "id, timestamp, user_id, user_name, action, ip, document_id, document_name, details"
)


def _from_row(row: Any) -> AuditEntry:
    details = row["details"]
    if isinstance(details, str):
        details = json.loads(details)
    return AuditEntry(
        id=row["id"],
        timestamp=row["timestamp"],
        user_id=row["user_id"],
        user_name=row["user_name"],
        action=AuditAction(row["action"]),
        ip=row["ip"],
        document_id=row["document_id"],
        document_name=row["document_name"],
        details=details or {},
    )


def _where_clause(audit_filter: AuditFilter) -> tuple[str, dict[str, Any]]:
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if audit_filter.action is not None:
        conditions.append("action = :action")
        params["action"] = audit_filter.action.value
    if audit_filter.user_id is not None:
        conditions.append("user_id = :user_id")
        params["user_id"] = audit_filter.user_id
    if audit_filter.document_id is not None:
        conditions.append("document_id = :document_id")
        params["document_id"] = audit_filter.document_id
    if audit_filter.start_date is not None:
        conditions.append("timestamp >= :start_date")
        params["start_date"] = audit_filter.start_date
    if audit_filter.end_date is not None:
        conditions.append("timestamp <= :end_date")
        params["end_date"] = audit_filter.end_date
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


class PostgresAuditRepository:
    """Append-only audit log on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, entry: AuditEntry) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text(f"""
                    INSERT INTO audit_log ({_COLUMNS})
                    VALUES (
                        :id, :timestamp, :user_id, :user_name, :action, :ip,
                        :document_id, :document_name, CAST(:details AS jsonb)
                    )
                """),
                {
                    "id": entry.id,
                    "timestamp": entry.timestamp,
                    "user_id": entry.user_id,
                    "user_name": entry.user_name,
                    "action": entry.action.value,
                    "ip": entry.ip,
                    "document_id": entry.document_id,
                    "document_name": entry.document_name,
                    "details": json.dumps(entry.details, default=str),
                },
            )

    async def list(
        self, audit_filter: AuditFilter, limit: int, offset: int
    ) -> tuple[list[AuditEntry], int]:
        where, params = _where_clause(audit_filter)
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_COLUMNS} FROM audit_log {where}
                    ORDER BY timestamp DESC
                    LIMIT :limit OFFSET :offset
                """),
                {**params, "limit": limit, "offset": offset},
            )
            entries = [_from_row(row) for row in result.mappings()]
            count_result = await session.execute(
                text(f"SELECT COUNT(*) FROM audit_log {where}"), params
            )
            total = count_result.scalar() or 0
        return entries, total
