"""PostgreSQL user and session repositories.

Tables: users, sessions (see migrations/001_initial_schema.sql).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

from signflow.domain.errors import ConflictError
from signflow.domain.models.user import Session, User, UserRole

logger = get_logger()

_USER_COLUMNS = (
    "id, email, first_name, last_name, role, password_hash, email_verified, created_at"
)


def _user_from_row(row: Any) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=UserRole(row["role"]),
        password_hash=row["password_hash"],
        email_verified=row["email_verified"],
        created_at=row["created_at"],
    )


def _user_params(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role.value,
        "password_hash": user.password_hash,
        "email_verified": user.email_verified,
        "created_at": user.created_at,
    }


class PostgresUserRepository:
    """User repository on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, user_id: UUID) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_USER_COLUMNS} FROM users WHERE id = :id"),
                {"id": user_id},
            )
            row = result.mappings().first()
        return _user_from_row(row) if row else None

    async def get_by_email(self, email: str) -> User | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text(f"SELECT {_USER_COLUMNS} FROM users WHERE email = :email"),
                {"email": email.lower()},
            )
            row = result.mappings().first()
        return _user_from_row(row) if row else None

    async def create(self, user: User) -> User:
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    text("""
                        INSERT INTO users (
                            id, email, first_name, last_name, role,
                            password_hash, email_verified, created_at
                        ) VALUES (
                            :id, :email, :first_name, :last_name, :role,
                            :password_hash, :email_verified, :created_at
                        )
                    """),
                    _user_params(user),
                )
        except IntegrityError:
            raise ConflictError("Email already in use") from None
        return user

    async def update(self, user: User) -> User:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    UPDATE users
                    SET email = :email, first_name = :first_name,
                        last_name = :last_name, role = :role,
                        password_hash = :password_hash,
                        email_verified = :email_verified
                    WHERE id = :id
                """),
                _user_params(user),
            )
        return user

    async def delete(self, user_id: UUID) -> bool:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                text("DELETE FROM users WHERE id = :id"), {"id": user_id}
            )
        return result.rowcount > 0

    async def list(
        self, limit: int, offset: int, query: str | None = None
    ) -> tuple[list[User], int]:
        where = ""
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if query:
            where = (
                "WHERE email ILIKE :pattern OR first_name ILIKE :pattern "
                "OR last_name ILIKE :pattern"
            )
            params["pattern"] = f"%{query}%"

        async with self._session_factory() as session:
            result = await session.execute(
                text(f"""
                    SELECT {_USER_COLUMNS} FROM users {where}
                    ORDER BY created_at DESC
                    LIMIT :limit OFFSET :offset
                """),
                params,
            )
            users = [_user_from_row(row) for row in result.mappings()]
            count_result = await session.execute(
                text(f"SELECT COUNT(*) FROM users {where}"),
                {k: v for k, v in params.items() if k == "pattern"},
            )
            total = count_result.scalar() or 0
        return users, total


class PostgresSessionRepository:
    """Session repository on PostgreSQL."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, session_record: Session) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("""
                    INSERT INTO sessions (id, user_id, expires_at)
                    VALUES (:id, :user_id, :expires_at)
                """),
                {
                    "id": session_record.id,
                    "user_id": session_record.user_id,
                    "expires_at": session_record.expires_at,
                },
            )

    async def get(self, session_id: str) -> Session | None:
        async with self._session_factory() as session:
            result = await session.execute(
                text("SELECT id, user_id, expires_at FROM sessions WHERE id = :id"),
                {"id": session_id},
            )
            row = result.mappings().first()
        if row is None:
            return None
        return Session(id=row["id"], user_id=row["user_id"], expires_at=row["expires_at"])

    async def extend(self, session_id: str, expires_at: datetime) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("UPDATE sessions SET expires_at = :expires_at WHERE id = :id"),
                {"id": session_id, "expires_at": expires_at},
            )

    async def delete(self, session_id: str) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("DELETE FROM sessions WHERE id = :id"), {"id": session_id}
            )

    async def delete_for_user(self, user_id: UUID) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                text("DELETE FROM sessions WHERE user_id = :user_id"),
                {"user_id": user_id},
            )
