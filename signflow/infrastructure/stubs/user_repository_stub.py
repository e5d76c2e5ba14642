"""In-memory user and session repositories for development and tests."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from signflow.application.ports.user_repository import (
    SessionRepositoryProtocol,
    UserRepositoryProtocol,
)
from signflow.domain.errors import ConflictError
from signflow.domain.models.user import Session, User


class UserRepositoryStub(UserRepositoryProtocol):
    """Stub implementation of UserRepositoryProtocol backed by a dict."""

    def __init__(self) -> None:
        self._users: dict[UUID, User] = {}

    def clear(self) -> None:
        """Clear all stored users."""
        self._users.clear()

    def add_user(self, user: User) -> None:
        """Seed a user directly, bypassing the uniqueness check."""
        self._users[user.id] = user

    async def get(self, user_id: UUID) -> User | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        wanted = email.lower()
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    async def create(self, user: User) -> User:
        if await self.get_by_email(user.email) is not None:
            raise ConflictError("Email already in use")
        self._users[user.id] = user
        return user

    async def update(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def delete(self, user_id: UUID) -> bool:
        return self._users.pop(user_id, None) is not None

    async def list(
        self, limit: int, offset: int, query: str | None = None
    ) -> tuple[list[User], int]:
        users = sorted(self._users.values(), key=lambda u: u.created_at, reverse=True)
        if query:
            needle = query.lower()
            users = [
                u
                for u in users
                if needle in u.email
                or needle in (u.first_name or "").lower()
                or needle in (u.last_name or "").lower()
            ]
        return users[offset : offset + limit], len(users)


class SessionRepositoryStub(SessionRepositoryProtocol):
    """Stub implementation of SessionRepositoryProtocol backed by a dict."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def clear(self) -> None:
        self._sessions.clear()

    async def create(self, session: Session) -> None:
        self._sessions[session.id] = session

    async def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    async def extend(self, session_id: str, expires_at: datetime) -> None:
        current = self._sessions.get(session_id)
        if current is not None:
            self._sessions[session_id] = Session(
                id=current.id, user_id=current.user_id, expires_at=expires_at
            )

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    async def delete_for_user(self, user_id: UUID) -> None:
        for session_id in [s.id for s in self._sessions.values() if s.user_id == user_id]:
            del self._sessions[session_id]
