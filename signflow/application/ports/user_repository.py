"""User and session repository ports."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from signflow.domain.models.user import Session, User


class UserRepositoryProtocol(Protocol):
    """Persistence for user accounts.

    Emails are stored lowercased; lookups by email are exact on the
    lowercased value.
    """

    async def get(self, user_id: UUID) -> User | None: ...

    async def get_by_email(self, email: str) -> User | None: ...

    async def create(self, user: User) -> User:
        """Persist a new user.

        Raises:
            ConflictError: If the email is already registered.
        """
        ...

    async def update(self, user: User) -> User: ...

    async def delete(self, user_id: UUID) -> bool:
        """Delete a user. Returns False when no such user existed."""
        ...

    async def list(
        self, limit: int, offset: int, query: str | None = None
    ) -> tuple[list[User], int]:
        """List users newest first.

        Args:
            limit: Page size.
            offset: Rows to skip.
            query: Case-insensitive substring matched against email,
                first name and last name.

        Returns:
            Tuple of (page of users, total matching count).
        """
        ...


class SessionRepositoryProtocol(Protocol):
    """Persistence for login sessions."""

    async def create(self, session: Session) -> None: ...

    async def get(self, session_id: str) -> Session | None: ...

    async def extend(self, session_id: str, expires_at: datetime) -> None: ...

    async def delete(self, session_id: str) -> None: ...

    async def delete_for_user(self, user_id: UUID) -> None: ...
