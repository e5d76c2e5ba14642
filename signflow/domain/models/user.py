"""User and session domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID


class UserRole(Enum):
    """Role granted to a user account."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class User:
    """Registered user of the application.

    Attributes:
        id: Unique user identifier.
        email: Lowercased login email.
        first_name: Given name (optional).
        last_name: Family name (optional).
        role: Authorization role.
        password_hash: bcrypt hash, None for accounts without a password.
        email_verified: Whether the email address was confirmed.
        created_at: When the account was created (UTC).
    """

    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: UserRole = UserRole.USER
    password_hash: str | None = field(default=None, repr=False)
    email_verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else self.email


@dataclass(frozen=True)
class Session:
    """Authenticated browser session.

    Attributes:
        id: Opaque session token stored in the cookie.
        user_id: Owner of the session.
        expires_at: Absolute expiry (UTC).
    """

    id: str
    user_id: UUID
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def needs_refresh(self, now: datetime, ttl: timedelta) -> bool:
        """Whether less than half of the session lifetime remains."""
        return self.expires_at - now < ttl / 2
