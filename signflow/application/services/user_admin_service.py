"""User administration service."""

from __future__ import annotations

from dataclasses import dataclass, replace
from uuid import UUID

from uuid6 import uuid7

from signflow.application.ports.crypto import PasswordHasherProtocol
from signflow.application.ports.user_repository import (
    SessionRepositoryProtocol,
    UserRepositoryProtocol,
)
from signflow.application.services.base import LoggingMixin
from signflow.domain.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from signflow.domain.models.user import User, UserRole

DEFAULT_ADMIN_EMAIL = "admin@signflow.com"
DEFAULT_ADMIN_PASSWORD = "admin123"
DEFAULT_ADMIN_FIRST_NAME = "Super"
DEFAULT_ADMIN_LAST_NAME = "Admin"


@dataclass(frozen=True)
class UserPage:
    users: list[User]
    total_count: int


def parse_role(value: str | UserRole | None) -> UserRole:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value or UserRole.USER.value)
    except ValueError:
        raise ValidationError("Role must be 'user' or 'admin'", field="role") from None


class UserAdminService(LoggingMixin):
    """Admin-only management of user accounts."""

    def __init__(
        self,
        users: UserRepositoryProtocol,
        sessions: SessionRepositoryProtocol,
        hasher: PasswordHasherProtocol,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._hasher = hasher
        self._init_logger(component="users")

    async def list_users(
        self, limit: int = 50, offset: int = 0, query: str | None = None
    ) -> UserPage:
        users, total = await self._users.list(limit, offset, query or None)
        return UserPage(users=users, total_count=total)

    async def create_user(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        password: str | None = None,
        role: str | UserRole | None = None,
    ) -> User:
        """Create an account on behalf of an admin.

        Raises:
            ValidationError: If the email is empty or the role unknown.
            ConflictError: If the email is already registered.
        """
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required", field="email")
        if await self._users.get_by_email(email) is not None:
            raise ConflictError("Email already in use")

        user = await self._users.create(
            User(
                id=uuid7(),
                email=email,
                first_name=first_name or None,
                last_name=last_name or None,
                role=parse_role(role),
                password_hash=self._hasher.hash(password) if password else None,
            )
        )
        self._log_operation("create_user", user_id=str(user.id)).info(
            "user_created", role=user.role.value
        )
        return user

    async def update_user(
        self,
        user_id: UUID,
        first_name: str | None = None,
        last_name: str | None = None,
        role: str | UserRole | None = None,
    ) -> User:
        user = await self._users.get(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        changes: dict[str, object] = {}
        if first_name is not None:
            changes["first_name"] = first_name or None
        if last_name is not None:
            changes["last_name"] = last_name or None
        if role is not None:
            changes["role"] = parse_role(role)
        updated = await self._users.update(replace(user, **changes))
        self._log_operation("update_user", user_id=str(user_id)).info(
            "user_updated", fields=sorted(changes)
        )
        return updated

    async def delete_user(self, user_id: UUID, acting_user: User) -> None:
        """Delete an account and its sessions.

        Raises:
            PermissionDeniedError: If an admin tries to delete themselves.
            NotFoundError: If the user does not exist.
        """
        if user_id == acting_user.id:
            raise PermissionDeniedError("You cannot delete your own account")
        await self._sessions.delete_for_user(user_id)
        if not await self._users.delete(user_id):
            raise NotFoundError("user", user_id)
        self._log_operation("delete_user", user_id=str(user_id)).info("user_deleted")

    async def seed_admin(self) -> tuple[User, bool]:
        """Create the default admin account unless it already exists.

        Returns:
            Tuple of (admin user, whether it was created now).
        """
        existing = await self._users.get_by_email(DEFAULT_ADMIN_EMAIL)
        if existing is not None:
            return existing, False
        user = await self.create_user(
            DEFAULT_ADMIN_EMAIL,
            first_name=DEFAULT_ADMIN_FIRST_NAME,
            last_name=DEFAULT_ADMIN_LAST_NAME,
            password=DEFAULT_ADMIN_PASSWORD,
            role=UserRole.ADMIN,
        )
        return user, True
