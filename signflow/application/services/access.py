"""Ownership checks shared by the resource services."""

from __future__ import annotations

from uuid import UUID

from signflow.domain.errors import PermissionDeniedError
from signflow.domain.models.user import User


def ensure_owner_or_admin(user: User, owner_id: UUID, resource: str) -> None:
    """Raise PermissionDeniedError unless user owns the resource or is admin."""
    if user.id != owner_id and not user.is_admin:
        raise PermissionDeniedError(f"You do not have permission to access this {resource}")
