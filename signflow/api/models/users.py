"""Administrative user management API models."""

from uuid import UUID

from pydantic import Field

from signflow.api.models.auth import UserResponse
from signflow.api.models.base import CamelModel


class UserListResponse(CamelModel):
    users: list[UserResponse]
    total_count: int


class CreateUserRequest(CamelModel):
    email: str
    first_name: str | None = None
    last_name: str | None = None
    password: str | None = Field(default=None, description="Optional initial password")
    role: str = "user"


class UpdateUserRequest(CamelModel):
    user_id: UUID
    first_name: str | None = None
    last_name: str | None = None
    role: str | None = None


class SeedAdminResponse(CamelModel):
    success: bool = True
    created: bool
    message: str
    user: UserResponse
