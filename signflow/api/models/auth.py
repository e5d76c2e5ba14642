"""Auth and user API models."""

from uuid import UUID

from pydantic import Field

from signflow.api.models.base import CamelModel, DateTimeWithZ
from signflow.domain.models.user import User


class SignUpRequest(CamelModel):
    email: str = Field(description="Login email (stored lowercased)")
    password: str = Field(description="At least 6 characters")
    first_name: str | None = None
    last_name: str | None = None


class SignInRequest(CamelModel):
    email: str
    password: str


class UserResponse(CamelModel):
    id: UUID
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    email_verified: bool = False
    created_at: DateTimeWithZ

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            email_verified=user.email_verified,
            created_at=user.created_at,
        )


class AuthResponse(CamelModel):
    success: bool = True
    user: UserResponse


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None
