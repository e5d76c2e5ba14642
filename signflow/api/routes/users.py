"""Administrative user management routes (admin only)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from signflow.api.auth.session_auth import AdminUser
from signflow.api.dependencies import get_user_admin_service
from signflow.api.errors import to_http_exception
from signflow.api.models.auth import SuccessResponse, UserResponse
from signflow.api.models.users import (
    CreateUserRequest,
    UpdateUserRequest,
    UserListResponse,
)
from signflow.application.services.user_admin_service import UserAdminService
from signflow.domain.exceptions import SignflowError

router = APIRouter(prefix="/v1/users", tags=["users"])

UserAdminDep = Annotated[UserAdminService, Depends(get_user_admin_service)]


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: AdminUser,
    service: UserAdminDep,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    query: str | None = None,
) -> UserListResponse:
    """List users newest first, optionally filtered by email or name."""
    page = await service.list_users(limit=limit, offset=offset, query=query)
    return UserListResponse(
        users=[UserResponse.from_user(u) for u in page.users],
        total_count=page.total_count,
    )


@router.post("", response_model=UserResponse)
async def create_user(
    body: CreateUserRequest, request: Request, admin: AdminUser, service: UserAdminDep
) -> UserResponse:
    """Create a user account.

    Raises:
        HTTPException 400: Invalid email or role.
        HTTPException 409: Email already in use.
    """
    try:
        user = await service.create_user(
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            password=body.password,
            role=body.role,
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="users") from None
    return UserResponse.from_user(user)


@router.put("", response_model=UserResponse)
async def update_user(
    body: UpdateUserRequest, request: Request, admin: AdminUser, service: UserAdminDep
) -> UserResponse:
    """Update a user's names and role."""
    try:
        user = await service.update_user(
            body.user_id,
            first_name=body.first_name,
            last_name=body.last_name,
            role=body.role,
        )
    except SignflowError as e:
        raise to_http_exception(e, request, area="users") from None
    return UserResponse.from_user(user)


@router.delete("", response_model=SuccessResponse)
async def delete_user(
    request: Request,
    admin: AdminUser,
    service: UserAdminDep,
    user_id: Annotated[UUID, Query(alias="userId")],
) -> SuccessResponse:
    """Delete a user and their sessions.

    Raises:
        HTTPException 403: An admin deleting their own account.
        HTTPException 404: Unknown user.
    """
    try:
        await service.delete_user(user_id, acting_user=admin)
    except SignflowError as e:
        raise to_http_exception(e, request, area="users") from None
    return SuccessResponse(message="User deleted")
