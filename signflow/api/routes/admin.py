"""Bootstrap route creating the default administrator.

Only served outside production; production deployments use
``scripts/create_admin.py``.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from signflow.api.dependencies import get_user_admin_service
from signflow.api.errors import problem
from signflow.api.models.auth import UserResponse
from signflow.api.models.users import SeedAdminResponse
from signflow.application.services.user_admin_service import UserAdminService
from signflow.config.settings import get_settings

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.post("/create-user", response_model=SeedAdminResponse)
async def create_admin_user(
    request: Request,
    service: Annotated[UserAdminService, Depends(get_user_admin_service)],
) -> SeedAdminResponse:
    """Create the default admin account if it does not exist yet."""
    if get_settings().is_production:
        raise problem(
            request,
            404,
            "admin",
            "not-found",
            "Not Found",
            "Use scripts/create_admin.py to create the administrator in production",
        )
    user, created = await service.seed_admin()
    message = "Admin user created" if created else "Admin user already exists"
    return SeedAdminResponse(created=created, message=message, user=UserResponse.from_user(user))
