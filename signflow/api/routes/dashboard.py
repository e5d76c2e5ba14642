"""Dashboard route."""

from typing import Annotated

from fastapi import APIRouter, Depends

from signflow.api.auth.session_auth import CurrentUser
from signflow.api.dependencies import get_dashboard_service
from signflow.api.models.dashboard import DashboardResponse
from signflow.application.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    user: CurrentUser,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardResponse:
    summary = await service.summary(user)
    return DashboardResponse.from_summary(summary)
