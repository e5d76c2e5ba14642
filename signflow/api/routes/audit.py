"""Audit log route (admin only)."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from signflow.api.auth.session_auth import AdminUser
from signflow.api.dependencies import get_audit_service
from signflow.api.errors import problem
from signflow.api.models.audit import AuditEntryResponse, AuditListResponse
from signflow.application.services.audit_service import DEFAULT_PAGE_SIZE, AuditService
from signflow.domain.models.audit import AuditAction, AuditFilter

router = APIRouter(prefix="/v1/audit", tags=["audit"])

AuditServiceDep = Annotated[AuditService, Depends(get_audit_service)]


@router.get("", response_model=AuditListResponse)
async def list_audit_entries(
    request: Request,
    admin: AdminUser,
    service: AuditServiceDep,
    action: str | None = None,
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
    document_id: Annotated[UUID | None, Query(alias="documentId")] = None,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = DEFAULT_PAGE_SIZE,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> AuditListResponse:
    """Query the activity log, newest first."""
    try:
        parsed_action = AuditAction(action) if action else None
    except ValueError:
        raise problem(
            request,
            400,
            "audit",
            "invalid-action",
            "Bad Request",
            f"Unknown audit action: {action}",
            field="action",
        ) from None

    page = await service.list(
        AuditFilter(
            action=parsed_action,
            user_id=user_id,
            document_id=document_id,
            start_date=start_date,
            end_date=end_date,
        ),
        limit=limit,
        offset=offset,
    )
    return AuditListResponse(
        entries=[AuditEntryResponse.from_entry(e) for e in page.entries],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )
