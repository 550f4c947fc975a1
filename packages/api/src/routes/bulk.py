# This project was developed with assistance from AI tools.
"""Bulk operations over selected deals (admin and underwriter)."""

from datetime import UTC, datetime

from db import get_db
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import AdminUser, StaffUser
from ..schemas.bulk import (
    BulkAssignRequest,
    BulkDealIds,
    BulkPriorityRequest,
    BulkResult,
    BulkStatusRequest,
)
from ..services import bulk as bulk_service
from ._common import request_meta, send_notifications_later

router = APIRouter()


@router.post("/status", response_model=BulkResult)
async def bulk_status(
    body: BulkStatusRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    """Move every selected deal that the pipeline allows; report the rest."""
    result = await bulk_service.bulk_update_status(
        session, user, body.deal_ids, body.status, request_meta(request)
    )
    send_notifications_later(background_tasks, session)
    return result


@router.post("/assign", response_model=BulkResult)
async def bulk_assign(
    body: BulkAssignRequest,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    return await bulk_service.bulk_assign(
        session, user, body.deal_ids, body.assignee_id, request_meta(request)
    )


@router.post("/priority", response_model=BulkResult)
async def bulk_priority(
    body: BulkPriorityRequest,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    return await bulk_service.bulk_set_priority(
        session, user, body.deal_ids, body.priority, request_meta(request)
    )


@router.post("/delete", response_model=BulkResult)
async def bulk_delete(
    body: BulkDealIds,
    request: Request,
    user: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> BulkResult:
    return await bulk_service.bulk_delete(session, user, body.deal_ids, request_meta(request))


@router.post("/export")
async def bulk_export(
    body: BulkDealIds,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """CSV download of the selected deals."""
    content = await bulk_service.bulk_export(session, user, body.deal_ids, request_meta(request))
    filename = f"deals-export-{datetime.now(UTC):%Y-%m-%d}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
