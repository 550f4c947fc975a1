# This project was developed with assistance from AI tools.
"""Deal CRUD and pipeline routes with RBAC enforcement."""

from typing import Literal

from db import get_db
from db.enums import DealPriority, DealStatus, UserRole
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, StaffUser, require_roles
from ..schemas import Pagination
from ..schemas.activity import ActivityItem, ActivityListResponse
from ..schemas.deal import (
    DealAssign,
    DealCreate,
    DealListResponse,
    DealOfferUpdate,
    DealResponse,
    DealStatusUpdate,
    DealTimelineResponse,
    DealUpdate,
)
from ..services import deal as deal_service
from ..services.activity import list_activities
from ._common import (
    build_deal_response,
    build_underwriting_summary,
    request_meta,
    send_notifications_later,
    user_summary,
)

router = APIRouter()


def _not_found(deal_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Deal {deal_id} not found",
    )


@router.post(
    "/",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.AGENT, UserRole.ADMIN))],
)
async def submit_deal(
    body: DealCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    """Submit a property deal into the pipeline."""
    deal = await deal_service.submit_deal(session, user, body, request_meta(request))
    send_notifications_later(background_tasks, session)
    return build_deal_response(deal)


@router.get("/", response_model=DealListResponse)
async def list_deals(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    status_filter: DealStatus | None = Query(default=None, alias="status"),
    priority: DealPriority | None = None,
    search: str | None = Query(default=None, max_length=100),
    sort_by: Literal["submitted_at", "updated_at", "asking_price"] | None = None,
) -> DealListResponse:
    """List deals visible to the current user."""
    deals, total = await deal_service.list_deals(
        session,
        user,
        offset=offset,
        limit=limit,
        status=status_filter,
        priority=priority,
        search=search,
        sort_by=sort_by,
    )
    return DealListResponse(
        data=[build_deal_response(d) for d in deals],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await deal_service.get_deal(session, user, deal_id)
    if deal is None:
        raise _not_found(deal_id)
    return build_deal_response(deal)


@router.get("/{deal_id}/timeline", response_model=DealTimelineResponse)
async def get_timeline(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealTimelineResponse:
    """Deal detail plus latest underwriting and attachment/comment counts."""
    timeline = await deal_service.get_timeline(session, user, deal_id)
    if timeline is None:
        raise _not_found(deal_id)
    return DealTimelineResponse(
        deal=build_deal_response(timeline["deal"]),
        underwriting=build_underwriting_summary(timeline["underwriting"]),
        comment_count=timeline["comment_count"],
        photo_count=timeline["photo_count"],
        agent=user_summary(timeline["agent"]),
        assignee=user_summary(timeline["assignee"]),
    )


@router.get("/{deal_id}/activities", response_model=ActivityListResponse)
async def get_activities(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    limit: int = Query(default=50, ge=1, le=200),
) -> ActivityListResponse:
    if await deal_service.get_deal(session, user, deal_id) is None:
        raise _not_found(deal_id)
    activities = await list_activities(session, deal_id, limit=limit)
    return ActivityListResponse(data=[ActivityItem.model_validate(a) for a in activities])


@router.patch("/{deal_id}/status", response_model=DealResponse)
async def update_status(
    deal_id: int,
    body: DealStatusUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    """Move a deal along the pipeline. Staff, or the submitting agent."""
    deal = await deal_service.update_status(
        session, user, deal_id, body.status, request_meta(request)
    )
    send_notifications_later(background_tasks, session)
    if deal is None:
        raise _not_found(deal_id)
    return build_deal_response(deal)


@router.patch("/{deal_id}/assign", response_model=DealResponse)
async def assign_deal(
    deal_id: int,
    body: DealAssign,
    request: Request,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await deal_service.assign_deal(
        session, user, deal_id, body.assignee_id, request_meta(request)
    )
    send_notifications_later(background_tasks, session)
    if deal is None:
        raise _not_found(deal_id)
    return build_deal_response(deal)


@router.patch(
    "/{deal_id}/offer-price",
    response_model=DealResponse,
    dependencies=[Depends(require_roles(UserRole.AGENT))],
)
async def set_offer_price(
    deal_id: int,
    body: DealOfferUpdate,
    request: Request,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    deal = await deal_service.set_offer_price(
        session, user, deal_id, body.offer_price, request_meta(request)
    )
    if deal is None:
        raise _not_found(deal_id)
    return build_deal_response(deal)


@router.patch(
    "/{deal_id}",
    response_model=DealResponse,
    dependencies=[Depends(require_roles(UserRole.AGENT, UserRole.UNDERWRITER, UserRole.ADMIN))],
)
async def update_deal(
    deal_id: int,
    body: DealUpdate,
    request: Request,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DealResponse:
    """Update priority, tags or notes."""
    deal = await deal_service.update_deal(session, user, deal_id, body, request_meta(request))
    if deal is None:
        raise _not_found(deal_id)
    return build_deal_response(deal)
