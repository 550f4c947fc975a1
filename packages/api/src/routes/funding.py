# This project was developed with assistance from AI tools.
"""Investor funding request routes.

Investors request funding on deals open to them; staff review, approve and
record the funded amount. Duplicate requests answer 409.
"""

from db import get_db
from db.enums import FundingStatus
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, InvestorUser, StaffUser
from ..schemas.funding import (
    FundingListResponse,
    FundingRequestCreate,
    FundingResponse,
    FundingStatusUpdate,
)
from ..services import funding as funding_service
from ._common import build_funding_response, request_meta, send_notifications_later

router = APIRouter()


@router.post(
    "/deals/{deal_id}/funding",
    response_model=FundingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_funding(
    deal_id: int,
    body: FundingRequestCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> FundingResponse:
    funding = await funding_service.request_funding(
        session, user, deal_id, body, request_meta(request)
    )
    send_notifications_later(background_tasks, session)
    if funding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return build_funding_response(funding)


@router.get("/deals/{deal_id}/funding", response_model=FundingListResponse)
async def list_deal_funding(
    deal_id: int,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> FundingListResponse:
    rows = await funding_service.list_deal_funding(session, user, deal_id)
    if rows is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return FundingListResponse(data=[build_funding_response(f) for f in rows])


@router.get("/funding", response_model=FundingListResponse)
async def list_all_funding(
    user: StaffUser,
    status: FundingStatus | None = None,
    session: AsyncSession = Depends(get_db),
) -> FundingListResponse:
    """Every funding request across the pipeline, newest first."""
    rows = await funding_service.list_all_funding(session, user, status)
    return FundingListResponse(data=[build_funding_response(f) for f in rows])


@router.get("/funding/mine", response_model=FundingListResponse)
async def list_my_funding(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> FundingListResponse:
    rows = await funding_service.list_my_funding(session, user)
    return FundingListResponse(data=[build_funding_response(f) for f in rows])


@router.patch("/funding/{funding_id}", response_model=FundingResponse)
async def update_funding_status(
    funding_id: int,
    body: FundingStatusUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> FundingResponse:
    funding = await funding_service.update_funding_status(
        session, user, funding_id, body, request_meta(request)
    )
    send_notifications_later(background_tasks, session)
    if funding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Funding request not found")
    return build_funding_response(funding)


@router.post("/funding/{funding_id}/withdraw", response_model=FundingResponse)
async def withdraw_funding(
    funding_id: int,
    request: Request,
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> FundingResponse:
    funding = await funding_service.withdraw_funding(
        session, user, funding_id, request_meta(request)
    )
    if funding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Funding request not found")
    return build_funding_response(funding)
