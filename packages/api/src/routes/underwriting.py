# This project was developed with assistance from AI tools.
"""Deal underwriting routes (admin and underwriter)."""

from db import get_db
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import AdminUser, CurrentUser, StaffUser
from ..schemas.risk import RiskInput
from ..schemas.underwriting import (
    UnderwritingResponse,
    UnderwritingReview,
    UnderwritingSave,
    UnderwritingSaveResponse,
)
from ..services import underwriting as uw_service
from ..services.deal import get_deal
from ..services.risk import calculate_risk_score, save_risk_assessment
from ._common import request_meta

router = APIRouter()


def _not_found(deal_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Underwriting for deal {deal_id} not found",
    )


@router.get("/{deal_id}/underwriting", response_model=UnderwritingResponse)
async def get_underwriting(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingResponse:
    record = await uw_service.get_underwriting(session, user, deal_id)
    if record is None:
        raise _not_found(deal_id)
    return UnderwritingResponse.model_validate(record)


@router.put("/{deal_id}/underwriting", response_model=UnderwritingSaveResponse)
async def save_underwriting(
    deal_id: int,
    body: UnderwritingSave,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingSaveResponse:
    """Create or update the deal's underwriting, returning the full analysis."""
    saved = await uw_service.save_underwriting(session, user, deal_id, body, request_meta(request))
    if saved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    record, analysis, offers = saved
    return UnderwritingSaveResponse(
        underwriting=UnderwritingResponse.model_validate(record),
        analysis=analysis,
        formula_offers=offers,
    )


@router.post("/{deal_id}/underwriting/submit", response_model=UnderwritingResponse)
async def submit_for_review(
    deal_id: int,
    body: UnderwritingReview,
    request: Request,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingResponse:
    record = await uw_service.submit_for_review(
        session, user, deal_id, body.notes, request_meta(request)
    )
    if record is None:
        raise _not_found(deal_id)
    return UnderwritingResponse.model_validate(record)


@router.post("/{deal_id}/underwriting/approve", response_model=UnderwritingResponse)
async def approve(
    deal_id: int,
    body: UnderwritingReview,
    request: Request,
    user: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingResponse:
    record = await uw_service.approve(session, user, deal_id, body.notes, request_meta(request))
    if record is None:
        raise _not_found(deal_id)
    return UnderwritingResponse.model_validate(record)


@router.post("/{deal_id}/underwriting/reject", response_model=UnderwritingResponse)
async def reject(
    deal_id: int,
    body: UnderwritingReview,
    request: Request,
    user: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingResponse:
    record = await uw_service.reject(session, user, deal_id, body.notes, request_meta(request))
    if record is None:
        raise _not_found(deal_id)
    return UnderwritingResponse.model_validate(record)


@router.post("/{deal_id}/risk", response_model=UnderwritingResponse)
async def score_deal_risk(
    deal_id: int,
    body: RiskInput,
    user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> UnderwritingResponse:
    """Re-score risk with adjusted inputs and store it on the underwriting."""
    if await get_deal(session, user, deal_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    record = await save_risk_assessment(session, deal_id, calculate_risk_score(body))
    if record is None:
        raise _not_found(deal_id)
    return UnderwritingResponse.model_validate(record)
