# This project was developed with assistance from AI tools.
"""Investor portal routes: open deals, funded deals and portfolio stats."""

from db import Deal, get_db
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import InvestorUser
from ..schemas.auth import UserContext
from ..schemas.funding import FundingListResponse
from ..schemas.investor import (
    InvestorDashboard,
    InvestorDeal,
    InvestorDealListResponse,
    InvestorStats,
)
from ..services import investor as investor_service
from ..services.funding import list_my_funding
from ._common import build_deal_response, build_funding_response, build_underwriting_summary

router = APIRouter()


def _investor_deal(deal: Deal, user: UserContext) -> InvestorDeal:
    # Only the caller's own requests; other investors' bids stay private.
    own = [f for f in deal.funding_requests if f.investor_id == user.user_id]
    return InvestorDeal(
        deal=build_deal_response(deal),
        underwriting=build_underwriting_summary(deal.underwriting),
        funding=[build_funding_response(f, include_deal=False) for f in own],
    )


@router.get("/dashboard", response_model=InvestorDashboard)
async def dashboard(
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> InvestorDashboard:
    data = await investor_service.get_dashboard(session, user)
    return InvestorDashboard(
        available_deals=[_investor_deal(d, user) for d in data["available_deals"]],
        my_deals=[_investor_deal(d, user) for d in data["my_deals"]],
        funding_requests=[build_funding_response(f) for f in data["funding_requests"]],
        stats=data["stats"],
    )


@router.get("/deals/available", response_model=InvestorDealListResponse)
async def available_deals(
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> InvestorDealListResponse:
    """Deals in a fundable status that no investor has funded yet."""
    deals = await investor_service.list_available_deals(session)
    return InvestorDealListResponse(data=[_investor_deal(d, user) for d in deals])


@router.get("/deals/mine", response_model=InvestorDealListResponse)
async def my_deals(
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> InvestorDealListResponse:
    deals = await investor_service.list_my_deals(session, user)
    return InvestorDealListResponse(data=[_investor_deal(d, user) for d in deals])


@router.get("/requests", response_model=FundingListResponse)
async def my_requests(
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> FundingListResponse:
    rows = await list_my_funding(session, user)
    return FundingListResponse(data=[build_funding_response(f) for f in rows])


@router.get("/stats", response_model=InvestorStats)
async def stats(
    user: InvestorUser,
    session: AsyncSession = Depends(get_db),
) -> InvestorStats:
    funding = await list_my_funding(session, user)
    deals = await investor_service.list_my_deals(session, user)
    return investor_service.calculate_stats(funding, deals)
