# This project was developed with assistance from AI tools.
"""Investor views: deals open for funding, funded deals and portfolio stats."""

import logging
from decimal import Decimal

from db import Deal, InvestorFunding
from db.enums import DealStatus, FundingStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.investor import InvestorStats
from .calculator import round_half_up
from .funding import list_my_funding

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def _investor_deal_query():
    return select(Deal).options(
        selectinload(Deal.property),
        selectinload(Deal.agent),
        selectinload(Deal.assignee),
        selectinload(Deal.underwriting),
        selectinload(Deal.funding_requests).selectinload(InvestorFunding.investor),
    )


async def list_available_deals(session: AsyncSession) -> list[Deal]:
    """Deals in a fundable status that no investor has funded yet."""
    stmt = (
        _investor_deal_query()
        .where(
            Deal.status.in_([s.value for s in DealStatus.fundable_statuses()]),
            Deal.investor_id.is_(None),
        )
        .order_by(Deal.submitted_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def list_my_deals(session: AsyncSession, user: UserContext) -> list[Deal]:
    stmt = (
        _investor_deal_query()
        .where(Deal.investor_id == user.user_id)
        .order_by(Deal.submitted_at.desc())
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


def calculate_stats(funding: list[InvestorFunding], my_deals: list[Deal]) -> InvestorStats:
    """Portfolio totals.

    Returns on a closed deal are its final price (or offer price) less what
    the investor funded on it. ROI is returns over invested, in percent.
    """
    funded = [f for f in funding if f.status == FundingStatus.FUNDED]
    total_funded = sum((Decimal(f.funded_amount or 0) for f in funded), _ZERO)
    pending = sum(
        (
            Decimal(f.requested_amount or 0)
            for f in funding
            if f.status in (FundingStatus.PENDING, FundingStatus.UNDER_REVIEW)
        ),
        _ZERO,
    )

    active = [d for d in my_deals if d.status not in DealStatus.terminal_statuses()]
    closed = [d for d in my_deals if d.status == DealStatus.CLOSED]

    funded_by_deal: dict[int, Decimal] = {}
    for f in funded:
        funded_by_deal[f.deal_id] = funded_by_deal.get(f.deal_id, _ZERO) + Decimal(
            f.funded_amount or 0
        )

    total_returns = _ZERO
    for deal in closed:
        sale = deal.final_price if deal.final_price is not None else deal.offer_price
        if sale is None:
            continue
        total_returns += Decimal(sale) - funded_by_deal.get(deal.id, _ZERO)

    roi = float(total_returns / total_funded * 100) if total_funded > 0 else 0.0
    return InvestorStats(
        total_funded=total_funded,
        pending_funding=pending,
        active_deals=len(active),
        closed_deals=len(closed),
        total_invested=total_funded,
        total_returns=total_returns,
        roi=round_half_up(roi, 2),
    )


async def get_dashboard(session: AsyncSession, user: UserContext) -> dict:
    available = await list_available_deals(session)
    my_deals = await list_my_deals(session, user)
    funding = await list_my_funding(session, user)
    stats = calculate_stats(funding, my_deals)
    logger.debug(
        "Investor dashboard for %s: %d available, %d funded",
        user.user_id,
        len(available),
        len(my_deals),
    )
    return {
        "available_deals": available,
        "my_deals": my_deals,
        "funding_requests": funding,
        "stats": stats,
    }
