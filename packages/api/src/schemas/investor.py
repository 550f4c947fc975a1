# This project was developed with assistance from AI tools.
"""Investor dashboard schemas."""

from decimal import Decimal

from pydantic import BaseModel

from .deal import DealResponse, UnderwritingSummary
from .funding import FundingResponse


class InvestorDeal(BaseModel):
    deal: DealResponse
    underwriting: UnderwritingSummary | None = None
    funding: list[FundingResponse] = []


class InvestorDealListResponse(BaseModel):
    data: list[InvestorDeal]


class InvestorStats(BaseModel):
    total_funded: Decimal
    pending_funding: Decimal
    active_deals: int
    closed_deals: int
    total_invested: Decimal
    total_returns: Decimal
    roi: float


class InvestorDashboard(BaseModel):
    available_deals: list[InvestorDeal]
    my_deals: list[InvestorDeal]
    funding_requests: list[FundingResponse]
    stats: InvestorStats
