# This project was developed with assistance from AI tools.
"""Investor funding request schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import FundingStatus
from pydantic import BaseModel, ConfigDict, Field

from .deal import UserSummary


class FundingRequestCreate(BaseModel):
    requested_amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    interest_rate: float | None = Field(default=None, ge=0, le=100)
    term_months: int | None = Field(default=None, ge=1, le=360)
    notes: str | None = Field(default=None, max_length=2000)


class FundingStatusUpdate(BaseModel):
    status: FundingStatus
    approved_amount: Decimal | None = Field(default=None, ge=0)
    funded_amount: Decimal | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=2000)


class FundingDealSummary(BaseModel):
    id: int
    deal_number: str | None = None
    status: str
    address: str | None = None
    city: str | None = None
    state: str | None = None
    asking_price: Decimal | None = None
    offer_price: Decimal | None = None


class FundingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    investor_id: str
    status: FundingStatus
    requested_amount: Decimal
    approved_amount: Decimal | None = None
    funded_amount: Decimal | None = None
    interest_rate: float | None = None
    term_months: int | None = None
    notes: str | None = None
    requested_at: datetime
    approved_at: datetime | None = None
    funded_at: datetime | None = None
    investor: UserSummary | None = None
    deal: FundingDealSummary | None = None


class FundingListResponse(BaseModel):
    data: list[FundingResponse]
