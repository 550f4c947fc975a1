# This project was developed with assistance from AI tools.
"""Underwriting record schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import UnderwritingStatus
from pydantic import BaseModel, ConfigDict, Field

from .calculator import DealAnalysis, UnderwritingForm


class UnderwritingSave(BaseModel):
    """Create or update the underwriting for a deal."""

    form: UnderwritingForm
    arv_comps: list[dict] | None = None
    repair_breakdown: dict[str, float] | None = None
    notes: str | None = None


class UnderwritingReview(BaseModel):
    notes: str | None = Field(default=None, max_length=5000)


class UnderwritingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    underwriter_id: str
    status: UnderwritingStatus
    version: int
    arv: Decimal | None = None
    repair_estimate: Decimal | None = None
    max_offer: Decimal | None = None
    recommended_offer: Decimal | None = None
    profit_estimate: Decimal | None = None
    inputs: dict | None = None
    arv_comps: list[dict] | None = None
    repair_breakdown: dict | None = None
    risk_score: int | None = None
    risk_factors: dict | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class UnderwritingSaveResponse(BaseModel):
    underwriting: UnderwritingResponse
    analysis: DealAnalysis
    formula_offers: dict[str, int]
