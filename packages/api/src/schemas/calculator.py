# This project was developed with assistance from AI tools.
"""Underwriting calculator schemas."""

from db.enums import ArvSource, FinancingType, RepairScope
from pydantic import BaseModel, Field

# Largest amount the Numeric(12, 2) money columns can hold
MAX_AMOUNT = 9_999_999_999.99


class UnderwritingForm(BaseModel):
    """Underwriter inputs for evaluating a deal."""

    arv: float = Field(ge=0, le=MAX_AMOUNT)
    arv_source: ArvSource = ArvSource.ESTIMATE
    arv_notes: str | None = None

    repair_costs: float = Field(ge=0, le=MAX_AMOUNT)
    repair_scope: RepairScope = RepairScope.MODERATE
    repair_notes: str | None = None

    holding_months: int = Field(default=6, ge=1, le=24)
    monthly_holding_cost: float = Field(default=0, ge=0, le=MAX_AMOUNT)

    buying_closing_costs: float = Field(default=0, ge=0, le=MAX_AMOUNT)
    selling_closing_costs: float = Field(default=0, ge=0, le=MAX_AMOUNT)

    financing_type: FinancingType = FinancingType.CASH
    loan_amount: float = Field(default=0, ge=0, le=MAX_AMOUNT)
    interest_rate: float = Field(default=0, ge=0, le=30)

    target_profit_percent: float = Field(default=20, ge=0, le=100)
    target_profit_amount: float = Field(default=0, ge=0, le=MAX_AMOUNT)

    buy_box_percent: float = Field(default=70, ge=0, le=100)
    purchase_price: float | None = Field(
        default=None,
        ge=0,
        le=MAX_AMOUNT,
        description="Price used for profit / ROI. Defaults to the computed MAO.",
    )


class ProfitResult(BaseModel):
    total_investment: float
    profit: float
    profit_percent: float
    roi: float


class RepairEstimate(BaseModel):
    scope: RepairScope
    description: str
    low_per_sqft: float
    high_per_sqft: float
    low: float | None = None
    high: float | None = None


class DealAnalysis(BaseModel):
    """Full calculator output for an underwriting form."""

    mao: int
    rule70_offer: int
    buy_box_offer: int
    total_holding_costs: float
    total_closing_costs: float
    purchase_price: float
    profit: ProfitResult
    repair_guide: RepairEstimate


class RepairEstimateRequest(BaseModel):
    sqft: int = Field(ge=0, le=100000)
    scope: RepairScope = RepairScope.MODERATE


class AnalyzeRequest(BaseModel):
    form: UnderwritingForm
    sqft: int | None = Field(default=None, ge=0, le=100000)
