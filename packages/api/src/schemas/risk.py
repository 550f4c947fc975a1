# This project was developed with assistance from AI tools.
"""Deal risk assessment schemas."""

from db.enums import PropertyType, RiskLevel
from pydantic import BaseModel, Field


class RiskInput(BaseModel):
    asking_price: float = Field(ge=0)
    arv: float = Field(ge=0)
    max_offer: float = Field(ge=0)
    rehab_cost: float = Field(ge=0)
    property_type: PropertyType | str = PropertyType.OTHER
    seller_motivation: str | None = None


class RiskFactor(BaseModel):
    category: str
    factor: str
    score: int
    weight: int
    notes: str | None = None


class RiskAssessment(BaseModel):
    overall_score: float
    risk_level: RiskLevel
    factors: list[RiskFactor]
    recommendation: str
