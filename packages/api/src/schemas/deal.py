# This project was developed with assistance from AI tools.
"""Deal and property request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import DealPriority, DealStatus, PropertyType
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from . import Pagination


class PropertyCreate(BaseModel):
    """Property details captured at submission."""

    address: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2, max_length=2)
    zip: str = Field(pattern=r"^\d{5}(-\d{4})?$")
    county: str | None = None
    property_type: PropertyType = PropertyType.SINGLE_FAMILY
    bedrooms: int | None = Field(default=None, ge=0, le=20)
    bathrooms: float | None = Field(default=None, ge=0, le=20)
    sqft: int | None = Field(default=None, ge=0, le=100_000)
    lot_size: int | None = Field(default=None, ge=0)
    year_built: int | None = Field(default=None, ge=1800, le=2030)

    @field_validator("state")
    @classmethod
    def _upper_state(cls, v: str) -> str:
        return v.upper()


class DealCreate(BaseModel):
    """Submit a new deal: property plus seller details and asking price."""

    property: PropertyCreate
    seller_name: str = Field(min_length=2)
    seller_phone: str | None = None
    seller_email: EmailStr | None = None
    seller_motivation: str | None = None
    asking_price: Decimal = Field(ge=0)
    notes: str | None = None
    priority: DealPriority = DealPriority.MEDIUM
    tags: list[str] = []

    @field_validator("seller_email", "seller_phone", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DealStatusUpdate(BaseModel):
    status: DealStatus


class DealAssign(BaseModel):
    """``assignee_id=None`` unassigns the deal."""

    assignee_id: str | None = None


class DealOfferUpdate(BaseModel):
    offer_price: Decimal = Field(ge=0)


class DealUpdate(BaseModel):
    """Partial update of the deal's working fields."""

    priority: DealPriority | None = None
    tags: list[str] | None = None
    notes: str | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    address: str
    city: str
    state: str
    zip: str
    county: str | None = None
    property_type: PropertyType
    bedrooms: int | None = None
    bathrooms: float | None = None
    sqft: int | None = None
    lot_size: int | None = None
    year_built: int | None = None
    latitude: float | None = None
    longitude: float | None = None


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str | None = None
    email: str


class DealResponse(BaseModel):
    id: int
    deal_number: str | None = None
    status: DealStatus
    status_label: str
    priority: DealPriority
    agent_id: str
    assigned_to: str | None = None
    investor_id: str | None = None
    asking_price: Decimal | None = None
    offer_price: Decimal | None = None
    final_price: Decimal | None = None
    seller_name: str
    seller_phone: str | None = None
    seller_email: str | None = None
    seller_motivation: str | None = None
    notes: str | None = None
    tags: list[str] = []
    submitted_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    property: PropertyResponse | None = None
    agent: UserSummary | None = None
    assignee: UserSummary | None = None


class DealListResponse(BaseModel):
    data: list[DealResponse]
    pagination: Pagination


class UnderwritingSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    version: int
    arv: Decimal | None = None
    repair_estimate: Decimal | None = None
    max_offer: Decimal | None = None
    recommended_offer: Decimal | None = None
    risk_score: int | None = None
    updated_at: datetime | None = None


class DealTimelineResponse(BaseModel):
    """Everything the deal detail page needs in one call."""

    deal: DealResponse
    underwriting: UnderwritingSummary | None = None
    comment_count: int = 0
    photo_count: int = 0
    agent: UserSummary | None = None
    assignee: UserSummary | None = None
