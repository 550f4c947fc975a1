# This project was developed with assistance from AI tools.
"""Third-party integration request/response schemas."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class Comp(BaseModel):
    """One comparable sale."""

    address: str
    city: str
    state: str
    zip: str = ""
    sale_price: float
    sale_date: datetime
    distance_miles: float
    bedrooms: int | None = None
    bathrooms: float | None = None
    sqft: int | None = None
    year_built: int | None = None
    price_per_sqft: float = 0
    days_on_market: int | None = None

    @field_validator("sale_date")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        """Date-only or naive sale dates are treated as UTC."""
        return v if v.tzinfo else v.replace(tzinfo=UTC)


class ARVEstimate(BaseModel):
    estimated_arv: int
    confidence_score: int = Field(ge=0, le=100)
    comps: list[Comp]
    average_price_per_sqft: int
    median_sale_price: int
    comp_count: int
    is_mock: bool = False


class CompsRequest(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str | None = None
    beds: int | None = Field(default=None, ge=0)
    baths: float | None = Field(default=None, ge=0)
    sqft: int | None = Field(default=None, gt=0)


class GeocodeResult(BaseModel):
    formatted_address: str
    lat: float
    lng: float
    place_id: str
    street_number: str | None = None
    route: str | None = None
    city: str | None = None
    county: str | None = None
    state: str | None = None
    state_code: str | None = None
    zip: str | None = None
    country: str | None = None
    is_valid: bool = True
    is_mock: bool = False


class AddressValidationRequest(BaseModel):
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str | None = None


class AddressValidationResponse(BaseModel):
    is_valid: bool
    result: GeocodeResult | None = None
    error: str | None = None


class ReverseGeocodeRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class DriveTimeRequest(BaseModel):
    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)


class DriveTimeResult(BaseModel):
    origin_address: str
    destination_address: str
    distance_meters: int
    distance_miles: float
    duration_seconds: int
    duration_minutes: int
    duration_text: str
    distance_text: str
    is_mock: bool = False


class EnvelopeResponse(BaseModel):
    envelope_id: str
    status: str
    status_date_time: datetime | None = None
    uri: str | None = None
    is_mock: bool = False


class EnvelopeSigner(BaseModel):
    email: str
    name: str
    status: str
    signed_date_time: datetime | None = None


class EnvelopeStatus(BaseModel):
    envelope_id: str
    status: str
    status_date_time: datetime | None = None
    sent_date_time: datetime | None = None
    completed_date_time: datetime | None = None
    signers: list[EnvelopeSigner] = []
    is_mock: bool = False


class IntegrationStatusItem(BaseModel):
    name: str
    configured: bool
    description: str


class IntegrationStatusResponse(BaseModel):
    integrations: list[IntegrationStatusItem]
