# This project was developed with assistance from AI tools.
"""Offer document schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import OfferDocumentStatus
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class OfferCreate(BaseModel):
    offer_amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    earnest_money: Decimal | None = Field(default=None, ge=0)
    closing_date: datetime | None = None
    terms: str | None = Field(default=None, max_length=5000)


class OfferCopyRecipient(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr


class OfferSend(BaseModel):
    """Buyer defaults to the sending staff member."""

    buyer_name: str | None = None
    buyer_email: EmailStr | None = None
    cc: list[OfferCopyRecipient] = []


class OfferVoid(BaseModel):
    reason: str = Field(default="Offer withdrawn", min_length=1, max_length=200)


class OfferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    created_by: str
    offer_amount: Decimal
    earnest_money: Decimal | None = None
    closing_date: datetime | None = None
    terms: str | None = None
    status: OfferDocumentStatus
    docusign_envelope_id: str | None = None
    sent_at: datetime | None = None
    signed_at: datetime | None = None
    created_at: datetime
    is_mock: bool = False


class OfferListResponse(BaseModel):
    data: list[OfferResponse]
