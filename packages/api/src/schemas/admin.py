# This project was developed with assistance from AI tools.
"""Pydantic response models for admin endpoints."""

from pydantic import BaseModel


class SeedResponse(BaseModel):
    """Response for POST /api/admin/seed."""

    status: str
    seeded_at: str | None = None
    config_hash: str | None = None
    profiles: int | None = None
    deals: int | None = None
    underwriting_records: int | None = None
    funding_requests: int | None = None


class SeedStatusResponse(BaseModel):
    """Response for GET /api/admin/seed/status."""

    seeded: bool
    seeded_at: str | None = None
    config_hash: str | None = None
    summary: dict | None = None
