# This project was developed with assistance from AI tools.
"""Error body returned by every non-2xx response (RFC 7807 Problem Details)."""

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """One rejected request field, e.g. ``body.property.zip``."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Problem Details plus the DealFlow extensions below.

    ``errors`` is filled only for request validation failures and
    ``provider`` only when a configured integration failed (502).
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str = ""
    request_id: str = Field(default="", description="Echoes X-Request-ID when the client sent one.")
    errors: list[FieldError] = Field(default_factory=list)
    provider: str | None = None
