# This project was developed with assistance from AI tools.
"""Pydantic response schemas for audit trail endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class AuditLogItem(BaseModel):
    """Single audit entry in a query response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    user_id: str | None = None
    action: str
    entity_type: str
    entity_id: str | None = None
    old_values: dict | None = None
    new_values: dict | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict | None = Field(default=None, validation_alias="extra")


class AuditLogListResponse(BaseModel):
    data: list[AuditLogItem]
    pagination: Pagination


class AuditHistoryResponse(BaseModel):
    entity_type: str
    entity_id: str
    count: int
    entries: list[AuditLogItem]


class AuditChainVerifyResponse(BaseModel):
    """Response for audit hash chain verification."""

    status: str
    entries_checked: int
    first_break_id: int | None = None
