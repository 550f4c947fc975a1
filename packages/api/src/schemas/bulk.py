# This project was developed with assistance from AI tools.
"""Bulk deal operation schemas."""

from db.enums import DealPriority, DealStatus
from pydantic import BaseModel, Field

MAX_BULK_DEALS = 500


class BulkDealIds(BaseModel):
    deal_ids: list[int] = Field(min_length=1, max_length=MAX_BULK_DEALS)


class BulkStatusRequest(BulkDealIds):
    status: DealStatus


class BulkAssignRequest(BulkDealIds):
    assignee_id: str


class BulkPriorityRequest(BulkDealIds):
    priority: DealPriority


class BulkFailure(BaseModel):
    deal_id: int
    reason: str


class BulkResult(BaseModel):
    succeeded: int
    failed: int
    errors: list[BulkFailure] = []
