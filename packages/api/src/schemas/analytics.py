# This project was developed with assistance from AI tools.
"""Analytics response schemas for the staff dashboard."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class StatusCount(BaseModel):
    """Deal count and total asking price for one status."""

    status: str
    label: str
    count: int
    total_asking: Decimal


class PipelineSummary(BaseModel):
    total_deals: int
    active_deals: int
    closed_deals: int
    rejected_deals: int
    pipeline_value: Decimal = Field(..., description="Total asking price of active deals")
    closed_value: Decimal = Field(..., description="Offer (or asking) price of closed deals")
    conversion_rate: int = Field(..., description="Closed deals as a whole percent of all deals")
    avg_days_in_pipeline: int | None = Field(
        None, description="Average days from submission to close"
    )
    by_status: list[StatusCount]
    by_property_type: dict[str, int]
    computed_at: datetime


class AgentPerformanceRow(BaseModel):
    agent_id: str
    name: str
    total_deals: int
    active_deals: int
    closed_deals: int
    closed_value: Decimal
    conversion_rate: int


class AgentPerformance(BaseModel):
    agents: list[AgentPerformanceRow]
    computed_at: datetime


class MonthlyMetric(BaseModel):
    month: str = Field(..., description="Period label, e.g. '2026-02'")
    submitted: int
    closed: int
    closed_volume: Decimal


class MonthlyMetrics(BaseModel):
    months: list[MonthlyMetric]
    computed_at: datetime
