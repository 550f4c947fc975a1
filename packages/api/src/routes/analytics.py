# This project was developed with assistance from AI tools.
"""Pipeline analytics endpoints for the staff dashboard."""

from db import get_db
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import StaffUser
from ..schemas.analytics import AgentPerformance, MonthlyMetrics, PipelineSummary
from ..services.analytics import (
    get_agent_performance,
    get_monthly_metrics,
    get_pipeline_summary,
)

router = APIRouter()


@router.get("/pipeline", response_model=PipelineSummary)
async def pipeline_summary(
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> PipelineSummary:
    """Deal counts and value by status, conversion rate and average days in pipeline."""
    return await get_pipeline_summary(session)


@router.get("/agents", response_model=AgentPerformance)
async def agent_performance(
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> AgentPerformance:
    return await get_agent_performance(session)


@router.get("/monthly", response_model=MonthlyMetrics)
async def monthly_metrics(
    _user: StaffUser,
    months: int = Query(default=12, ge=1, le=36, description="Number of trailing months"),
    session: AsyncSession = Depends(get_db),
) -> MonthlyMetrics:
    return await get_monthly_metrics(session, months=months)
