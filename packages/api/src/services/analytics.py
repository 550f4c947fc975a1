# This project was developed with assistance from AI tools.
"""Analytics service for the staff dashboard.

Computes the pipeline summary, per-agent performance and monthly volume.
All functions are pure async queries -- no side effects.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal

from db import Deal, Profile, Property
from db.enums import DealStatus, UserRole
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.analytics import (
    AgentPerformance,
    AgentPerformanceRow,
    MonthlyMetric,
    MonthlyMetrics,
    PipelineSummary,
    StatusCount,
)

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")
_TERMINAL = [s.value for s in DealStatus.terminal_statuses()]


def _percent(part: int, whole: int) -> int:
    return int(part / whole * 100 + 0.5) if whole > 0 else 0


def _closed_price():
    """Offer price when one was agreed, else asking price."""
    return func.coalesce(Deal.offer_price, Deal.asking_price, 0)


async def get_pipeline_summary(session: AsyncSession) -> PipelineSummary:
    """Counts and values per status across every deal."""
    now = datetime.now(UTC)

    status_stmt = select(
        Deal.status, func.count(Deal.id), func.coalesce(func.sum(Deal.asking_price), 0)
    ).group_by(Deal.status)
    rows = (await session.execute(status_stmt)).all()
    by_status = [
        StatusCount(
            status=row[0].value,
            label=row[0].label,
            count=row[1],
            total_asking=Decimal(row[2] or 0),
        )
        for row in rows
    ]
    counts = {sc.status: sc.count for sc in by_status}
    total = sum(counts.values())
    closed = counts.get(DealStatus.CLOSED.value, 0)
    rejected = counts.get(DealStatus.REJECTED.value, 0)
    pipeline_value = sum(
        (sc.total_asking for sc in by_status if sc.status not in _TERMINAL), _ZERO
    )

    closed_value_stmt = select(func.coalesce(func.sum(_closed_price()), 0)).where(
        Deal.status == DealStatus.CLOSED
    )
    closed_value = Decimal((await session.execute(closed_value_stmt)).scalar() or 0)

    avg_stmt = select(
        func.avg(
            func.extract("epoch", func.coalesce(Deal.closed_at, Deal.updated_at) - Deal.submitted_at)
            / 86400.0
        )
    ).where(Deal.status == DealStatus.CLOSED)
    avg_raw = (await session.execute(avg_stmt)).scalar()
    avg_days = int(float(avg_raw) + 0.5) if avg_raw is not None else None

    type_stmt = (
        select(Property.property_type, func.count(Deal.id))
        .join(Deal.property)
        .group_by(Property.property_type)
    )
    by_type = {
        (row[0].value if row[0] is not None else "other"): row[1]
        for row in (await session.execute(type_stmt)).all()
    }

    return PipelineSummary(
        total_deals=total,
        active_deals=total - closed - rejected,
        closed_deals=closed,
        rejected_deals=rejected,
        pipeline_value=pipeline_value,
        closed_value=closed_value,
        conversion_rate=_percent(closed, total),
        avg_days_in_pipeline=avg_days,
        by_status=by_status,
        by_property_type=by_type,
        computed_at=now,
    )


async def get_agent_performance(session: AsyncSession) -> AgentPerformance:
    """Per-agent totals, best closers first. Agents with no deals are included."""
    is_closed = Deal.status == DealStatus.CLOSED
    is_active = Deal.status.not_in(_TERMINAL)
    stmt = (
        select(
            Profile.id,
            Profile.full_name,
            Profile.email,
            func.count(Deal.id),
            func.coalesce(func.sum(case((is_active, 1), else_=0)), 0),
            func.coalesce(func.sum(case((is_closed, 1), else_=0)), 0),
            func.coalesce(func.sum(case((is_closed, _closed_price()), else_=0)), 0),
        )
        .outerjoin(Deal, Deal.agent_id == Profile.id)
        .where(Profile.role == UserRole.AGENT)
        .group_by(Profile.id, Profile.full_name, Profile.email)
    )
    rows = (await session.execute(stmt)).all()

    agents = [
        AgentPerformanceRow(
            agent_id=row[0],
            name=row[1] or row[2],
            total_deals=row[3],
            active_deals=int(row[4]),
            closed_deals=int(row[5]),
            closed_value=Decimal(row[6] or 0),
            conversion_rate=_percent(int(row[5]), row[3]),
        )
        for row in rows
    ]
    agents.sort(key=lambda a: (-a.closed_deals, -a.total_deals, a.name))
    return AgentPerformance(agents=agents, computed_at=datetime.now(UTC))


def _month_keys(now: datetime, months: int) -> list[str]:
    keys = []
    year, month = now.year, now.month
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def build_monthly_metrics(deals, now: datetime, months: int = 12) -> list[MonthlyMetric]:
    """Bucket deals into the last ``months`` calendar months.

    A deal counts as submitted in the month of ``submitted_at`` and as closed
    in the month of ``closed_at`` (``updated_at`` for older rows).
    """
    buckets = {
        key: {"submitted": 0, "closed": 0, "closed_volume": _ZERO}
        for key in _month_keys(now, months)
    }
    for deal in deals:
        if deal.submitted_at is not None:
            key = f"{deal.submitted_at:%Y-%m}"
            if key in buckets:
                buckets[key]["submitted"] += 1
        if deal.status == DealStatus.CLOSED:
            closed_at = deal.closed_at or deal.updated_at
            key = f"{closed_at:%Y-%m}" if closed_at is not None else None
            if key in buckets:
                price = deal.offer_price if deal.offer_price is not None else deal.asking_price
                buckets[key]["closed"] += 1
                buckets[key]["closed_volume"] += Decimal(price or 0)
    return [MonthlyMetric(month=key, **values) for key, values in buckets.items()]


async def get_monthly_metrics(session: AsyncSession, months: int = 12) -> MonthlyMetrics:
    now = datetime.now(UTC)
    first_key = _month_keys(now, months)[0]
    cutoff = datetime(int(first_key[:4]), int(first_key[5:]), 1, tzinfo=UTC)

    stmt = select(Deal).where(
        (Deal.submitted_at >= cutoff)
        | (func.coalesce(Deal.closed_at, Deal.updated_at) >= cutoff)
    )
    result = await session.execute(stmt)
    deals = result.unique().scalars().all()
    logger.debug("Monthly metrics over %d deals since %s", len(deals), cutoff.date())
    return MonthlyMetrics(months=build_monthly_metrics(deals, now, months), computed_at=now)
