# This project was developed with assistance from AI tools.
"""Deal activity feed.

Rows are added on the caller's session and committed with the change they
describe.
"""

from db import DealActivity
from db.enums import ActivityType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

DEFAULT_LIMIT = 50


def log_activity(
    session: AsyncSession,
    deal_id: int,
    user_id: str | None,
    activity_type: ActivityType,
    description: str,
    metadata: dict | None = None,
) -> DealActivity:
    activity = DealActivity(
        deal_id=deal_id,
        user_id=user_id,
        activity_type=activity_type,
        description=description,
        extra=metadata,
    )
    session.add(activity)
    return activity


async def list_activities(
    session: AsyncSession, deal_id: int, limit: int = DEFAULT_LIMIT
) -> list[DealActivity]:
    """Newest first. Caller must have checked access to the deal."""
    stmt = (
        select(DealActivity)
        .where(DealActivity.deal_id == deal_id)
        .order_by(DealActivity.created_at.desc(), DealActivity.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())
