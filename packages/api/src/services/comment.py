# This project was developed with assistance from AI tools.
"""Deal comments."""

import logging

from db import DealComment
from db.enums import ActivityType, AuditAction, EntityType, UserRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from . import notification
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .deal import get_deal
from .errors import PermissionDeniedError
from .scope import apply_data_scope
from .users import ensure_profile

logger = logging.getLogger(__name__)


async def list_comments(
    session: AsyncSession, user: UserContext, deal_id: int
) -> list[DealComment] | None:
    """Oldest first. None when the deal is not visible."""
    if await get_deal(session, user, deal_id) is None:
        return None
    stmt = (
        select(DealComment)
        .where(DealComment.deal_id == deal_id)
        .order_by(DealComment.created_at.asc(), DealComment.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def add_comment(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    content: str,
) -> DealComment | None:
    """Add a comment and notify the deal's agent and assignee."""
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    author = await ensure_profile(session, user)

    comment = DealComment(deal_id=deal_id, user_id=user.user_id, content=content.strip())
    comment.author = author
    session.add(comment)
    await session.flush()

    log_activity(
        session,
        deal_id,
        user.user_id,
        ActivityType.COMMENT_ADDED,
        f"{user.display_name} added a comment",
        {"comment_id": comment.id},
    )
    await notification.notify_comment(session, deal, user, comment.content)
    await session.commit()
    await session.refresh(comment)
    return comment


async def delete_comment(
    session: AsyncSession,
    user: UserContext,
    comment_id: int,
    meta: RequestMeta | None = None,
) -> bool:
    """Author or admin only. False when the comment is not visible."""
    stmt = select(DealComment).where(DealComment.id == comment_id)
    stmt = apply_data_scope(stmt, user.data_scope, join_to_deal=DealComment.deal)
    result = await session.execute(stmt)
    comment = result.unique().scalar_one_or_none()
    if comment is None:
        return False
    if comment.user_id != user.user_id and user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Only the author or an admin can delete this comment")

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.DELETE,
        entity_type=EntityType.COMMENT,
        entity_id=comment.id,
        old_values={"deal_id": comment.deal_id, "content": comment.content},
        meta=meta,
    )
    await session.delete(comment)
    await session.commit()
    return True
