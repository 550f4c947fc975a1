# This project was developed with assistance from AI tools.
"""Deal service with role-based data scope filtering.

Every read goes through the caller's DataScope: agents see the deals they
submitted, investors see deals open for funding (or theirs), underwriters
and admins see the whole pipeline. Out-of-scope deals come back as None so
routes answer 404 without leaking existence.
"""

import logging
from datetime import UTC, datetime

from db import Attachment, Deal, DealComment, Profile, Property, UnderwritingRecord
from db.enums import (
    ActivityType,
    AttachmentCategory,
    AuditAction,
    DealStatus,
    EntityType,
    UserRole,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.deal import DealCreate, DealUpdate
from . import notification
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .deal_number import format_deal_number
from .errors import (
    DomainValidationError,
    InvalidTransitionError,
    PermissionDeniedError,
    transition_message,
)
from .scope import apply_data_scope
from .users import ensure_profile, get_profile

logger = logging.getLogger(__name__)

_STAFF_ROLES = {UserRole.ADMIN, UserRole.UNDERWRITER}

_SORT_COLUMNS = {
    "submitted_at": Deal.submitted_at.desc(),
    "updated_at": Deal.updated_at.desc(),
    "asking_price": Deal.asking_price.desc().nulls_last(),
}


def is_staff(user: UserContext) -> bool:
    return user.role in _STAFF_ROLES


def _deal_query():
    return select(Deal).options(
        selectinload(Deal.property),
        selectinload(Deal.agent),
        selectinload(Deal.assignee),
    )


def _apply_filters(stmt, status, priority, search):
    if status is not None:
        stmt = stmt.where(Deal.status == status)
    if priority is not None:
        stmt = stmt.where(Deal.priority == priority)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.join(Deal.property).where(
            or_(
                Property.address.ilike(pattern),
                Property.city.ilike(pattern),
                Deal.seller_name.ilike(pattern),
                Deal.deal_number.ilike(pattern),
            )
        )
    return stmt


async def list_deals(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    status: DealStatus | None = None,
    priority=None,
    search: str | None = None,
    sort_by: str | None = None,
) -> tuple[list[Deal], int]:
    """Return deals visible to the current user plus the total match count."""
    count_stmt = select(func.count(Deal.id))
    count_stmt = apply_data_scope(count_stmt, user.data_scope)
    count_stmt = _apply_filters(count_stmt, status, priority, search)
    total = (await session.execute(count_stmt)).scalar() or 0

    order = _SORT_COLUMNS.get(sort_by, Deal.submitted_at.desc())
    stmt = _deal_query().order_by(order).offset(offset).limit(limit)
    stmt = apply_data_scope(stmt, user.data_scope)
    stmt = _apply_filters(stmt, status, priority, search)
    result = await session.execute(stmt)
    return list(result.unique().scalars().all()), total


async def get_deal(session: AsyncSession, user: UserContext, deal_id: int) -> Deal | None:
    """Single deal if visible to the current user, else None."""
    stmt = _deal_query().where(Deal.id == deal_id)
    stmt = apply_data_scope(stmt, user.data_scope)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def submit_deal(
    session: AsyncSession,
    user: UserContext,
    data: DealCreate,
    meta: RequestMeta | None = None,
) -> Deal:
    """Create the property and its deal, then fan out the new-deal notice."""
    agent = await ensure_profile(session, user)

    prop = Property(**data.property.model_dump())
    session.add(prop)
    await session.flush()

    deal = Deal(
        property_id=prop.id,
        agent_id=user.user_id,
        status=DealStatus.SUBMITTED,
        priority=data.priority,
        asking_price=data.asking_price,
        seller_name=data.seller_name,
        seller_phone=data.seller_phone,
        seller_email=str(data.seller_email) if data.seller_email else None,
        seller_motivation=data.seller_motivation,
        notes=data.notes,
        tags=data.tags,
    )
    deal.property = prop
    session.add(deal)
    await session.flush()
    deal.deal_number = format_deal_number(deal.id)

    log_activity(
        session,
        deal.id,
        user.user_id,
        ActivityType.CREATED,
        f"Deal submitted for {prop.address}",
        {"asking_price": float(data.asking_price)},
    )
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.CREATE,
        entity_type=EntityType.DEAL,
        entity_id=deal.id,
        new_values={
            "deal_number": deal.deal_number,
            "address": prop.address,
            "asking_price": float(data.asking_price),
            "status": DealStatus.SUBMITTED.value,
        },
        meta=meta,
    )
    await notification.notify_new_deal(session, deal, agent.full_name or user.display_name)

    deal_id = deal.id
    await session.commit()
    logger.info("Deal %s submitted by %s", deal_id, user.user_id)
    return await get_deal(session, user, deal_id)


async def update_status(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    new_status: DealStatus,
    meta: RequestMeta | None = None,
) -> Deal | None:
    """Move a deal along the pipeline.

    Raises:
        PermissionDeniedError: caller is neither staff nor the deal's agent.
        InvalidTransitionError: the pipeline does not allow the move.
    """
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    if not is_staff(user) and deal.agent_id != user.user_id:
        raise PermissionDeniedError("Only staff or the submitting agent can change deal status")

    old_status = deal.status
    if old_status == new_status:
        return deal

    allowed = DealStatus.valid_transitions().get(old_status, frozenset())
    if new_status not in allowed:
        raise InvalidTransitionError(transition_message(old_status, new_status, allowed))

    deal.status = new_status
    if new_status == DealStatus.CLOSED:
        deal.closed_at = datetime.now(UTC)

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.DEAL,
        entity_id=deal.id,
        old_values={"status": old_status.value},
        new_values={"status": new_status.value},
        meta=meta,
        metadata={"field": "status"},
    )
    log_activity(
        session,
        deal.id,
        user.user_id,
        ActivityType.STATUS_CHANGED,
        f"Status changed from {old_status.label} to {new_status.label}",
        {"from": old_status.value, "to": new_status.value},
    )
    await notification.notify_status_change(session, deal, old_status, new_status, user.user_id)

    await session.commit()
    logger.info("Deal %s status %s -> %s", deal_id, old_status.value, new_status.value)
    return await get_deal(session, user, deal_id)


async def assign_deal(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    assignee_id: str | None,
    meta: RequestMeta | None = None,
) -> Deal | None:
    """Assign (or unassign) a deal to an underwriter or admin."""
    if not is_staff(user):
        raise PermissionDeniedError("Only admins and underwriters can assign deals")

    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None

    assignee: Profile | None = None
    if assignee_id is not None:
        assignee = await get_profile(session, assignee_id)
        if assignee is None or not assignee.is_active or assignee.role not in _STAFF_ROLES:
            raise DomainValidationError("Deals can only be assigned to active underwriters or admins")

    old_assignee = deal.assigned_to
    deal.assigned_to = assignee_id

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.DEAL,
        entity_id=deal.id,
        old_values={"assigned_to": old_assignee},
        new_values={"assigned_to": assignee_id},
        meta=meta,
        metadata={"field": "assigned_to"},
    )
    description = (
        f"Assigned to {assignee.full_name or assignee.email}" if assignee else "Unassigned"
    )
    log_activity(session, deal.id, user.user_id, ActivityType.ASSIGNED, description)
    if assignee is not None and assignee_id != old_assignee:
        await notification.notify_assignment(session, deal, assignee)

    await session.commit()
    return await get_deal(session, user, deal_id)


async def set_offer_price(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    offer_price,
    meta: RequestMeta | None = None,
) -> Deal | None:
    """Only the agent who submitted the deal records the offer price."""
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    if deal.agent_id != user.user_id:
        raise PermissionDeniedError("Only the submitting agent can set the offer price")

    old_price = deal.offer_price
    deal.offer_price = offer_price
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.DEAL,
        entity_id=deal.id,
        old_values={"offer_price": float(old_price) if old_price is not None else None},
        new_values={"offer_price": float(offer_price)},
        meta=meta,
        metadata={"field": "offer_price"},
    )
    await session.commit()
    return await get_deal(session, user, deal_id)


async def update_deal(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    update: DealUpdate,
    meta: RequestMeta | None = None,
) -> Deal | None:
    """Priority, tags and notes. Staff or the submitting agent."""
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    if not is_staff(user) and deal.agent_id != user.user_id:
        raise PermissionDeniedError("Only staff or the submitting agent can edit this deal")

    changes = update.model_dump(exclude_unset=True)
    if changes.get("priority", True) is None:
        del changes["priority"]
    old_values = {}
    for field, value in changes.items():
        old = getattr(deal, field)
        old_values[field] = getattr(old, "value", old)
        setattr(deal, field, value)

    if "priority" in changes and old_values["priority"] != getattr(update.priority, "value", None):
        log_activity(
            session,
            deal.id,
            user.user_id,
            ActivityType.PRIORITY_CHANGED,
            f"Priority changed to {update.priority.value}",
        )
    if changes:
        await write_audit_log(
            session,
            user_id=user.user_id,
            action=AuditAction.UPDATE,
            entity_type=EntityType.DEAL,
            entity_id=deal.id,
            old_values=old_values,
            new_values={k: getattr(v, "value", v) for k, v in changes.items()},
            meta=meta,
        )
    await session.commit()
    return await get_deal(session, user, deal_id)


async def get_timeline(session: AsyncSession, user: UserContext, deal_id: int) -> dict | None:
    """Deal plus its latest underwriting, comment count and photo count."""
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None

    uw_result = await session.execute(
        select(UnderwritingRecord).where(UnderwritingRecord.deal_id == deal_id)
    )
    underwriting = uw_result.unique().scalar_one_or_none()

    comment_count = (
        await session.execute(
            select(func.count(DealComment.id)).where(DealComment.deal_id == deal_id)
        )
    ).scalar() or 0
    photo_count = (
        await session.execute(
            select(func.count(Attachment.id)).where(
                Attachment.deal_id == deal_id,
                Attachment.category == AttachmentCategory.PHOTO,
            )
        )
    ).scalar() or 0

    return {
        "deal": deal,
        "underwriting": underwriting,
        "comment_count": comment_count,
        "photo_count": photo_count,
        "agent": deal.agent,
        "assignee": deal.assignee,
    }
