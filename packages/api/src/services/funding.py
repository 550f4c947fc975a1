# This project was developed with assistance from AI tools.
"""Investor funding requests.

Investors request to fund deals that are open for funding; staff move the
request through review. Funding a request pins the investor to the deal.
"""

import logging
from datetime import UTC, datetime

from db import Deal, InvestorFunding
from db.enums import (
    ActivityType,
    AuditAction,
    DealStatus,
    EntityType,
    FundingStatus,
    UserRole,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.funding import FundingRequestCreate, FundingStatusUpdate
from . import notification
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .deal import get_deal, is_staff
from .errors import (
    DomainValidationError,
    DuplicateFundingRequestError,
    InvalidTransitionError,
    PermissionDeniedError,
    transition_message,
)
from .users import ensure_profile

logger = logging.getLogger(__name__)

_AUDIT_ACTION = {
    FundingStatus.APPROVED: AuditAction.FUNDING_APPROVAL,
    FundingStatus.FUNDED: AuditAction.FUNDING_APPROVAL,
    FundingStatus.DECLINED: AuditAction.FUNDING_REJECTION,
}


def _funding_query():
    return select(InvestorFunding).options(
        selectinload(InvestorFunding.deal).selectinload(Deal.property),
        selectinload(InvestorFunding.investor),
    )


def is_available_for_funding(deal: Deal) -> bool:
    return deal.status in DealStatus.fundable_statuses() and deal.investor_id is None


async def _get_funding(session: AsyncSession, funding_id: int) -> InvestorFunding | None:
    result = await session.execute(_funding_query().where(InvestorFunding.id == funding_id))
    return result.unique().scalar_one_or_none()


async def request_funding(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    data: FundingRequestCreate,
    meta: RequestMeta | None = None,
) -> InvestorFunding | None:
    """Create a pending request. One per deal per investor.

    Raises:
        PermissionDeniedError: caller is not an investor.
        DomainValidationError: the deal is not open for funding.
        DuplicateFundingRequestError: the investor already asked for this deal.
    """
    if user.role != UserRole.INVESTOR:
        raise PermissionDeniedError("Only investors can request funding")

    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    if not is_available_for_funding(deal):
        raise DomainValidationError("This deal is not available for funding")

    existing = await session.execute(
        select(InvestorFunding).where(
            InvestorFunding.deal_id == deal_id,
            InvestorFunding.investor_id == user.user_id,
        )
    )
    if existing.unique().scalar_one_or_none() is not None:
        raise DuplicateFundingRequestError("You already have a funding request for this deal")

    investor = await ensure_profile(session, user)
    funding = InvestorFunding(
        deal_id=deal_id,
        investor_id=user.user_id,
        status=FundingStatus.PENDING,
        requested_amount=data.requested_amount,
        interest_rate=data.interest_rate,
        term_months=data.term_months,
        notes=data.notes,
    )
    session.add(funding)
    await session.flush()

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.FUNDING_REQUEST,
        entity_type=EntityType.FUNDING,
        entity_id=funding.id,
        new_values={"deal_id": deal_id, "requested_amount": float(data.requested_amount)},
        meta=meta,
    )
    log_activity(
        session,
        deal_id,
        user.user_id,
        ActivityType.FUNDING_REQUESTED,
        f"Funding requested: ${float(data.requested_amount):,.0f}",
        {"funding_id": funding.id},
    )
    await notification.notify_funding_request(
        session, deal, funding, investor.full_name or user.display_name
    )

    funding_id = funding.id
    await session.commit()
    logger.info("Funding request %s on deal %s by %s", funding_id, deal_id, user.user_id)
    return await _get_funding(session, funding_id)


async def update_funding_status(
    session: AsyncSession,
    user: UserContext,
    funding_id: int,
    update: FundingStatusUpdate,
    meta: RequestMeta | None = None,
) -> InvestorFunding | None:
    """Staff review step. Funding pins the investor to the deal."""
    if not is_staff(user):
        raise PermissionDeniedError("Only admins and underwriters can review funding")

    funding = await _get_funding(session, funding_id)
    if funding is None:
        return None

    old_status = funding.status
    target = update.status
    allowed = FundingStatus.valid_transitions().get(old_status, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(transition_message(old_status, target, allowed))
    pinned = funding.deal.investor_id
    if target == FundingStatus.FUNDED and pinned and pinned != funding.investor_id:
        raise InvalidTransitionError(
            f"Deal {funding.deal_id} is already funded by another investor"
        )

    now = datetime.now(UTC)
    funding.status = target
    if target == FundingStatus.APPROVED:
        funding.approved_amount = update.approved_amount or funding.requested_amount
        funding.approved_at = now
    elif target == FundingStatus.FUNDED:
        funding.funded_amount = (
            update.funded_amount or funding.approved_amount or funding.requested_amount
        )
        funding.funded_at = now
        funding.deal.investor_id = funding.investor_id
    if update.notes:
        funding.notes = update.notes

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=_AUDIT_ACTION.get(target, AuditAction.UPDATE),
        entity_type=EntityType.FUNDING,
        entity_id=funding.id,
        old_values={"status": old_status.value},
        new_values={
            "status": target.value,
            "approved_amount": float(funding.approved_amount) if funding.approved_amount else None,
            "funded_amount": float(funding.funded_amount) if funding.funded_amount else None,
        },
        meta=meta,
        metadata={"deal_id": funding.deal_id},
    )
    log_activity(
        session,
        funding.deal_id,
        user.user_id,
        ActivityType.FUNDING_UPDATED,
        f"Funding request {old_status.value.replace('_', ' ')} -> {target.value.replace('_', ' ')}",
        {"funding_id": funding.id, "from": old_status.value, "to": target.value},
    )
    await notification.notify_funding_update(session, funding.deal, funding)

    await session.commit()
    logger.info("Funding %s %s -> %s by %s", funding_id, old_status.value, target.value, user.user_id)
    return await _get_funding(session, funding_id)


async def withdraw_funding(
    session: AsyncSession,
    user: UserContext,
    funding_id: int,
    meta: RequestMeta | None = None,
) -> InvestorFunding | None:
    funding = await _get_funding(session, funding_id)
    if funding is None or funding.investor_id != user.user_id:
        return None
    if funding.status == FundingStatus.FUNDED:
        raise InvalidTransitionError("Cannot withdraw a funded request")
    if funding.status in FundingStatus.terminal_statuses():
        raise InvalidTransitionError(
            f"Cannot withdraw a request that is already {funding.status.value}"
        )

    old_status = funding.status
    funding.status = FundingStatus.WITHDRAWN
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.FUNDING,
        entity_id=funding.id,
        old_values={"status": old_status.value},
        new_values={"status": FundingStatus.WITHDRAWN.value},
        meta=meta,
        metadata={"deal_id": funding.deal_id},
    )
    await session.commit()
    return await _get_funding(session, funding_id)


async def list_deal_funding(
    session: AsyncSession, user: UserContext, deal_id: int
) -> list[InvestorFunding] | None:
    if not is_staff(user):
        raise PermissionDeniedError("Only admins and underwriters can view funding requests")
    if await get_deal(session, user, deal_id) is None:
        return None
    result = await session.execute(
        _funding_query()
        .where(InvestorFunding.deal_id == deal_id)
        .order_by(InvestorFunding.requested_at.desc())
    )
    return list(result.unique().scalars().all())


async def list_all_funding(
    session: AsyncSession,
    user: UserContext,
    status: FundingStatus | None = None,
) -> list[InvestorFunding]:
    """Every request across the pipeline, newest first. Staff only."""
    if not is_staff(user):
        raise PermissionDeniedError("Only admins and underwriters can view funding requests")
    stmt = _funding_query().order_by(InvestorFunding.requested_at.desc())
    if status is not None:
        stmt = stmt.where(InvestorFunding.status == status)
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def list_my_funding(session: AsyncSession, user: UserContext) -> list[InvestorFunding]:
    result = await session.execute(
        _funding_query()
        .where(InvestorFunding.investor_id == user.user_id)
        .order_by(InvestorFunding.requested_at.desc())
    )
    return list(result.unique().scalars().all())
