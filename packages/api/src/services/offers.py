# This project was developed with assistance from AI tools.
"""Purchase offer documents and their e-signature envelopes.

Envelope status drives both the offer document status and, where the
pipeline allows it, the deal status.
"""

import logging
from datetime import UTC, datetime

from db import Deal, OfferDocument
from db.enums import (
    ActivityType,
    AuditAction,
    DealStatus,
    EntityType,
    OfferDocumentStatus,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..integrations import docusign
from ..schemas.auth import UserContext
from ..schemas.offer import OfferCreate, OfferSend
from . import notification
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .deal import get_deal, is_staff
from .deal_number import format_deal_number
from .errors import DomainValidationError, InvalidTransitionError, PermissionDeniedError
from .notification import deal_address
from .scope import apply_data_scope
from .users import ensure_profile

logger = logging.getLogger(__name__)

_ENVELOPE_TO_OFFER = {
    "sent": OfferDocumentStatus.SENT,
    "delivered": OfferDocumentStatus.VIEWED,
    "completed": OfferDocumentStatus.SIGNED,
    "signed": OfferDocumentStatus.SIGNED,
    "declined": OfferDocumentStatus.DECLINED,
    "voided": OfferDocumentStatus.EXPIRED,
}


def map_offer_status(envelope_status: str) -> OfferDocumentStatus | None:
    return _ENVELOPE_TO_OFFER.get(envelope_status)


# Offers only move forward; signed, declined and expired are final
_OFFER_PROGRESS = {
    OfferDocumentStatus.DRAFT: 0,
    OfferDocumentStatus.SENT: 1,
    OfferDocumentStatus.VIEWED: 2,
    OfferDocumentStatus.SIGNED: 3,
    OfferDocumentStatus.DECLINED: 3,
    OfferDocumentStatus.EXPIRED: 3,
}


def can_advance_offer(current: OfferDocumentStatus, target: OfferDocumentStatus) -> bool:
    return _OFFER_PROGRESS[target] > _OFFER_PROGRESS[current]


def _require_staff(user: UserContext) -> None:
    if not is_staff(user):
        raise PermissionDeniedError("Only admins and underwriters can manage offers")


async def _get_offer(
    session: AsyncSession, user: UserContext, offer_id: int
) -> OfferDocument | None:
    stmt = (
        select(OfferDocument)
        .options(selectinload(OfferDocument.deal).selectinload(Deal.property))
        .where(OfferDocument.id == offer_id)
    )
    stmt = apply_data_scope(stmt, user.data_scope, join_to_deal=OfferDocument.deal)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def _advance_deal(
    session: AsyncSession, user: UserContext, deal: Deal, target: DealStatus, reason: str
) -> bool:
    """Move the deal if the pipeline allows it. Returns whether it moved."""
    current = deal.status
    if current == target:
        return False
    if target not in DealStatus.valid_transitions().get(current, frozenset()):
        logger.warning(
            "Deal %s: %s does not allow %s -> %s, leaving status unchanged",
            deal.id,
            reason,
            current.value,
            target.value,
        )
        return False
    deal.status = target
    log_activity(
        session,
        deal.id,
        user.user_id,
        ActivityType.STATUS_CHANGED,
        f"Status changed from {current.label} to {target.label} ({reason})",
        {"from": current.value, "to": target.value},
    )
    await notification.notify_status_change(session, deal, current, target, user.user_id)
    return True


async def list_offers(
    session: AsyncSession, user: UserContext, deal_id: int
) -> list[OfferDocument] | None:
    if await get_deal(session, user, deal_id) is None:
        return None
    result = await session.execute(
        select(OfferDocument)
        .where(OfferDocument.deal_id == deal_id)
        .order_by(OfferDocument.created_at.desc())
    )
    return list(result.unique().scalars().all())


async def create_offer(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    data: OfferCreate,
    meta: RequestMeta | None = None,
) -> OfferDocument | None:
    """Draft an offer. A deal still in underwriting moves to offer_prepared."""
    _require_staff(user)
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    if deal.status in DealStatus.terminal_statuses():
        raise DomainValidationError(f"Cannot prepare an offer on a {deal.status.value} deal")
    await ensure_profile(session, user)

    offer = OfferDocument(
        deal_id=deal_id,
        created_by=user.user_id,
        offer_amount=data.offer_amount,
        earnest_money=data.earnest_money,
        closing_date=data.closing_date,
        terms=data.terms,
        status=OfferDocumentStatus.DRAFT,
    )
    session.add(offer)
    deal.offer_price = data.offer_amount
    if deal.status == DealStatus.UNDERWRITING:
        await _advance_deal(session, user, deal, DealStatus.OFFER_PREPARED, "offer drafted")
    await session.flush()

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.CREATE,
        entity_type=EntityType.DEAL,
        entity_id=deal_id,
        new_values={"offer_id": offer.id, "offer_amount": float(data.offer_amount)},
        meta=meta,
        metadata={"field": "offer_document"},
    )
    await session.commit()
    await session.refresh(offer)
    return offer


async def send_offer(
    session: AsyncSession,
    user: UserContext,
    offer_id: int,
    data: OfferSend,
    meta: RequestMeta | None = None,
) -> tuple[OfferDocument, bool] | None:
    """Send a draft offer for signature.

    Returns ``(offer, is_mock)``; ``is_mock`` is true when no e-signature
    provider is configured and a placeholder envelope was recorded.
    """
    _require_staff(user)
    offer = await _get_offer(session, user, offer_id)
    if offer is None:
        return None
    if offer.status != OfferDocumentStatus.DRAFT:
        raise InvalidTransitionError(f"Offer is already {offer.status.value}")

    deal = offer.deal
    if not deal.seller_email:
        raise DomainValidationError("The seller has no email address on file")
    if deal.status not in (DealStatus.OFFER_PREPARED, DealStatus.OFFER_SENT):
        raise InvalidTransitionError(
            f"Offers can only be sent for deals in offer_prepared, not {deal.status.value}"
        )

    address = deal_address(deal)
    deal_number = deal.deal_number or format_deal_number(deal.id)
    document = docusign.render_offer_document(
        deal_number,
        address,
        float(offer.offer_amount),
        earnest_money=float(offer.earnest_money) if offer.earnest_money is not None else None,
        closing_date=offer.closing_date,
        terms=offer.terms,
    )
    envelope = await docusign.create_offer_envelope(
        deal_number=deal_number,
        property_address=address,
        offer_price=float(offer.offer_amount),
        seller_name=deal.seller_name,
        seller_email=deal.seller_email,
        buyer_name=data.buyer_name or user.name,
        buyer_email=str(data.buyer_email) if data.buyer_email else user.email,
        document=document,
        cc=[(c.name, str(c.email)) for c in data.cc],
    )

    offer.docusign_envelope_id = envelope.envelope_id
    offer.status = OfferDocumentStatus.SENT
    offer.sent_at = datetime.now(UTC)
    await _advance_deal(session, user, deal, DealStatus.OFFER_SENT, "offer sent")
    log_activity(
        session,
        deal.id,
        user.user_id,
        ActivityType.OFFER_SENT,
        f"Offer of ${float(offer.offer_amount):,.0f} sent to {deal.seller_name}",
        {"offer_id": offer.id, "envelope_id": envelope.envelope_id, "is_mock": envelope.is_mock},
    )
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.DEAL,
        entity_id=deal.id,
        new_values={"offer_id": offer.id, "envelope_id": envelope.envelope_id},
        meta=meta,
        metadata={"field": "offer_document"},
    )
    await session.commit()
    await session.refresh(offer)
    logger.info("Offer %s sent for deal %s (envelope %s)", offer.id, deal.id, envelope.envelope_id)
    return offer, envelope.is_mock


async def sync_offer_status(
    session: AsyncSession, user: UserContext, offer_id: int
) -> OfferDocument | None:
    """Pull the envelope status and carry it into the offer and the deal."""
    _require_staff(user)
    offer = await _get_offer(session, user, offer_id)
    if offer is None:
        return None
    if not offer.docusign_envelope_id:
        raise DomainValidationError("Offer has not been sent for signature")

    status = await docusign.get_envelope_status(offer.docusign_envelope_id)
    offer_status = map_offer_status(status.status)
    if offer_status is not None and can_advance_offer(offer.status, offer_status):
        offer.status = offer_status
        if offer_status == OfferDocumentStatus.SIGNED:
            offer.signed_at = status.completed_date_time or datetime.now(UTC)

    deal_status = docusign.map_envelope_status(status.status)
    if deal_status is not None:
        await _advance_deal(session, user, offer.deal, deal_status, f"envelope {status.status}")

    await session.commit()
    await session.refresh(offer)
    return offer


async def void_offer(
    session: AsyncSession,
    user: UserContext,
    offer_id: int,
    reason: str,
    meta: RequestMeta | None = None,
) -> OfferDocument | None:
    _require_staff(user)
    offer = await _get_offer(session, user, offer_id)
    if offer is None:
        return None
    if offer.status not in (OfferDocumentStatus.SENT, OfferDocumentStatus.VIEWED):
        raise InvalidTransitionError(f"Cannot void an offer that is {offer.status.value}")

    await docusign.void_envelope(offer.docusign_envelope_id, reason)
    offer.status = OfferDocumentStatus.EXPIRED
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.DEAL,
        entity_id=offer.deal_id,
        new_values={"offer_id": offer.id, "status": OfferDocumentStatus.EXPIRED.value},
        meta=meta,
        metadata={"field": "offer_document", "reason": reason},
    )
    await session.commit()
    await session.refresh(offer)
    return offer
