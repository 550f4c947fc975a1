# This project was developed with assistance from AI tools.
"""Bulk operations over selected deals.

Each operation touches every requested deal independently, collects the
per-deal failures and writes a single ``bulk_*`` audit entry listing the
deals it actually changed.
"""

import csv
import io
import logging
from datetime import UTC, datetime

from botocore.exceptions import ClientError
from db import Attachment, Deal, Property
from db.enums import (
    ActivityType,
    AuditAction,
    DealStatus,
    EntityType,
    NotificationType,
    PropertyType,
    UserRole,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.bulk import BulkFailure, BulkResult
from . import notification
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .errors import DomainValidationError, PermissionDeniedError
from .storage import get_storage_service
from .users import get_profile

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Deal Number",
    "Status",
    "Address",
    "City",
    "State",
    "ZIP",
    "Property Type",
    "Beds",
    "Baths",
    "Sqft",
    "Year Built",
    "Asking Price",
    "Offer Price",
    "Seller Name",
    "Seller Phone",
    "Seller Email",
    "Seller Motivation",
    "Agent",
    "Assigned To",
    "Submitted Date",
    "Last Updated",
    "Notes",
]

_PROPERTY_TYPE_LABELS = {
    PropertyType.MULTI_FAMILY: "Multi-Family",
}


async def _load_deals(session: AsyncSession, deal_ids: list[int]) -> dict[int, Deal]:
    stmt = (
        select(Deal)
        .options(selectinload(Deal.property), selectinload(Deal.agent), selectinload(Deal.assignee))
        .where(Deal.id.in_(deal_ids))
        .order_by(Deal.id)
    )
    result = await session.execute(stmt)
    return {d.id: d for d in result.unique().scalars().all()}


def _missing(deal_ids: list[int], found: dict[int, Deal]) -> list[BulkFailure]:
    return [BulkFailure(deal_id=i, reason="Deal not found") for i in deal_ids if i not in found]


async def _audit(session, user, action, changed: list[int], meta, values: dict | None = None):
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=action,
        entity_type=EntityType.DEAL,
        entity_id=None,
        new_values=values,
        meta=meta,
        metadata={"deal_ids": changed, "count": len(changed)},
    )


async def bulk_update_status(
    session: AsyncSession,
    user: UserContext,
    deal_ids: list[int],
    new_status: DealStatus,
    meta: RequestMeta | None = None,
) -> BulkResult:
    """Move each deal if the pipeline allows it; others are reported as failed."""
    deals = await _load_deals(session, deal_ids)
    errors = _missing(deal_ids, deals)
    changed: list[int] = []
    transitions = DealStatus.valid_transitions()

    for deal in deals.values():
        old_status = deal.status
        if old_status == new_status:
            changed.append(deal.id)
            continue
        if new_status not in transitions.get(old_status, frozenset()):
            errors.append(
                BulkFailure(
                    deal_id=deal.id,
                    reason=f"Cannot transition from '{old_status.value}' to '{new_status.value}'",
                )
            )
            continue
        deal.status = new_status
        if new_status == DealStatus.CLOSED:
            deal.closed_at = datetime.now(UTC)
        log_activity(
            session,
            deal.id,
            user.user_id,
            ActivityType.STATUS_CHANGED,
            f"Status changed from {old_status.label} to {new_status.label} (bulk)",
            {"from": old_status.value, "to": new_status.value},
        )
        await notification.notify_status_change(session, deal, old_status, new_status, user.user_id)
        changed.append(deal.id)

    if changed:
        await _audit(session, user, AuditAction.BULK_UPDATE, changed, meta, {"status": new_status.value})
    await session.commit()
    logger.info("Bulk status -> %s: %d ok, %d failed", new_status.value, len(changed), len(errors))
    return BulkResult(succeeded=len(changed), failed=len(errors), errors=errors)


async def bulk_assign(
    session: AsyncSession,
    user: UserContext,
    deal_ids: list[int],
    assignee_id: str,
    meta: RequestMeta | None = None,
) -> BulkResult:
    assignee = await get_profile(session, assignee_id)
    if (
        assignee is None
        or not assignee.is_active
        or assignee.role not in (UserRole.ADMIN, UserRole.UNDERWRITER)
    ):
        raise DomainValidationError("Deals can only be assigned to active underwriters or admins")

    deals = await _load_deals(session, deal_ids)
    errors = _missing(deal_ids, deals)
    changed: list[int] = []
    for deal in deals.values():
        deal.assigned_to = assignee_id
        log_activity(
            session,
            deal.id,
            user.user_id,
            ActivityType.ASSIGNED,
            f"Assigned to {assignee.full_name or assignee.email} (bulk)",
        )
        changed.append(deal.id)

    if changed:
        await _audit(session, user, AuditAction.BULK_ASSIGN, changed, meta, {"assigned_to": assignee_id})
        if assignee_id != user.user_id:
            notification.create_notification(
                session,
                user_id=assignee_id,
                type=NotificationType.ASSIGNMENT,
                title="Deals Assigned",
                message=f"{len(changed)} deal(s) have been assigned to you for review.",
                action_url="/dashboard/deals",
            )
    await session.commit()
    return BulkResult(succeeded=len(changed), failed=len(errors), errors=errors)


async def bulk_set_priority(
    session: AsyncSession,
    user: UserContext,
    deal_ids: list[int],
    priority,
    meta: RequestMeta | None = None,
) -> BulkResult:
    deals = await _load_deals(session, deal_ids)
    errors = _missing(deal_ids, deals)
    changed: list[int] = []
    for deal in deals.values():
        if deal.priority != priority:
            deal.priority = priority
            log_activity(
                session,
                deal.id,
                user.user_id,
                ActivityType.PRIORITY_CHANGED,
                f"Priority changed to {priority.value} (bulk)",
            )
        changed.append(deal.id)

    if changed:
        await _audit(session, user, AuditAction.BULK_UPDATE, changed, meta, {"priority": priority.value})
    await session.commit()
    return BulkResult(succeeded=len(changed), failed=len(errors), errors=errors)


async def bulk_delete(
    session: AsyncSession,
    user: UserContext,
    deal_ids: list[int],
    meta: RequestMeta | None = None,
) -> BulkResult:
    """Delete deals, their properties and their stored attachments. Admin only."""
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Only admins can bulk delete deals")

    deals = await _load_deals(session, deal_ids)
    errors = _missing(deal_ids, deals)
    changed: list[int] = []
    snapshots = {}
    property_ids = []
    object_keys: list[str] = []
    if deals:
        result = await session.execute(
            select(Attachment.file_path).where(Attachment.deal_id.in_(list(deals)))
        )
        object_keys = list(result.scalars().all())

    for deal in deals.values():
        snapshots[str(deal.id)] = {
            "deal_number": deal.deal_number,
            "status": deal.status.value,
            "address": deal.property.address if deal.property else None,
        }
        property_ids.append(deal.property_id)
        await session.delete(deal)
        changed.append(deal.id)

    if changed:
        await session.flush()
        await session.execute(delete(Property).where(Property.id.in_(property_ids)))
        await write_audit_log(
            session,
            user_id=user.user_id,
            action=AuditAction.BULK_DELETE,
            entity_type=EntityType.DEAL,
            old_values=snapshots,
            meta=meta,
            metadata={"deal_ids": changed, "count": len(changed)},
        )
    await session.commit()

    if object_keys:
        storage = get_storage_service()
        for key in object_keys:
            try:
                await storage.delete_file(key)
            except ClientError:
                logger.warning("Could not remove stored object %s", key, exc_info=True)
    logger.info("Bulk delete by %s: %d deals", user.user_id, len(changed))
    return BulkResult(succeeded=len(changed), failed=len(errors), errors=errors)


def _money(value) -> str:
    return f"${float(value):,.0f}" if value else ""


def _person(profile) -> str:
    if profile is None:
        return ""
    return profile.full_name or profile.email or ""


def _date(value) -> str:
    return value.strftime("%Y-%m-%d") if value else ""


def _row(deal: Deal) -> list:
    prop = deal.property
    ptype = prop.property_type if prop else None
    ptype_label = (
        _PROPERTY_TYPE_LABELS.get(ptype, ptype.value.replace("_", " ").title()) if ptype else ""
    )
    return [
        deal.deal_number or "",
        deal.status.label,
        prop.address if prop else "",
        prop.city if prop else "",
        prop.state if prop else "",
        prop.zip if prop else "",
        ptype_label,
        prop.bedrooms if prop and prop.bedrooms is not None else "",
        prop.bathrooms if prop and prop.bathrooms is not None else "",
        f"{prop.sqft:,}" if prop and prop.sqft else "",
        prop.year_built if prop and prop.year_built else "",
        _money(deal.asking_price),
        _money(deal.offer_price),
        deal.seller_name or "",
        deal.seller_phone or "",
        deal.seller_email or "",
        deal.seller_motivation or "",
        _person(deal.agent),
        _person(deal.assignee),
        _date(deal.submitted_at),
        _date(deal.updated_at),
        deal.notes or "",
    ]


def deals_to_csv(deals: list[Deal]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for deal in deals:
        writer.writerow(_row(deal))
    return buffer.getvalue()


async def bulk_export(
    session: AsyncSession,
    user: UserContext,
    deal_ids: list[int],
    meta: RequestMeta | None = None,
) -> str:
    """CSV of the selected deals, in id order."""
    deals = await _load_deals(session, deal_ids)
    content = deals_to_csv(list(deals.values()))
    await _audit(session, user, AuditAction.BULK_EXPORT, list(deals), meta)
    await session.commit()
    return content
