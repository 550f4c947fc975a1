# This project was developed with assistance from AI tools.
"""Underwriting records: one versioned evaluation per deal.

Saving runs the built-in calculator and the underwriter's own formulas, then
scores risk from the result. A record moves draft -> submitted ->
approved | rejected; saving a submitted or rejected record reopens it as a
draft, and approved records are locked.
"""

import logging

from db import Deal, UnderwritingRecord
from db.enums import (
    ActivityType,
    AuditAction,
    DealStatus,
    EntityType,
    UnderwritingStatus,
    UserRole,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.calculator import DealAnalysis
from ..schemas.risk import RiskInput
from ..schemas.underwriting import UnderwritingSave
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .calculator import analyze_deal, round_half_up
from .deal import get_deal
from .errors import InvalidTransitionError, PermissionDeniedError, transition_message
from .formula_engine import build_formula_context, evaluate_formula
from .formulas import load_formula_expressions
from .risk import calculate_risk_score
from .users import ensure_profile

logger = logging.getLogger(__name__)

_AUDITED_FIELDS = ("arv", "repair_estimate", "max_offer", "recommended_offer", "status", "version")


def _snapshot(record: UnderwritingRecord) -> dict:
    snap = {}
    for field in _AUDITED_FIELDS:
        value = getattr(record, field)
        if hasattr(value, "value"):
            value = value.value
        elif value is not None and not isinstance(value, int | str):
            value = float(value)
        snap[field] = value
    return snap


async def _get_record(session: AsyncSession, deal_id: int) -> UnderwritingRecord | None:
    result = await session.execute(
        select(UnderwritingRecord).where(UnderwritingRecord.deal_id == deal_id)
    )
    return result.unique().scalar_one_or_none()


async def get_underwriting(
    session: AsyncSession, user: UserContext, deal_id: int
) -> UnderwritingRecord | None:
    """The deal's underwriting, or None when the deal is out of scope or unevaluated."""
    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    return await _get_record(session, deal_id)


def _move(record: UnderwritingRecord, target: UnderwritingStatus) -> None:
    current = record.status or UnderwritingStatus.DRAFT
    allowed = UnderwritingStatus.valid_transitions().get(current, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(transition_message(current, target, allowed))
    record.status = target


async def save_underwriting(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    data: UnderwritingSave,
    meta: RequestMeta | None = None,
) -> tuple[UnderwritingRecord, DealAnalysis, dict[str, int]] | None:
    """Upsert the deal's underwriting and bump its version.

    Returns ``(record, analysis, formula_offers)`` or None for an unknown deal.
    """
    deal: Deal | None = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    await ensure_profile(session, user)

    form = data.form
    sqft = deal.property.sqft if deal.property is not None else None
    asking = float(deal.asking_price or 0)

    expressions = await load_formula_expressions(session, user.user_id)
    context = build_formula_context(
        arv=form.arv,
        repair_costs=form.repair_costs,
        holding_months=form.holding_months,
        monthly_holding_cost=form.monthly_holding_cost,
        buying_closing_costs=form.buying_closing_costs,
        selling_closing_costs=form.selling_closing_costs,
        target_profit_percent=form.target_profit_percent,
        buy_box_percent=form.buy_box_percent,
        asking_price=asking,
    )
    offers = {key: evaluate_formula(expr, context) for key, expr in expressions.items()}
    max_offer = offers["mao"]
    recommended = min(offers.values())

    if form.purchase_price is None:
        form = form.model_copy(update={"purchase_price": float(recommended)})
    analysis = analyze_deal(form, sqft)

    record = await _get_record(session, deal_id)
    is_new = record is None
    old_values = None
    if is_new:
        record = UnderwritingRecord(
            deal_id=deal_id,
            underwriter_id=user.user_id,
            status=UnderwritingStatus.DRAFT,
            version=1,
        )
        session.add(record)
    else:
        old_values = _snapshot(record)
        if record.status != UnderwritingStatus.DRAFT:
            _move(record, UnderwritingStatus.DRAFT)
        record.version = (record.version or 0) + 1
        record.underwriter_id = user.user_id

    record.arv = form.arv
    record.repair_estimate = form.repair_costs
    record.max_offer = max_offer
    record.recommended_offer = recommended
    record.profit_estimate = analysis.profit.profit
    record.inputs = form.model_dump(mode="json")
    if data.arv_comps is not None:
        record.arv_comps = data.arv_comps
    if data.repair_breakdown is not None:
        record.repair_breakdown = data.repair_breakdown
    if data.notes is not None:
        record.notes = data.notes

    risk = calculate_risk_score(
        RiskInput(
            asking_price=asking,
            arv=form.arv,
            max_offer=max_offer,
            rehab_cost=form.repair_costs,
            property_type=deal.property.property_type if deal.property is not None else "other",
            seller_motivation=deal.seller_motivation,
        )
    )
    record.risk_score = int(round_half_up(risk.overall_score))
    record.risk_factors = risk.model_dump(mode="json")

    if deal.status == DealStatus.SUBMITTED:
        deal.status = DealStatus.UNDERWRITING
        log_activity(
            session,
            deal_id,
            user.user_id,
            ActivityType.STATUS_CHANGED,
            f"Status changed from {DealStatus.SUBMITTED.label} to {DealStatus.UNDERWRITING.label}",
            {"from": DealStatus.SUBMITTED.value, "to": DealStatus.UNDERWRITING.value},
        )

    await session.flush()
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.CREATE if is_new else AuditAction.UPDATE,
        entity_type=EntityType.UNDERWRITING,
        entity_id=record.id,
        old_values=old_values,
        new_values=_snapshot(record),
        meta=meta,
        metadata={"deal_id": deal_id},
    )
    log_activity(
        session,
        deal_id,
        user.user_id,
        ActivityType.UNDERWRITING_SAVED,
        f"Underwriting saved (v{record.version}), MAO ${max_offer:,}",
        {"version": record.version, "max_offer": max_offer},
    )
    await session.commit()
    await session.refresh(record)
    logger.info("Underwriting for deal %s saved at version %s", deal_id, record.version)
    return record, analysis, offers


async def _review(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    target: UnderwritingStatus,
    notes: str | None,
    meta: RequestMeta | None,
) -> UnderwritingRecord | None:
    record = await get_underwriting(session, user, deal_id)
    if record is None:
        return None

    old_status = record.status
    _move(record, target)
    if notes:
        record.notes = f"{record.notes}\n\n{notes}" if record.notes else notes

    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.UNDERWRITING,
        entity_id=record.id,
        old_values={"status": old_status.value},
        new_values={"status": target.value},
        meta=meta,
        metadata={"deal_id": deal_id},
    )
    await session.commit()
    await session.refresh(record)
    logger.info("Underwriting %s for deal %s -> %s", record.id, deal_id, target.value)
    return record


async def submit_for_review(session, user, deal_id, notes=None, meta=None):
    return await _review(session, user, deal_id, UnderwritingStatus.SUBMITTED, notes, meta)


async def approve(session, user, deal_id, notes=None, meta=None):
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Only admins can approve underwriting")
    return await _review(session, user, deal_id, UnderwritingStatus.APPROVED, notes, meta)


async def reject(session, user, deal_id, notes=None, meta=None):
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Only admins can reject underwriting")
    return await _review(session, user, deal_id, UnderwritingStatus.REJECTED, notes, meta)
