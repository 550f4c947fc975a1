# This project was developed with assistance from AI tools.
"""Demo data seeding service.

Seeds profiles for every role plus five Texas deals across the pipeline,
their underwriting and one funded investment, so each persona has data to
explore immediately after deployment.

Simulated for demonstration purposes -- not real transactions.
"""

import json
import logging
from datetime import UTC, datetime

from db import (
    Attachment,
    Deal,
    DealActivity,
    DealComment,
    DemoDataManifest,
    InvestorFunding,
    Notification,
    OfferDocument,
    Profile,
    Property,
    UnderwritingRecord,
)
from db.enums import (
    ActivityType,
    AuditAction,
    EntityType,
    FundingStatus,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas.notification import NotificationPreferences
from ..audit import write_audit_log
from ..deal_number import format_deal_number
from .fixtures import (
    AGENT_ID,
    DEALS,
    PROFILES,
    SECOND_AGENT_ID,
    UNDERWRITER_ID,
    compute_config_hash,
)

logger = logging.getLogger(__name__)

_DEMO_AGENT_IDS = [AGENT_ID, SECOND_AGENT_ID]


async def _check_manifest(session: AsyncSession) -> DemoDataManifest | None:
    """Check if demo data has been seeded."""
    result = await session.execute(
        select(DemoDataManifest).order_by(DemoDataManifest.id.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def _clear_demo_data(session: AsyncSession) -> None:
    """Delete deals submitted by the demo agents and everything hanging off them.

    Audit entries are immutable and stay in place.
    """
    result = await session.execute(
        select(Deal.id, Deal.property_id).where(Deal.agent_id.in_(_DEMO_AGENT_IDS))
    )
    rows = result.all()
    deal_ids = [r[0] for r in rows]
    property_ids = [r[1] for r in rows]

    if deal_ids:
        # Child rows first (no FK cascade at the SQL level)
        for model in (
            DealActivity,
            DealComment,
            Attachment,
            InvestorFunding,
            OfferDocument,
            UnderwritingRecord,
            Notification,
        ):
            await session.execute(delete(model).where(model.deal_id.in_(deal_ids)))
        await session.execute(delete(Deal).where(Deal.id.in_(deal_ids)))
        await session.execute(delete(Property).where(Property.id.in_(property_ids)))

    await session.execute(delete(DemoDataManifest))
    logger.info("Cleared existing demo data (%d deals)", len(deal_ids))


async def _upsert_profiles(session: AsyncSession) -> int:
    """Create missing demo profiles and reset the role of existing ones."""
    result = await session.execute(
        select(Profile).where(Profile.id.in_([p["id"] for p in PROFILES]))
    )
    existing = {p.id: p for p in result.scalars().all()}
    for p_def in PROFILES:
        profile = existing.get(p_def["id"])
        if profile is None:
            session.add(
                Profile(
                    **p_def,
                    is_active=True,
                    notification_preferences=NotificationPreferences().model_dump(),
                )
            )
        else:
            profile.role = p_def["role"]
            profile.is_active = True
    await session.flush()
    return len(PROFILES)


async def _seed_deals(session: AsyncSession) -> tuple[list[Deal], int, int]:
    """Returns (deals, underwriting_count, funding_count)."""
    deals = []
    underwriting_count = 0
    funding_count = 0

    for d_def in DEALS:
        prop = Property(**d_def["property"])
        session.add(prop)
        await session.flush()  # Get prop.id

        deal = Deal(
            property_id=prop.id,
            agent_id=d_def["agent_id"],
            assigned_to=d_def.get("assigned_to"),
            investor_id=d_def.get("investor_id"),
            status=d_def["status"],
            priority=d_def["priority"],
            asking_price=d_def["asking_price"],
            offer_price=d_def.get("offer_price"),
            final_price=d_def.get("final_price"),
            seller_name=d_def["seller_name"],
            seller_phone=d_def["seller_phone"],
            seller_email=d_def["seller_email"],
            seller_motivation=d_def["seller_motivation"],
            notes=d_def["notes"],
            tags=[],
            submitted_at=d_def["submitted_at"],
            closed_at=d_def.get("closed_at"),
        )
        session.add(deal)
        await session.flush()  # Get deal.id
        deal.deal_number = format_deal_number(deal.id)

        session.add(
            DealActivity(
                deal_id=deal.id,
                user_id=d_def["agent_id"],
                activity_type=ActivityType.CREATED,
                description=f"Deal submitted for {prop.address}",
                extra={"source": "demo_seed"},
            )
        )

        uw_def = d_def.get("underwriting")
        if uw_def is not None:
            session.add(
                UnderwritingRecord(
                    deal_id=deal.id,
                    underwriter_id=d_def.get("assigned_to") or UNDERWRITER_ID,
                    version=1,
                    **uw_def,
                )
            )
            underwriting_count += 1

        f_def = d_def.get("funding")
        if f_def is not None:
            session.add(
                InvestorFunding(
                    deal_id=deal.id,
                    status=FundingStatus.FUNDED,
                    approved_at=d_def["submitted_at"],
                    funded_at=d_def.get("closed_at"),
                    **f_def,
                )
            )
            funding_count += 1

        deals.append(deal)

    return deals, underwriting_count, funding_count


async def seed_demo_data(session: AsyncSession, force: bool = False) -> dict:
    """Seed demo data. Returns summary dict.

    Args:
        session: Database session.
        force: If True, clear and re-seed even if already seeded.
    """
    manifest = await _check_manifest(session)
    if manifest and not force:
        return {
            "status": "already_seeded",
            "seeded_at": manifest.seeded_at.isoformat(),
            "config_hash": manifest.config_hash,
        }

    if manifest and force:
        await _clear_demo_data(session)

    profile_count = await _upsert_profiles(session)
    deals, underwriting_count, funding_count = await _seed_deals(session)

    config_hash = compute_config_hash()
    summary = {
        "profiles": profile_count,
        "deals": len(deals),
        "underwriting_records": underwriting_count,
        "funding_requests": funding_count,
    }
    session.add(DemoDataManifest(config_hash=config_hash, summary=json.dumps(summary)))

    await write_audit_log(
        session,
        user_id="system",
        action=AuditAction.CREATE,
        entity_type=EntityType.SETTINGS,
        new_values=summary,
        metadata={"event": "demo_data_seeded", "deal_ids": [d.id for d in deals]},
    )

    await session.commit()
    logger.info("Demo data seeded: %s", summary)

    return {
        "status": "seeded",
        "seeded_at": datetime.now(UTC).isoformat(),
        "config_hash": config_hash,
        **summary,
    }


async def get_seed_status(session: AsyncSession) -> dict:
    """Check if demo data has been seeded."""
    manifest = await _check_manifest(session)
    if manifest is None:
        return {"seeded": False}
    return {
        "seeded": True,
        "seeded_at": manifest.seeded_at.isoformat(),
        "config_hash": manifest.config_hash,
        "summary": json.loads(manifest.summary) if manifest.summary else None,
    }
