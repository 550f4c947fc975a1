# This project was developed with assistance from AI tools.
"""Response builders and request helpers shared by the route modules."""

from db import Deal, InvestorFunding, Profile, Property, UnderwritingRecord
from fastapi import BackgroundTasks, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.deal import DealResponse, PropertyResponse, UnderwritingSummary, UserSummary
from ..schemas.funding import FundingDealSummary, FundingResponse
from ..services import notification
from ..services.audit import RequestMeta


def request_meta(request: Request) -> RequestMeta:
    """Client address and user agent for audit entries.

    The address is the connection peer. Forwarded headers are applied upstream
    by the proxy-headers middleware, and only for trusted proxies.
    """
    ip = request.client.host if request.client is not None else None
    return RequestMeta(ip_address=ip, user_agent=request.headers.get("user-agent"))


def send_notifications_later(background_tasks: BackgroundTasks, session: AsyncSession) -> None:
    """Deliver the session's queued email / SMS / Slack messages after the response."""
    outbox = notification.take_outbox(session)
    if outbox:
        background_tasks.add_task(notification.send_outbox, outbox)


def user_summary(profile: Profile | None) -> UserSummary | None:
    if profile is None:
        return None
    return UserSummary(id=profile.id, full_name=profile.full_name, email=profile.email)


def _property_response(prop: Property | None) -> PropertyResponse | None:
    if prop is None:
        return None
    return PropertyResponse(
        id=prop.id,
        address=prop.address,
        city=prop.city,
        state=prop.state,
        zip=prop.zip,
        county=prop.county,
        property_type=prop.property_type,
        bedrooms=prop.bedrooms,
        bathrooms=prop.bathrooms,
        sqft=prop.sqft,
        lot_size=prop.lot_size,
        year_built=prop.year_built,
        latitude=prop.latitude,
        longitude=prop.longitude,
    )


def build_deal_response(deal: Deal) -> DealResponse:
    """DealResponse from the ORM object with property and people resolved."""
    return DealResponse(
        id=deal.id,
        deal_number=deal.deal_number,
        status=deal.status,
        status_label=deal.status.label,
        priority=deal.priority,
        agent_id=deal.agent_id,
        assigned_to=deal.assigned_to,
        investor_id=deal.investor_id,
        asking_price=deal.asking_price,
        offer_price=deal.offer_price,
        final_price=deal.final_price,
        seller_name=deal.seller_name,
        seller_phone=deal.seller_phone,
        seller_email=deal.seller_email,
        seller_motivation=deal.seller_motivation,
        notes=deal.notes,
        tags=deal.tags or [],
        submitted_at=deal.submitted_at,
        updated_at=deal.updated_at,
        closed_at=deal.closed_at,
        property=_property_response(deal.property),
        agent=user_summary(deal.agent),
        assignee=user_summary(deal.assignee),
    )


def build_underwriting_summary(record: UnderwritingRecord | None) -> UnderwritingSummary | None:
    if record is None:
        return None
    return UnderwritingSummary(
        id=record.id,
        status=record.status.value,
        version=record.version,
        arv=record.arv,
        repair_estimate=record.repair_estimate,
        max_offer=record.max_offer,
        recommended_offer=record.recommended_offer,
        risk_score=record.risk_score,
        updated_at=record.updated_at,
    )


def build_funding_response(funding: InvestorFunding, *, include_deal: bool = True) -> FundingResponse:
    deal_summary = None
    deal = funding.deal if include_deal else None
    if deal is not None:
        prop = deal.property
        deal_summary = FundingDealSummary(
            id=deal.id,
            deal_number=deal.deal_number,
            status=deal.status.value,
            address=prop.address if prop else None,
            city=prop.city if prop else None,
            state=prop.state if prop else None,
            asking_price=deal.asking_price,
            offer_price=deal.offer_price,
        )
    return FundingResponse(
        id=funding.id,
        deal_id=funding.deal_id,
        investor_id=funding.investor_id,
        status=funding.status,
        requested_amount=funding.requested_amount,
        approved_amount=funding.approved_amount,
        funded_amount=funding.funded_amount,
        interest_rate=funding.interest_rate,
        term_months=funding.term_months,
        notes=funding.notes,
        requested_at=funding.requested_at,
        approved_at=funding.approved_at,
        funded_at=funding.funded_at,
        investor=user_summary(funding.investor),
        deal=deal_summary,
    )
