# This project was developed with assistance from AI tools.
"""In-app notifications and deal event fan-out.

``notify_*`` helpers are called by the deal, comment and funding services
after a change. Each one records in-app notifications on the caller's
session (the caller commits) and queues email / SMS / Slack messages for
:mod:`.channels` in the session's outbox, honouring each recipient's
preferences. Routes hand the outbox to :func:`send_outbox` as a background
task once the transaction has committed, so no third-party call runs while
the audit chain lock is held.
"""

import html
import logging
from datetime import UTC, datetime

from db import Deal, InvestorFunding, Notification, Profile
from db.enums import STATUS_LABELS, DealStatus, NotificationType, UserRole
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from ..schemas.notification import PREFERENCE_FOR_TYPE, NotificationPreferences
from . import channels

logger = logging.getLogger(__name__)

LIST_LIMIT = 20
COMMENT_PREVIEW_CHARS = 100
OUTBOX_KEY = "notification_outbox"


# ---------------------------------------------------------------------------
# In-app CRUD
# ---------------------------------------------------------------------------


def create_notification(
    session: AsyncSession,
    *,
    user_id: str,
    type: NotificationType,
    title: str,
    message: str,
    deal_id: int | None = None,
    action_url: str | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        deal_id=deal_id,
        action_url=action_url,
        is_read=False,
    )
    session.add(notification)
    return notification


async def list_notifications(
    session: AsyncSession,
    user: UserContext,
    limit: int = LIST_LIMIT,
) -> tuple[list[Notification], int]:
    """Newest notifications for the user plus their total unread count."""
    stmt = (
        select(Notification)
        .where(Notification.user_id == user.user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    items = list(result.unique().scalars().all())

    unread_result = await session.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user.user_id,
            Notification.is_read.is_(False),
        )
    )
    return items, unread_result.scalar() or 0


async def mark_read(session: AsyncSession, user: UserContext, notification_id: int) -> bool:
    """Returns False when the notification does not belong to the user."""
    result = await session.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user.user_id)
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    await session.commit()
    return bool(result.rowcount)


async def mark_all_read(session: AsyncSession, user: UserContext) -> int:
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user.user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=datetime.now(UTC))
    )
    await session.commit()
    return result.rowcount or 0


async def delete_notification(
    session: AsyncSession, user: UserContext, notification_id: int
) -> bool:
    result = await session.execute(
        delete(Notification).where(
            Notification.id == notification_id, Notification.user_id == user.user_id
        )
    )
    await session.commit()
    return bool(result.rowcount)


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------


def get_preferences(profile: Profile | None) -> NotificationPreferences:
    raw = getattr(profile, "notification_preferences", None)
    if isinstance(raw, dict):
        return NotificationPreferences.model_validate(raw)
    return NotificationPreferences()


def _wants(profile: Profile, ntype: NotificationType) -> NotificationPreferences | None:
    """Preferences if the profile accepts this category, else None."""
    prefs = get_preferences(profile)
    if not getattr(prefs, PREFERENCE_FOR_TYPE[ntype]):
        return None
    return prefs


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def format_status(status: DealStatus | str) -> str:
    try:
        return STATUS_LABELS[DealStatus(status)]
    except ValueError:
        return str(status)


def deal_address(deal: Deal) -> str:
    prop = deal.property
    if prop is None:
        return f"Deal {deal.id}"
    return f"{prop.address}, {prop.city}, {prop.state}"


def short_address(deal: Deal) -> str:
    return deal.property.address if deal.property is not None else f"Deal {deal.id}"


def deal_url(deal_id: int) -> str:
    return f"/dashboard/deals/{deal_id}"


def comment_preview(content: str) -> str:
    if len(content) > COMMENT_PREVIEW_CHARS:
        return content[:COMMENT_PREVIEW_CHARS] + "..."
    return content


def _format_money(value) -> str:
    return f"${float(value or 0):,.0f}"


def _email_html(title: str, greeting_name: str | None, intro: str, rows: dict, deal_id: int) -> str:
    greeting = f"Hi {html.escape(greeting_name)}," if greeting_name else "Hi,"
    details = "".join(
        f"<p style=\"margin: 4px 0;\"><strong>{html.escape(k)}:</strong> {html.escape(str(v))}</p>"
        for k, v in rows.items()
    )
    link = f"{settings.APP_URL}{deal_url(deal_id)}"
    return (
        '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h2>{html.escape(title)}</h2><p>{greeting}</p><p>{html.escape(intro)}</p>"
        f'<div style="background: #f3f4f6; padding: 16px; border-radius: 8px;">{details}</div>'
        f'<p><a href="{link}">View Deal Details</a></p></div>'
    )


def _queue(session: AsyncSession, send, *args) -> None:
    session.info.setdefault(OUTBOX_KEY, []).append((send, args))


def take_outbox(session: AsyncSession) -> list[tuple]:
    """Remove and return the messages queued on this session."""
    return session.info.pop(OUTBOX_KEY, [])


async def send_outbox(outbox: list[tuple]) -> None:
    for send, args in outbox:
        await send(*args)


def _deliver(
    session: AsyncSession,
    profile: Profile,
    ntype: NotificationType,
    subject: str,
    body_html: str,
    sms_text: str | None = None,
) -> None:
    """Queue one notification for the recipient's enabled channels."""
    prefs = _wants(profile, ntype)
    if prefs is None:
        return
    if prefs.email and profile.email:
        _queue(session, channels.send_email, profile.email, subject, body_html)
    if prefs.sms and sms_text and profile.phone:
        _queue(session, channels.send_sms, profile.phone, sms_text)


async def _get_profile(session: AsyncSession, user_id: str | None) -> Profile | None:
    if not user_id:
        return None
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    return result.unique().scalar_one_or_none()


async def _get_staff(session: AsyncSession) -> list[Profile]:
    """Active admins and underwriters."""
    result = await session.execute(
        select(Profile).where(
            Profile.role.in_([UserRole.ADMIN, UserRole.UNDERWRITER]),
            Profile.is_active.is_(True),
        )
    )
    return list(result.unique().scalars().all())


# ---------------------------------------------------------------------------
# Deal events
# ---------------------------------------------------------------------------


async def notify_status_change(
    session: AsyncSession,
    deal: Deal,
    old_status: DealStatus,
    new_status: DealStatus,
    actor_id: str | None = None,
) -> None:
    """Tell the agent (and assignee, unless they made the change) about a status move."""
    old_label, new_label = format_status(old_status), format_status(new_status)
    address = deal_address(deal)

    recipients = [deal.agent_id]
    if deal.assigned_to and deal.assigned_to not in (deal.agent_id, actor_id):
        recipients.append(deal.assigned_to)

    for user_id in recipients:
        create_notification(
            session,
            user_id=user_id,
            type=NotificationType.STATUS_CHANGE,
            title="Deal Status Updated",
            message=(
                f"Deal at {short_address(deal)} has been updated from "
                f"{old_label} to {new_label}."
            ),
            deal_id=deal.id,
            action_url=deal_url(deal.id),
        )
        profile = await _get_profile(session, user_id)
        if profile is not None:
            _deliver(
                session,
                profile,
                NotificationType.STATUS_CHANGE,
                f"Deal Status Updated: {address}",
                _email_html(
                    "Deal Status Updated",
                    profile.full_name,
                    "The status of your deal has been updated:",
                    {"Property": address, "Status": f"{old_label} -> {new_label}"},
                    deal.id,
                ),
                sms_text=f"DealFlow: {short_address(deal)} is now {new_label}.",
            )

    _queue(
        session,
        channels.send_slack,
        f"*Deal Status Update*\nProperty: {address}\nStatus: {old_label} -> *{new_label}*",
    )


async def notify_assignment(session: AsyncSession, deal: Deal, assignee: Profile) -> None:
    address = deal_address(deal)
    create_notification(
        session,
        user_id=assignee.id,
        type=NotificationType.ASSIGNMENT,
        title="New Deal Assigned",
        message=f"A deal at {short_address(deal)} has been assigned to you for review.",
        deal_id=deal.id,
        action_url=deal_url(deal.id),
    )
    _deliver(
        session,
        assignee,
        NotificationType.ASSIGNMENT,
        f"Deal Assigned to You: {address}",
        _email_html(
            "Deal Assigned to You",
            assignee.full_name,
            "A deal has been assigned to you for review:",
            {"Property": address},
            deal.id,
        ),
        sms_text=f"DealFlow: {short_address(deal)} was assigned to you.",
    )
    _queue(
        session,
        channels.send_slack,
        f"*Deal Assigned*\nProperty: {address}\n"
        f"Assigned to: {assignee.full_name or assignee.email}",
    )


async def notify_new_deal(session: AsyncSession, deal: Deal, agent_name: str | None) -> None:
    """Fan a new submission out to every active admin and underwriter."""
    address = deal_address(deal)
    submitted_by = agent_name or "Agent"
    asking = _format_money(deal.asking_price)

    for staff in await _get_staff(session):
        create_notification(
            session,
            user_id=staff.id,
            type=NotificationType.NEW_DEAL,
            title="New Deal Submitted",
            message=(
                f"New deal at {short_address(deal)} submitted by {submitted_by}. "
                f"Asking price: {asking}."
            ),
            deal_id=deal.id,
            action_url=deal_url(deal.id),
        )
        _deliver(
            session,
            staff,
            NotificationType.NEW_DEAL,
            f"New Deal Submitted: {address}",
            _email_html(
                "New Deal Submitted",
                staff.full_name,
                "A new deal has been submitted and is ready for review:",
                {"Property": address, "Asking Price": asking, "Submitted by": submitted_by},
                deal.id,
            ),
        )

    _queue(
        session,
        channels.send_slack,
        f"*New Deal Submitted*\nProperty: {address}\nAsking Price: {asking}\n"
        f"Submitted by: {submitted_by}",
    )


async def notify_comment(
    session: AsyncSession,
    deal: Deal,
    commenter: UserContext,
    content: str,
) -> list[str]:
    """Notify the deal's agent and assignee, never the commenter.

    Returns the notified user ids.
    """
    recipients: list[str] = []
    for user_id in (deal.agent_id, deal.assigned_to):
        if user_id and user_id != commenter.user_id and user_id not in recipients:
            recipients.append(user_id)

    preview = comment_preview(content)
    for user_id in recipients:
        create_notification(
            session,
            user_id=user_id,
            type=NotificationType.COMMENT,
            title="New Comment on Deal",
            message=f'{commenter.display_name} commented on {short_address(deal)}: "{preview}"',
            deal_id=deal.id,
            action_url=deal_url(deal.id),
        )
        profile = await _get_profile(session, user_id)
        if profile is not None:
            _deliver(
                session,
                profile,
                NotificationType.COMMENT,
                f"New Comment on Deal: {deal_address(deal)}",
                _email_html(
                    "New Comment on Deal",
                    profile.full_name,
                    f"{commenter.display_name} commented:",
                    {"Property": deal_address(deal), "Comment": preview},
                    deal.id,
                ),
            )
    return recipients


async def notify_funding_request(
    session: AsyncSession,
    deal: Deal,
    funding: InvestorFunding,
    investor_name: str | None,
) -> None:
    """Notify the deal's assignee and every admin about a new funding request."""
    recipients: list[Profile] = []
    seen: set[str] = set()
    for staff in await _get_staff(session):
        if staff.role == UserRole.ADMIN or staff.id == deal.assigned_to:
            if staff.id not in seen:
                recipients.append(staff)
                seen.add(staff.id)

    amount = _format_money(funding.requested_amount)
    for profile in recipients:
        create_notification(
            session,
            user_id=profile.id,
            type=NotificationType.FUNDING_REQUEST,
            title="New Funding Request",
            message=(
                f"{investor_name or 'An investor'} requested to fund {short_address(deal)} "
                f"for {amount}."
            ),
            deal_id=deal.id,
            action_url=deal_url(deal.id),
        )
        _deliver(
            session,
            profile,
            NotificationType.FUNDING_REQUEST,
            f"New Funding Request: {deal_address(deal)}",
            _email_html(
                "New Funding Request",
                profile.full_name,
                "An investor has requested to fund a deal:",
                {"Property": deal_address(deal), "Requested": amount},
                deal.id,
            ),
        )


async def notify_funding_update(
    session: AsyncSession,
    deal: Deal,
    funding: InvestorFunding,
) -> None:
    status_label = funding.status.value.replace("_", " ").title()
    create_notification(
        session,
        user_id=funding.investor_id,
        type=NotificationType.FUNDING_UPDATE,
        title="Funding Request Updated",
        message=f"Your funding request for {short_address(deal)} is now {status_label}.",
        deal_id=deal.id,
        action_url=deal_url(deal.id),
    )
    profile = await _get_profile(session, funding.investor_id)
    if profile is not None:
        _deliver(
            session,
            profile,
            NotificationType.FUNDING_UPDATE,
            f"Funding Request Updated: {deal_address(deal)}",
            _email_html(
                "Funding Request Updated",
                profile.full_name,
                "There is an update on your funding request:",
                {"Property": deal_address(deal), "Status": status_label},
                deal.id,
            ),
            sms_text=f"DealFlow: funding for {short_address(deal)} is {status_label}.",
        )
