# This project was developed with assistance from AI tools.
"""Notification helpers and outbound channel tests."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from db.enums import DealStatus, NotificationType, UserRole

from src.core.config import settings
from src.schemas.auth import UserContext
from src.services import channels
from src.services.notification import (
    _deliver,
    _wants,
    comment_preview,
    deal_address,
    format_status,
    get_preferences,
    notify_comment,
    notify_status_change,
    send_outbox,
    short_address,
    take_outbox,
)

from .functional.data_factory import make_deal_submitted
from .functional.mock_db import make_mock_session


def _mock_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)


def _profile(prefs=None, email="maria@dealflow.test", phone="512-555-0100"):
    p = MagicMock()
    p.notification_preferences = prefs
    p.email = email
    p.phone = phone
    p.full_name = "Maria Lopez"
    return p


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class TestChannels:
    async def test_unconfigured_channels_are_skipped(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", None)
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", None)
        monkeypatch.setattr(settings, "SLACK_WEBHOOK_URL", None)

        assert await channels.send_email("a@b.co", "Hi", "<p>Hi</p>") is True
        assert await channels.send_sms("5125550100", "Hi") is True
        assert await channels.send_slack("Hi") is True

    async def test_email_posts_to_resend(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", "re_key")
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["authorization"]
            captured["url"] = str(request.url)
            return httpx.Response(200, json={"id": "email-1"})

        _mock_transport(monkeypatch, handler)

        assert await channels.send_email("a@b.co", "Hi", "<p>Hi</p>") is True
        assert captured == {"auth": "Bearer re_key", "url": channels.RESEND_URL}

    async def test_email_rejected_returns_false(self, monkeypatch):
        monkeypatch.setattr(settings, "RESEND_API_KEY", "re_key")
        _mock_transport(monkeypatch, lambda request: httpx.Response(422, text="bad"))

        assert await channels.send_email("a@b.co", "Hi", "<p>Hi</p>") is False

    async def test_sms_unreachable_returns_false(self, monkeypatch):
        monkeypatch.setattr(settings, "TWILIO_ACCOUNT_SID", "AC1")
        monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "tok")
        monkeypatch.setattr(settings, "TWILIO_PHONE_NUMBER", "+15125550000")

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        _mock_transport(monkeypatch, handler)

        assert await channels.send_sms("5125550100", "Hi") is False

    async def test_slack_includes_channel(self, monkeypatch):
        monkeypatch.setattr(settings, "SLACK_WEBHOOK_URL", "https://hooks.slack.test/x")
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200, text="ok")

        _mock_transport(monkeypatch, handler)

        assert await channels.send_slack("New deal", channel="#deals") is True
        assert b'"channel":"#deals"' in bodies[0].replace(b" ", b"")


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_comment_preview_truncates(self):
        assert comment_preview("x" * 150) == "x" * 100 + "..."
        assert comment_preview("short") == "short"

    @pytest.mark.parametrize(
        "status,label",
        [("offer_sent", "Offer Sent"), ("needs_info", "Needs Info"), ("mystery", "mystery")],
    )
    def test_format_status(self, status, label):
        assert format_status(status) == label

    def test_addresses(self):
        deal = make_deal_submitted()
        assert deal_address(deal) == "1420 Elm St, Austin, TX"
        assert short_address(deal) == "1420 Elm St"

    def test_address_without_property(self):
        deal = make_deal_submitted()
        deal.property = None
        assert deal_address(deal) == "Deal 101"


class TestPreferences:
    def test_defaults_when_unset(self):
        prefs = get_preferences(_profile(prefs=None))
        assert prefs.email is True
        assert prefs.comments is True

    def test_stored_values_win(self):
        prefs = get_preferences(_profile(prefs={"email": False, "comments": False}))
        assert prefs.email is False
        assert prefs.comments is False

    def test_muted_category(self):
        profile = _profile(prefs={"funding_updates": False})
        assert _wants(profile, NotificationType.FUNDING_UPDATE) is None
        assert _wants(profile, NotificationType.COMMENT) is not None

    async def test_deliver_uses_enabled_channels(self, monkeypatch):
        send_email = AsyncMock(return_value=True)
        send_sms = AsyncMock(return_value=True)
        monkeypatch.setattr(channels, "send_email", send_email)
        monkeypatch.setattr(channels, "send_sms", send_sms)
        session = make_mock_session()

        _deliver(
            session,
            _profile(prefs={"email": True, "sms": True}),
            NotificationType.STATUS_CHANGE,
            "Deal Status Updated",
            "<p>body</p>",
            sms_text="Deal moved",
        )
        send_email.assert_not_awaited()

        await send_outbox(take_outbox(session))

        send_email.assert_awaited_once_with("maria@dealflow.test", "Deal Status Updated", "<p>body</p>")
        send_sms.assert_awaited_once_with("512-555-0100", "Deal moved")
        assert take_outbox(session) == []

    async def test_disabled_sms_channel_is_never_texted(self, monkeypatch):
        send_email = AsyncMock(return_value=True)
        send_sms = AsyncMock(return_value=True)
        monkeypatch.setattr(channels, "send_email", send_email)
        monkeypatch.setattr(channels, "send_sms", send_sms)
        session = make_mock_session()

        _deliver(
            session,
            _profile(prefs={"email": True, "sms": False}),
            NotificationType.FUNDING_UPDATE,
            "Funding Request Updated",
            "<p>body</p>",
            sms_text="Funding approved",
        )
        await send_outbox(take_outbox(session))

        send_email.assert_awaited_once()
        send_sms.assert_not_awaited()

    async def test_deliver_respects_muted_category(self, monkeypatch):
        send_email = AsyncMock(return_value=True)
        monkeypatch.setattr(channels, "send_email", send_email)
        session = make_mock_session()

        _deliver(
            session,
            _profile(prefs={"status_changes": False}),
            NotificationType.STATUS_CHANGE,
            "Deal Status Updated",
            "<p>body</p>",
        )

        assert take_outbox(session) == []


# ---------------------------------------------------------------------------
# Comment fan-out
# ---------------------------------------------------------------------------


def _user(user_id: str, role: UserRole) -> UserContext:
    return UserContext(user_id=user_id, role=role, email=f"{user_id}@dealflow.test", name="Dana")


class TestNotifyComment:
    async def test_agent_and_assignee_notified(self):
        deal = make_deal_submitted()
        deal.assigned_to = "dana-reyes-uw"
        session = make_mock_session(single=None)

        notified = await notify_comment(
            session, deal, _user("admin-user", UserRole.ADMIN), "Looks good"
        )

        assert notified == ["maria-lopez-agent", "dana-reyes-uw"]
        added = [c.args[0] for c in session.add.call_args_list]
        assert {n.user_id for n in added} == {"maria-lopez-agent", "dana-reyes-uw"}
        assert all(n.type == NotificationType.COMMENT for n in added)
        assert added[0].action_url == "/dashboard/deals/101"

    async def test_commenter_never_notified(self):
        deal = make_deal_submitted()
        deal.assigned_to = "dana-reyes-uw"
        session = make_mock_session(single=None)

        notified = await notify_comment(
            session, deal, _user("dana-reyes-uw", UserRole.UNDERWRITER), "On it"
        )

        assert notified == ["maria-lopez-agent"]

    async def test_message_uses_preview(self):
        deal = make_deal_submitted()
        session = make_mock_session(single=None)

        await notify_comment(session, deal, _user("admin-user", UserRole.ADMIN), "y" * 120)

        notification = session.add.call_args.args[0]
        assert notification.message.endswith('"' + "y" * 100 + '..."')


class TestNotifyStatusChange:
    async def test_outbound_messages_wait_for_the_outbox(self, monkeypatch):
        send_email = AsyncMock(return_value=True)
        send_slack = AsyncMock(return_value=True)
        monkeypatch.setattr(channels, "send_email", send_email)
        monkeypatch.setattr(channels, "send_slack", send_slack)
        deal = make_deal_submitted()
        session = make_mock_session(single=_profile())

        await notify_status_change(
            session, deal, DealStatus.SUBMITTED, DealStatus.UNDERWRITING, "admin-user"
        )

        send_email.assert_not_awaited()
        send_slack.assert_not_awaited()
        outbox = take_outbox(session)
        assert [send for send, _args in outbox] == [send_email, send_slack]

        await send_outbox(outbox)
        send_email.assert_awaited_once()
        assert "Submitted -> *Underwriting*" in send_slack.await_args.args[0]
