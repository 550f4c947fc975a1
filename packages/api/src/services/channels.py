# This project was developed with assistance from AI tools.
"""Outbound notification channels: email (Resend), SMS (Twilio), Slack.

Every sender returns ``True`` on success or when the channel is not
configured (a skipped channel is not a failure), and ``False`` when the
provider rejected the message or could not be reached. Senders never raise:
a broken channel must not fail the request that triggered it.
"""

import logging

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
TWILIO_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


async def send_email(to: str, subject: str, html: str) -> bool:
    if not settings.email_configured:
        logger.debug("Email notification skipped - RESEND_API_KEY not configured")
        return True

    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.post(
                RESEND_URL,
                headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
                json={"from": settings.EMAIL_FROM, "to": to, "subject": subject, "html": html},
            )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.error("Failed to send email to %s: %s", to, exc.response.text)
        return False
    except httpx.HTTPError as exc:
        logger.error("Email notification error: %s", exc)
        return False
    return True


async def send_sms(phone: str, message: str) -> bool:
    if not settings.sms_configured:
        logger.debug("SMS notification skipped - Twilio not configured")
        return True

    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.post(
                TWILIO_URL.format(sid=settings.TWILIO_ACCOUNT_SID),
                auth=(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN),
                data={"To": phone, "From": settings.TWILIO_PHONE_NUMBER, "Body": message},
            )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.error("Failed to send SMS to %s: %s", phone, exc.response.text)
        return False
    except httpx.HTTPError as exc:
        logger.error("SMS notification error: %s", exc)
        return False
    return True


async def send_slack(message: str, channel: str | None = None) -> bool:
    if not settings.slack_configured:
        logger.debug("Slack notification skipped - webhook not configured")
        return True

    payload: dict = {"text": message}
    if channel:
        payload["channel"] = channel
    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.post(settings.SLACK_WEBHOOK_URL, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("Slack notification error: %s", exc)
        return False
    return True
