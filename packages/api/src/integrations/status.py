# This project was developed with assistance from AI tools.
"""Which integrations are live and which fall back to mock data."""

import logging

from ..core.config import settings
from ..schemas.integrations import IntegrationStatusItem

logger = logging.getLogger(__name__)


def get_integration_status() -> list[IntegrationStatusItem]:
    return [
        IntegrationStatusItem(
            name="propstream",
            configured=settings.propstream_configured,
            description="Property data and comparable sales for ARV",
        ),
        IntegrationStatusItem(
            name="google_maps",
            configured=settings.google_maps_configured,
            description="Address validation, geocoding and drive times",
        ),
        IntegrationStatusItem(
            name="docusign",
            configured=settings.docusign_configured,
            description="E-signatures for offer documents",
        ),
        IntegrationStatusItem(
            name="email",
            configured=settings.email_configured,
            description="Email notifications via Resend",
        ),
        IntegrationStatusItem(
            name="sms",
            configured=settings.sms_configured,
            description="SMS notifications via Twilio",
        ),
        IntegrationStatusItem(
            name="slack",
            configured=settings.slack_configured,
            description="Slack webhook notifications",
        ),
    ]


def log_integration_status() -> None:
    """Log one line per integration at startup."""
    for item in get_integration_status():
        if item.configured:
            logger.info("Integration %s: live", item.name)
        else:
            logger.warning("Integration %s: not configured, using mock/no-op", item.name)
