# This project was developed with assistance from AI tools.
"""DocuSign eSignature client for purchase offers."""

import base64
import logging
from datetime import UTC, datetime

import httpx
from db.enums import DealStatus

from ..core.config import settings
from ..schemas.integrations import EnvelopeResponse, EnvelopeSigner, EnvelopeStatus
from . import IntegrationError

logger = logging.getLogger(__name__)

PROVIDER = "DocuSign"

_STATUS_TO_DEAL = {
    "sent": DealStatus.OFFER_SENT,
    "delivered": DealStatus.OFFER_SENT,
    "completed": DealStatus.IN_CONTRACT,
    "signed": DealStatus.IN_CONTRACT,
    "declined": DealStatus.REJECTED,
    "voided": DealStatus.REJECTED,
}


def map_envelope_status(envelope_status: str) -> DealStatus | None:
    """Deal status implied by an envelope status, None when it implies nothing."""
    return _STATUS_TO_DEAL.get(envelope_status)


async def _request(method: str, endpoint: str, body: dict | None = None) -> dict:
    url = f"{settings.DOCUSIGN_BASE_URL}/v2.1/accounts/{settings.DOCUSIGN_ACCOUNT_ID}{endpoint}"
    try:
        async with httpx.AsyncClient(timeout=settings.INTEGRATION_TIMEOUT) as client:
            response = await client.request(
                method,
                url,
                json=body,
                headers={"Authorization": f"Bearer {settings.DOCUSIGN_ACCESS_TOKEN}"},
            )
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        logger.error("DocuSign API error %s: %s", exc.response.status_code, exc.response.text)
        raise IntegrationError(PROVIDER, f"API error: {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.error("DocuSign request failed: %s", exc)
        raise IntegrationError(PROVIDER, "Failed to connect to DocuSign API") from exc


def _parse_envelope(data: dict) -> EnvelopeResponse:
    return EnvelopeResponse(
        envelope_id=data["envelopeId"],
        status=data.get("status", "sent"),
        status_date_time=data.get("statusDateTime"),
        uri=data.get("uri"),
    )


async def create_envelope(envelope: dict) -> EnvelopeResponse:
    return _parse_envelope(await _request("POST", "/envelopes", envelope))


async def get_envelope_status(envelope_id: str) -> EnvelopeStatus:
    if not settings.docusign_configured:
        return get_mock_envelope_status(envelope_id)

    data = await _request("GET", f"/envelopes/{envelope_id}")
    signers = (data.get("recipients") or {}).get("signers", [])
    return EnvelopeStatus(
        envelope_id=data.get("envelopeId", envelope_id),
        status=data["status"],
        status_date_time=data.get("statusDateTime"),
        sent_date_time=data.get("sentDateTime"),
        completed_date_time=data.get("completedDateTime"),
        signers=[
            EnvelopeSigner(
                email=s["email"],
                name=s["name"],
                status=s["status"],
                signed_date_time=s.get("signedDateTime"),
            )
            for s in signers
        ],
    )


async def void_envelope(envelope_id: str, reason: str) -> bool:
    if not settings.docusign_configured:
        return True
    await _request("PUT", f"/envelopes/{envelope_id}", {"status": "voided", "voidedReason": reason})
    return True


def render_offer_document(
    deal_number: str,
    property_address: str,
    offer_price: float,
    earnest_money: float | None = None,
    closing_date: datetime | None = None,
    terms: str | None = None,
) -> str:
    """Plain-text purchase offer carrying the signature anchors."""
    lines = [
        f"PURCHASE OFFER {deal_number}",
        "",
        f"Property: {property_address}",
        f"Offer Amount: ${offer_price:,.0f}",
    ]
    if earnest_money:
        lines.append(f"Earnest Money: ${earnest_money:,.0f}")
    if closing_date:
        lines.append(f"Closing Date: {closing_date:%B %d, %Y}")
    if terms:
        lines += ["", "Terms:", terms]
    lines += ["", "Seller: /sn1/    Date: /dt1/", "", "Buyer: /sn2/    Date: /dt2/"]
    return "\n".join(lines)


def _signer(email: str, name: str, recipient_id: int, anchor: int, label: str) -> dict:
    return {
        "email": email,
        "name": name,
        "recipientId": str(recipient_id),
        "routingOrder": recipient_id,
        "tabs": {
            "signHereTabs": [
                {"anchorString": f"/sn{anchor}/", "anchorXOffset": "0", "anchorYOffset": "0",
                 "tabLabel": f"{label} Signature"}
            ],
            "dateSignedTabs": [
                {"anchorString": f"/dt{anchor}/", "anchorXOffset": "0", "anchorYOffset": "0",
                 "tabLabel": "Date Signed"}
            ],
        },
    }


def build_offer_envelope(
    *,
    deal_number: str,
    property_address: str,
    offer_price: float,
    seller_name: str,
    seller_email: str,
    buyer_name: str,
    buyer_email: str,
    document: str,
    cc: list[tuple[str, str]] | None = None,
) -> dict:
    """Envelope body: seller signs first, buyer second, CCs last.

    ``cc`` is a list of ``(name, email)`` pairs.
    """
    return {
        "emailSubject": f"{deal_number}: Purchase Offer for {property_address}",
        "emailBody": (
            f"Please review and sign the attached purchase offer for {property_address}. "
            f"Offer Amount: ${offer_price:,.0f}"
        ),
        "documents": [
            {
                "documentBase64": base64.b64encode(document.encode()).decode(),
                "documentId": "1",
                "fileExtension": "txt",
                "name": f"{deal_number}-Offer.txt",
            }
        ],
        "recipients": {
            "signers": [
                _signer(seller_email, seller_name, 1, 1, "Seller"),
                _signer(buyer_email, buyer_name, 2, 2, "Buyer"),
            ],
            "carbonCopies": [
                {"email": email, "name": name, "recipientId": str(i + 10), "routingOrder": 3}
                for i, (name, email) in enumerate(cc or [])
            ],
        },
        "status": "sent",
    }


async def create_offer_envelope(**kwargs) -> EnvelopeResponse:
    """Send an offer for signature, or mint a mock envelope when unconfigured."""
    if not settings.docusign_configured:
        logger.info("DocuSign not configured, returning mock envelope")
        return get_mock_envelope(kwargs["deal_number"])
    return await create_envelope(build_offer_envelope(**kwargs))


def get_mock_envelope(deal_number: str) -> EnvelopeResponse:
    now = datetime.now(UTC)
    return EnvelopeResponse(
        envelope_id=f"mock-{deal_number}-{int(now.timestamp() * 1000)}",
        status="sent",
        status_date_time=now,
        uri=f"/envelopes/mock-{deal_number}",
        is_mock=True,
    )


def get_mock_envelope_status(envelope_id: str) -> EnvelopeStatus:
    now = datetime.now(UTC)
    return EnvelopeStatus(
        envelope_id=envelope_id,
        status="sent",
        status_date_time=now,
        sent_date_time=now,
        signers=[
            EnvelopeSigner(email="seller@example.com", name="Test Seller", status="sent"),
            EnvelopeSigner(email="buyer@example.com", name="Test Buyer", status="created"),
        ],
        is_mock=True,
    )
