# This project was developed with assistance from AI tools.
"""
Demo fixture data for DealFlow.

All fixture data is defined as Python dicts so enums can be referenced directly.
Profile IDs are deterministic UUIDs that match the users in the Keycloak realm,
so the token "sub" claim lines up with the seeded rows.

Simulated for demonstration purposes -- not real transactions.
"""

import hashlib
import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from db.enums import (
    DealPriority,
    DealStatus,
    PropertyType,
    UnderwritingStatus,
    UserRole,
)

# ---------------------------------------------------------------------------
# Profile references (deterministic UUIDs)
# ---------------------------------------------------------------------------

AGENT_ID = "b7e1c2d3-4f5a-4b6c-8d7e-9f0a1b2c3d01"
SECOND_AGENT_ID = "b7e1c2d3-4f5a-4b6c-8d7e-9f0a1b2c3d02"
UNDERWRITER_ID = "b7e1c2d3-4f5a-4b6c-8d7e-9f0a1b2c3d03"
ADMIN_ID = "b7e1c2d3-4f5a-4b6c-8d7e-9f0a1b2c3d04"
INVESTOR_ID = "b7e1c2d3-4f5a-4b6c-8d7e-9f0a1b2c3d05"

_NOW = datetime.now(UTC)


def _days_ago(n: int) -> datetime:
    return _NOW - timedelta(days=n)


PROFILES: list[dict] = [
    {
        "id": AGENT_ID,
        "email": "alex.rivera@dealflow.local",
        "full_name": "Alex Rivera",
        "phone": "512-555-0110",
        "role": UserRole.AGENT,
    },
    {
        "id": SECOND_AGENT_ID,
        "email": "jordan.lee@dealflow.local",
        "full_name": "Jordan Lee",
        "phone": "713-555-0120",
        "role": UserRole.AGENT,
    },
    {
        "id": UNDERWRITER_ID,
        "email": "sam.patel@dealflow.local",
        "full_name": "Sam Patel",
        "phone": "214-555-0130",
        "role": UserRole.UNDERWRITER,
    },
    {
        "id": ADMIN_ID,
        "email": "admin@dealflow.local",
        "full_name": "Morgan Blake",
        "phone": None,
        "role": UserRole.ADMIN,
    },
    {
        "id": INVESTOR_ID,
        "email": "casey.nguyen@dealflow.local",
        "full_name": "Casey Nguyen",
        "phone": "210-555-0150",
        "role": UserRole.INVESTOR,
    },
]


# ---------------------------------------------------------------------------
# Deals (each with its property and optional underwriting)
# ---------------------------------------------------------------------------

DEALS: list[dict] = [
    {
        "property": {
            "address": "1234 Oak Street",
            "city": "Austin",
            "state": "TX",
            "zip": "78701",
            "county": "Travis",
            "property_type": PropertyType.SINGLE_FAMILY,
            "bedrooms": 3,
            "bathrooms": 2,
            "sqft": 1850,
            "year_built": 1985,
        },
        "agent_id": AGENT_ID,
        "assigned_to": None,
        "status": DealStatus.SUBMITTED,
        "priority": DealPriority.HIGH,
        "asking_price": Decimal("285000"),
        "offer_price": None,
        "seller_name": "John Smith",
        "seller_phone": "512-555-0101",
        "seller_email": "john.smith@example.com",
        "seller_motivation": "Relocating for work in 30 days",
        "notes": (
            "Motivated seller - relocating for work in 30 days. Property needs cosmetic "
            "updates but solid foundation."
        ),
        "submitted_at": _days_ago(2),
    },
    {
        "property": {
            "address": "567 Maple Avenue",
            "city": "Houston",
            "state": "TX",
            "zip": "77001",
            "county": "Harris",
            "property_type": PropertyType.MULTI_FAMILY,
            "bedrooms": 6,
            "bathrooms": 4,
            "sqft": 3200,
            "year_built": 1978,
        },
        "agent_id": AGENT_ID,
        "assigned_to": UNDERWRITER_ID,
        "status": DealStatus.UNDERWRITING,
        "priority": DealPriority.MEDIUM,
        "asking_price": Decimal("425000"),
        "offer_price": Decimal("380000"),
        "seller_name": "Maria Garcia",
        "seller_phone": "713-555-0202",
        "seller_email": "maria.g@example.com",
        "seller_motivation": "Inherited property, wants to liquidate",
        "notes": "Duplex with both units rented. Current rental income $3,200/month.",
        "submitted_at": _days_ago(12),
        "underwriting": {
            "arv": Decimal("520000"),
            "repair_estimate": Decimal("45000"),
            "max_offer": Decimal("385000"),
            "recommended_offer": Decimal("380000"),
            "profit_estimate": Decimal("72000"),
            "risk_score": 42,
            "status": UnderwritingStatus.SUBMITTED,
            "notes": (
                "Comps support $520K ARV. Units need updating - new kitchens and bathrooms. "
                "Factor in 6 month holding period."
            ),
        },
    },
    {
        "property": {
            "address": "890 Pine Boulevard",
            "city": "Dallas",
            "state": "TX",
            "zip": "75201",
            "county": "Dallas",
            "property_type": PropertyType.TOWNHOUSE,
            "bedrooms": 2,
            "bathrooms": 2,
            "sqft": 1400,
            "year_built": 2010,
        },
        "agent_id": SECOND_AGENT_ID,
        "assigned_to": UNDERWRITER_ID,
        "status": DealStatus.OFFER_PREPARED,
        "priority": DealPriority.HIGH,
        "asking_price": Decimal("195000"),
        "offer_price": Decimal("175000"),
        "seller_name": "Robert Johnson",
        "seller_phone": "214-555-0303",
        "seller_email": "rob.j@example.com",
        "seller_motivation": "Divorce, both parties want a quick sale",
        "notes": "Minor repairs needed. HOA is $150/month.",
        "submitted_at": _days_ago(25),
        "underwriting": {
            "arv": Decimal("245000"),
            "repair_estimate": Decimal("15000"),
            "max_offer": Decimal("180000"),
            "recommended_offer": Decimal("175000"),
            "profit_estimate": Decimal("42000"),
            "risk_score": 28,
            "status": UnderwritingStatus.APPROVED,
            "notes": (
                "Light cosmetic rehab - paint, flooring, fixtures. ARV based on 3 recent "
                "townhouse sales in complex."
            ),
        },
    },
    {
        "property": {
            "address": "2345 Elm Drive",
            "city": "San Antonio",
            "state": "TX",
            "zip": "78201",
            "county": "Bexar",
            "property_type": PropertyType.SINGLE_FAMILY,
            "bedrooms": 4,
            "bathrooms": 3,
            "sqft": 2400,
            "year_built": 1992,
        },
        "agent_id": SECOND_AGENT_ID,
        "assigned_to": None,
        "status": DealStatus.SUBMITTED,
        "priority": DealPriority.LOW,
        "asking_price": Decimal("320000"),
        "offer_price": None,
        "seller_name": "Patricia Williams",
        "seller_phone": "210-555-0404",
        "seller_email": "pat.w@example.com",
        "seller_motivation": "Estate sale, family not in a rush",
        "notes": "Vacant 6 months. Needs new roof and HVAC. Good bones, extensive rehab.",
        "submitted_at": _days_ago(5),
    },
    {
        "property": {
            "address": "678 Cedar Lane Unit 12",
            "city": "Fort Worth",
            "state": "TX",
            "zip": "76101",
            "county": "Tarrant",
            "property_type": PropertyType.CONDO,
            "bedrooms": 2,
            "bathrooms": 1,
            "sqft": 950,
            "year_built": 2015,
        },
        "agent_id": AGENT_ID,
        "assigned_to": ADMIN_ID,
        "investor_id": INVESTOR_ID,
        "status": DealStatus.CLOSED,
        "priority": DealPriority.MEDIUM,
        "asking_price": Decimal("165000"),
        "offer_price": Decimal("152000"),
        "final_price": Decimal("152000"),
        "seller_name": "David Brown",
        "seller_phone": "817-555-0505",
        "seller_email": "david.b@example.com",
        "seller_motivation": "Investor selling to reinvest elsewhere",
        "notes": "Tenant in place with lease until March. Turnkey rental property.",
        "submitted_at": _days_ago(60),
        "closed_at": _days_ago(20),
        "underwriting": {
            "arv": Decimal("185000"),
            "repair_estimate": Decimal("5000"),
            "max_offer": Decimal("155000"),
            "recommended_offer": Decimal("152000"),
            "profit_estimate": Decimal("25000"),
            "risk_score": 18,
            "status": UnderwritingStatus.APPROVED,
            "notes": "Turnkey rental - minimal work needed. Tenant paying $1,100/month.",
        },
        "funding": {
            "investor_id": INVESTOR_ID,
            "requested_amount": Decimal("140000"),
            "approved_amount": Decimal("140000"),
            "funded_amount": Decimal("140000"),
            "interest_rate": 10.0,
            "term_months": 12,
        },
    },
]


def compute_config_hash() -> str:
    """Compute a SHA-256 hash of the fixture data for idempotency checks."""
    content = json.dumps(
        {
            "profile_ids": [p["id"] for p in PROFILES],
            "deal_count": len(DEALS),
            "addresses": [d["property"]["address"] for d in DEALS],
            "statuses": [d["status"].value for d in DEALS],
            "underwriting_count": sum(1 for d in DEALS if "underwriting" in d),
        },
        sort_keys=True,
    )
    return hashlib.sha256(content.encode()).hexdigest()
