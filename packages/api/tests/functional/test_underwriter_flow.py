# This project was developed with assistance from AI tools.
"""Functional tests: Underwriter persona journey.

Underwriters see the whole pipeline, run the numbers on a deal and submit
the analysis for review. Only admins approve or reject it.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from db import UnderwritingRecord
from db.enums import DealStatus, UnderwritingStatus

from .data_factory import (
    make_all_deals,
    make_deal_submitted,
    make_underwriter_profile,
    make_underwriting,
)
from .mock_db import make_mock_session, make_sequence_session
from .personas import UW_USER_ID, admin, underwriter

pytestmark = pytest.mark.functional

_FORM = {
    "arv": 300000,
    "repair_costs": 30000,
    "holding_months": 6,
    "monthly_holding_cost": 0,
    "buying_closing_costs": 4000,
    "selling_closing_costs": 0,
    "target_profit_percent": 20,
    "buy_box_percent": 70,
}


def _stamp_timestamps(obj):
    now = datetime(2026, 3, 1, tzinfo=UTC)
    obj.created_at = obj.created_at or now
    obj.updated_at = now


def _save_session(deal, existing=None):
    session = make_sequence_session(
        {"single": deal},  # get_deal
        {"single": make_underwriter_profile()},  # ensure_profile
        {"single": None},  # saved formulas
        {"single": existing},  # current underwriting record
    )
    session.refresh = AsyncMock(side_effect=_stamp_timestamps)
    return session


class TestUnderwriterPipeline:
    def test_sees_every_deal(self, make_client):
        client = make_client(underwriter(), make_mock_session(items=make_all_deals()))

        resp = client.get("/api/deals/")
        assert resp.status_code == 200
        assert resp.json()["pagination"]["total"] == 3

    def test_filter_by_status(self, make_client):
        client = make_client(underwriter(), make_mock_session(items=[]))

        resp = client.get("/api/deals/", params={"status": "underwriting", "search": "Bayou"})
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    def test_analytics_pipeline_allowed(self, make_client):
        client = make_client(underwriter(), make_mock_session(items=[]))

        resp = client.get("/api/analytics/pipeline")
        assert resp.status_code == 200


class TestSaveUnderwriting:
    def test_first_save_creates_version_one(self, make_client):
        deal = make_deal_submitted()
        session = _save_session(deal)
        client = make_client(underwriter(), session)

        resp = client.put("/api/deals/101/underwriting", json={"form": _FORM})
        assert resp.status_code == 200
        data = resp.json()
        assert data["formula_offers"] == {"mao": 206000, "rule70": 180000, "buy_box": 180000}
        assert data["analysis"]["mao"] == 206000
        uw = data["underwriting"]
        assert uw["version"] == 1
        assert uw["status"] == "draft"
        assert uw["underwriter_id"] == UW_USER_ID
        assert float(uw["max_offer"]) == 206000
        assert float(uw["recommended_offer"]) == 180000
        assert 0 <= uw["risk_score"] <= 100

    def test_save_moves_submitted_deal_into_underwriting(self, make_client):
        deal = make_deal_submitted()
        client = make_client(underwriter(), _save_session(deal))

        client.put("/api/deals/101/underwriting", json={"form": _FORM})
        assert deal.status == DealStatus.UNDERWRITING

    def test_resave_bumps_version_and_reopens_draft(self, make_client):
        deal = make_deal_submitted()
        existing = UnderwritingRecord(
            id=301,
            deal_id=101,
            underwriter_id=UW_USER_ID,
            status=UnderwritingStatus.SUBMITTED,
            version=2,
        )
        existing.created_at = datetime(2026, 1, 5, tzinfo=UTC)
        client = make_client(underwriter(), _save_session(deal, existing))

        resp = client.put("/api/deals/101/underwriting", json={"form": _FORM, "notes": "Comps ok"})
        assert resp.status_code == 200
        uw = resp.json()["underwriting"]
        assert uw["version"] == 3
        assert uw["status"] == "draft"
        assert uw["notes"] == "Comps ok"

    def test_unknown_deal_is_404(self, make_client):
        client = make_client(underwriter(), make_mock_session(single=None))

        resp = client.put("/api/deals/999/underwriting", json={"form": _FORM})
        assert resp.status_code == 404

    def test_negative_arv_rejected(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.put(
            "/api/deals/101/underwriting", json={"form": {**_FORM, "arv": -1}}
        )
        assert resp.status_code == 422


class TestReview:
    def test_submit_for_review(self, make_client):
        record = make_underwriting(status=UnderwritingStatus.DRAFT)
        client = make_client(underwriter(), make_mock_session(single=record))

        resp = client.post("/api/deals/102/underwriting/submit", json={"notes": "Ready"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "submitted"

    def test_underwriter_cannot_approve(self, make_client):
        record = make_underwriting(status=UnderwritingStatus.SUBMITTED)
        client = make_client(underwriter(), make_mock_session(single=record))

        resp = client.post("/api/deals/102/underwriting/approve", json={})
        assert resp.status_code == 403
        assert record.status == UnderwritingStatus.SUBMITTED

    def test_admin_approves_submitted(self, make_client):
        record = make_underwriting(status=UnderwritingStatus.SUBMITTED)
        client = make_client(admin(), make_mock_session(single=record))

        resp = client.post("/api/deals/102/underwriting/approve", json={"notes": "Go"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"

    def test_approving_a_draft_is_409(self, make_client):
        record = make_underwriting(status=UnderwritingStatus.DRAFT)
        client = make_client(admin(), make_mock_session(single=record))

        resp = client.post("/api/deals/102/underwriting/approve", json={})
        assert resp.status_code == 409
