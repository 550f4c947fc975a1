# This project was developed with assistance from AI tools.
"""Functional tests: Agent persona journey.

Agents submit deals, track their own pipeline and set the offer price on
deals they submitted. They cannot reach staff-only routes.
"""

import pytest

from .data_factory import (
    make_agent_profile,
    make_all_deals,
    make_deal_submitted,
    make_underwriting,
)
from .mock_db import make_mock_session, make_sequence_session
from .personas import AGENT_USER_ID, agent, agent_bob

pytestmark = pytest.mark.functional

_SUBMISSION = {
    "property": {
        "address": "1420 Elm St",
        "city": "Austin",
        "state": "tx",
        "zip": "78701",
        "bedrooms": 3,
        "bathrooms": 2,
        "sqft": 1500,
    },
    "seller_name": "Walter Grant",
    "seller_phone": "512-555-0147",
    "seller_email": "",
    "asking_price": "150000",
    "seller_motivation": "relocating",
}


class TestAgentSubmitsDeal:
    def test_submit_returns_created_deal(self, make_client):
        deal = make_deal_submitted()
        session = make_sequence_session(
            {"single": make_agent_profile()},  # ensure_profile
            {},  # audit advisory lock
            {},  # audit chain tip
            {"items": []},  # staff to notify
            {"single": deal},  # reload
        )
        client = make_client(agent(), session)

        resp = client.post("/api/deals/", json=_SUBMISSION)
        assert resp.status_code == 201
        data = resp.json()
        assert data["id"] == 101
        assert data["status"] == "submitted"
        assert data["property"]["city"] == "Austin"
        session.commit.assert_awaited_once()

    def test_submit_writes_property_then_deal(self, make_client):
        from db import Deal, Property

        session = make_sequence_session(
            {"single": make_agent_profile()}, {}, {}, {}, {"single": make_deal_submitted()}
        )
        client = make_client(agent(), session)

        client.post("/api/deals/", json=_SUBMISSION)
        added = [call.args[0] for call in session.add.call_args_list]
        prop = next(o for o in added if isinstance(o, Property))
        deal = next(o for o in added if isinstance(o, Deal))
        assert prop.state == "TX"
        assert deal.agent_id == AGENT_USER_ID
        assert deal.property_id == prop.id
        assert deal.seller_email is None
        assert deal.deal_number.startswith("DEALFLOW-")

    def test_submit_rejects_bad_zip(self, make_client):
        client = make_client(agent(), make_mock_session())
        body = {**_SUBMISSION, "property": {**_SUBMISSION["property"], "zip": "7870"}}

        resp = client.post("/api/deals/", json=body)
        assert resp.status_code == 422

    def test_investor_cannot_submit(self, make_client):
        from .personas import investor

        client = make_client(investor(), make_mock_session())
        resp = client.post("/api/deals/", json=_SUBMISSION)
        assert resp.status_code == 403


class TestAgentPipeline:
    def test_list_own_deals(self, make_client):
        deals = make_all_deals()[:2]
        client = make_client(agent(), make_mock_session(items=deals))

        resp = client.get("/api/deals/")
        assert resp.status_code == 200
        data = resp.json()
        assert data["pagination"]["total"] == 2
        assert [d["id"] for d in data["data"]] == [101, 102]

    def test_deal_out_of_scope_is_404(self, make_client):
        client = make_client(agent_bob(), make_mock_session(single=None))

        resp = client.get("/api/deals/101")
        assert resp.status_code == 404
        assert resp.json()["title"] == "Not Found"

    def test_agent_sees_seller_contact_unmasked(self, make_client):
        client = make_client(agent(), make_mock_session(single=make_deal_submitted()))

        resp = client.get("/api/deals/101")
        assert resp.status_code == 200
        assert resp.json()["seller_phone"] == "512-555-0147"

    def test_timeline_includes_underwriting_and_counts(self, make_client):
        session = make_sequence_session(
            {"single": make_deal_submitted()},
            {"single": make_underwriting(deal_id=101)},
            {"count": 2},
            {"count": 5},
        )
        client = make_client(agent(), session)

        resp = client.get("/api/deals/101/timeline")
        assert resp.status_code == 200
        data = resp.json()
        assert data["underwriting"]["max_offer"] == "206000"
        assert data["comment_count"] == 2
        assert data["photo_count"] == 5
        assert data["agent"]["full_name"] == "Maria Lopez"


class TestAgentUpdates:
    def test_agent_moves_own_deal_to_needs_info(self, make_client):
        deal = make_deal_submitted()
        session = make_sequence_session(
            {"single": deal},
            {},
            {},
            {"single": make_agent_profile()},  # notified agent
            {"single": deal},
        )
        client = make_client(agent(), session)

        resp = client.patch("/api/deals/101/status", json={"status": "needs_info"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "needs_info"

    def test_invalid_transition_is_409(self, make_client):
        client = make_client(agent(), make_mock_session(single=make_deal_submitted()))

        resp = client.patch("/api/deals/101/status", json={"status": "closed"})
        assert resp.status_code == 409
        assert "submitted" in resp.json()["detail"].lower()

    def test_same_status_is_noop(self, make_client):
        session = make_mock_session(single=make_deal_submitted())
        client = make_client(agent(), session)

        resp = client.patch("/api/deals/101/status", json={"status": "submitted"})
        assert resp.status_code == 200
        session.commit.assert_not_awaited()

    def test_set_offer_price_on_own_deal(self, make_client):
        deal = make_deal_submitted()
        client = make_client(agent(), make_mock_session(single=deal))

        resp = client.patch("/api/deals/101/offer-price", json={"offer_price": "142500"})
        assert resp.status_code == 200
        assert resp.json()["offer_price"] == "142500"

    def test_other_agent_cannot_set_offer_price(self, make_client):
        deal = make_deal_submitted()
        client = make_client(agent_bob(), make_mock_session(single=deal))

        resp = client.patch("/api/deals/101/offer-price", json={"offer_price": "99000"})
        assert resp.status_code == 403
        assert deal.offer_price is None

    def test_update_tags_and_notes(self, make_client):
        deal = make_deal_submitted()
        client = make_client(agent(), make_mock_session(single=deal))

        resp = client.patch("/api/deals/101", json={"tags": ["motivated"], "notes": "Call Tue"})
        assert resp.status_code == 200
        assert resp.json()["tags"] == ["motivated"]
        assert deal.notes == "Call Tue"


class TestAgentStaffOnlyRoutes:
    def test_assign_is_403(self, make_client):
        client = make_client(agent(), make_mock_session(single=make_deal_submitted()))

        resp = client.patch("/api/deals/101/assign", json={"assignee_id": "dana-reyes-uw"})
        assert resp.status_code == 403

    def test_analytics_is_403(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.get("/api/analytics/pipeline")
        assert resp.status_code == 403

    def test_save_underwriting_is_403(self, make_client):
        client = make_client(agent(), make_mock_session(single=make_deal_submitted()))

        resp = client.put(
            "/api/deals/101/underwriting",
            json={"form": {"arv": 300000, "repair_costs": 30000}},
        )
        assert resp.status_code == 403

    def test_status_enum_is_validated(self, make_client):
        client = make_client(agent(), make_mock_session(single=make_deal_submitted()))

        resp = client.patch("/api/deals/101/status", json={"status": "teleported"})
        assert resp.status_code == 422
