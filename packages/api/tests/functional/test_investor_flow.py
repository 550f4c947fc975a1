# This project was developed with assistance from AI tools.
"""Functional tests: Investor persona journey.

Investors browse deals open for funding with seller contact masked, request
to fund them, and track their portfolio. Staff routes are closed to them.
"""

from decimal import Decimal

import pytest
from db.enums import FundingStatus

from .data_factory import (
    make_deal_closed_funded,
    make_deal_offer_prepared,
    make_deal_submitted,
    make_funding,
    make_investor_profile,
)
from .mock_db import make_mock_session, make_sequence_session
from .personas import (
    INVESTOR_OTHER_USER_ID,
    INVESTOR_USER_ID,
    investor,
    investor_other,
    underwriter,
)

pytestmark = pytest.mark.functional


def _open_deal_with_two_bids():
    deal = make_deal_offer_prepared()
    mine = make_funding(id=401, deal=deal)
    theirs = make_funding(id=402, deal=deal, investor_id=INVESTOR_OTHER_USER_ID)
    deal.funding_requests = [mine, theirs]
    return deal


class TestBrowseDeals:
    def test_available_deals_mask_seller_contact(self, make_client):
        client = make_client(investor(), make_mock_session(items=[_open_deal_with_two_bids()]))

        resp = client.get("/api/investor/deals/available")
        assert resp.status_code == 200
        deal = resp.json()["data"][0]["deal"]
        assert deal["seller_phone"] == "***-***-0147"
        assert deal["seller_email"] == "w***@example.com"
        assert deal["seller_name"] == "Walter Grant"

    def test_only_own_funding_requests_are_shown(self, make_client):
        client = make_client(investor(), make_mock_session(items=[_open_deal_with_two_bids()]))

        resp = client.get("/api/investor/deals/available")
        funding = resp.json()["data"][0]["funding"]
        assert [f["id"] for f in funding] == [401]
        assert funding[0]["investor_id"] == INVESTOR_USER_ID

    def test_deal_detail_masked(self, make_client):
        client = make_client(investor(), make_mock_session(single=make_deal_offer_prepared()))

        resp = client.get("/api/deals/103")
        assert resp.status_code == 200
        assert resp.json()["seller_phone"].startswith("***-***-")

    def test_dashboard(self, make_client):
        funded = make_funding(
            id=403,
            deal=make_deal_closed_funded(),
            status=FundingStatus.FUNDED,
            funded_amount=Decimal("185000"),
        )
        session = make_sequence_session(
            {"items": [make_deal_offer_prepared()]},
            {"items": [make_deal_closed_funded()]},
            {"items": [funded]},
        )
        client = make_client(investor(), session)

        resp = client.get("/api/investor/dashboard")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["available_deals"]) == 1
        assert len(data["my_deals"]) == 1
        assert data["stats"]["closed_deals"] == 1


class TestRequestFunding:
    def test_request_created(self, make_client):
        deal = make_deal_offer_prepared()
        created = make_funding(id=900, deal=deal)
        session = make_sequence_session(
            {"single": deal},  # get_deal
            {"single": None},  # no earlier request
            {"single": make_investor_profile()},  # ensure_profile
            {},
            {},
            {"items": []},  # staff to notify
            {"single": created},  # reload
        )
        client = make_client(investor(), session)

        resp = client.post(
            "/api/deals/103/funding",
            json={"requested_amount": "165000", "interest_rate": 10, "term_months": 12},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "pending"
        assert data["deal"]["id"] == 103
        session.commit.assert_awaited_once()

    def test_duplicate_request_is_409(self, make_client):
        deal = make_deal_offer_prepared()
        session = make_sequence_session(
            {"single": deal},
            {"single": make_funding(deal=deal)},
        )
        client = make_client(investor(), session)

        resp = client.post("/api/deals/103/funding", json={"requested_amount": "150000"})
        assert resp.status_code == 409
        session.commit.assert_not_awaited()

    def test_deal_not_open_for_funding_is_422(self, make_client):
        client = make_client(investor(), make_mock_session(single=make_deal_submitted()))

        resp = client.post("/api/deals/101/funding", json={"requested_amount": "150000"})
        assert resp.status_code == 422

    def test_invisible_deal_is_404(self, make_client):
        client = make_client(investor(), make_mock_session(single=None))

        resp = client.post("/api/deals/101/funding", json={"requested_amount": "150000"})
        assert resp.status_code == 404


class TestWithdraw:
    def test_withdraw_pending_request(self, make_client):
        funding = make_funding()
        client = make_client(investor(), make_mock_session(single=funding))

        resp = client.post("/api/funding/401/withdraw")
        assert resp.status_code == 200
        assert resp.json()["status"] == "withdrawn"

    def test_withdraw_funded_request_is_409(self, make_client):
        funding = make_funding(status=FundingStatus.FUNDED, funded_amount=Decimal("165000"))
        client = make_client(investor(), make_mock_session(single=funding))

        resp = client.post("/api/funding/401/withdraw")
        assert resp.status_code == 409
        assert funding.status == FundingStatus.FUNDED

    def test_cannot_withdraw_another_investors_request(self, make_client):
        client = make_client(investor_other(), make_mock_session(single=make_funding()))

        resp = client.post("/api/funding/401/withdraw")
        assert resp.status_code == 404


class TestFundingReview:
    def test_second_investor_cannot_fund_a_pinned_deal(self, make_client):
        deal = make_deal_offer_prepared()
        deal.investor_id = INVESTOR_USER_ID
        funding = make_funding(
            id=402, deal=deal, status=FundingStatus.APPROVED, investor_id=INVESTOR_OTHER_USER_ID
        )
        session = make_mock_session(single=funding)
        client = make_client(underwriter(), session)

        resp = client.patch("/api/funding/402", json={"status": "funded"})
        assert resp.status_code == 409
        assert "another investor" in resp.json()["detail"]
        assert deal.investor_id == INVESTOR_USER_ID
        assert funding.status == FundingStatus.APPROVED
        session.commit.assert_not_awaited()


class TestPortfolioStats:
    def test_returns_are_sale_price_minus_funded(self, make_client):
        funded = make_funding(
            id=403,
            deal=make_deal_closed_funded(),
            status=FundingStatus.FUNDED,
            funded_amount=Decimal("185000"),
        )
        pending = make_funding(id=404)
        session = make_sequence_session(
            {"items": [funded, pending]},
            {"items": [make_deal_closed_funded()]},
        )
        client = make_client(investor(), session)

        resp = client.get("/api/investor/stats")
        assert resp.status_code == 200
        stats = resp.json()
        assert Decimal(stats["total_funded"]) == Decimal("185000")
        assert Decimal(stats["pending_funding"]) == Decimal("165000")
        assert Decimal(stats["total_returns"]) == Decimal("55000")
        assert stats["roi"] == 29.73


class TestInvestorBlockedFromStaffRoutes:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/funding"),
            ("get", "/api/analytics/pipeline"),
            ("get", "/api/users"),
            ("get", "/api/admin/audit"),
            ("patch", "/api/funding/401"),
        ],
    )
    def test_forbidden(self, make_client, method, path):
        client = make_client(investor(), make_mock_session())

        kwargs = {"json": {"status": "approved"}} if method == "patch" else {}
        resp = getattr(client, method)(path, **kwargs)
        assert resp.status_code == 403
