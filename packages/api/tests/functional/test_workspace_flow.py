# This project was developed with assistance from AI tools.
"""Functional tests: Day-to-day pipeline tools.

Comments, notifications, bulk operations, the calculator and the health
check, exercised through the real app.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from db import Notification, Profile
from db.enums import UserRole

from src.services import channels

from .data_factory import (
    make_agent_profile,
    make_deal_submitted,
    make_deal_underwriting,
    make_notification,
)
from .mock_db import make_mock_session, make_sequence_session
from .personas import AGENT_USER_ID, UW_USER_ID, admin, agent, investor, underwriter

pytestmark = pytest.mark.functional


def _rowcount_session(rowcount: int):
    session = make_mock_session()
    session.execute.return_value.rowcount = rowcount
    return session


def _dana() -> Profile:
    return Profile(
        id=UW_USER_ID,
        full_name="Dana Reyes",
        email="dana@dealflow.example",
        role=UserRole.UNDERWRITER,
        is_active=True,
    )


def _stamp(obj):
    obj.created_at = obj.updated_at = datetime(2026, 3, 1, tzinfo=UTC)


class TestComments:
    def test_underwriter_comment_notifies_agent(self, make_client):
        session = make_sequence_session(
            {"single": make_deal_submitted()},
            {"single": _dana()},
            {"single": make_agent_profile()},  # notified agent
        )
        session.refresh = AsyncMock(side_effect=_stamp)
        client = make_client(underwriter(), session)

        resp = client.post("/api/deals/101/comments", json={"content": "  Comps look thin  "})
        assert resp.status_code == 201
        data = resp.json()
        assert data["content"] == "Comps look thin"
        assert data["author"]["full_name"] == "Dana Reyes"

        notes = [c.args[0] for c in session.add.call_args_list if isinstance(c.args[0], Notification)]
        assert [n.user_id for n in notes] == [AGENT_USER_ID]

    def test_comment_email_is_sent_after_commit(self, make_client, monkeypatch):
        session = make_sequence_session(
            {"single": make_deal_submitted()},
            {"single": _dana()},
            {"single": make_agent_profile()},
        )
        events = []
        session.commit = AsyncMock(side_effect=lambda: events.append("commit"))

        async def _send_email(to, subject, body_html):
            events.append(("email", to))
            return True

        monkeypatch.setattr(channels, "send_email", _send_email)
        session.refresh = AsyncMock(side_effect=_stamp)
        client = make_client(underwriter(), session)

        resp = client.post("/api/deals/101/comments", json={"content": "Comps look thin"})

        assert resp.status_code == 201
        assert events == ["commit", ("email", "maria@dealflow.example")]

    def test_blank_comment_is_422(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post("/api/deals/101/comments", json={"content": "   "})
        assert resp.status_code == 422

    def test_comment_on_invisible_deal_is_404(self, make_client):
        client = make_client(agent(), make_mock_session(single=None))

        resp = client.get("/api/deals/101/comments")
        assert resp.status_code == 404


class TestNotifications:
    def test_list_with_unread_count(self, make_client):
        session = make_mock_session(items=[make_notification(), make_notification(702, True)])
        client = make_client(agent(), session)

        resp = client.get("/api/notifications/")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["data"]) == 2
        assert data["unread_count"] == 2

    def test_mark_read(self, make_client):
        client = make_client(agent(), _rowcount_session(1))

        assert client.post("/api/notifications/701/read").status_code == 204

    def test_mark_someone_elses_is_404(self, make_client):
        client = make_client(agent(), _rowcount_session(0))

        assert client.post("/api/notifications/701/read").status_code == 404

    def test_mark_all_read(self, make_client):
        client = make_client(agent(), _rowcount_session(3))

        resp = client.post("/api/notifications/read-all")
        assert resp.json() == {"updated": 3}

    def test_delete(self, make_client):
        client = make_client(agent(), _rowcount_session(1))

        assert client.delete("/api/notifications/701").status_code == 204

    def test_update_preferences(self, make_client):
        profile = make_agent_profile()
        client = make_client(agent(), make_mock_session(single=profile))

        resp = client.put("/api/profile/notifications", json={"sms": True, "comments": False})
        assert resp.status_code == 200
        prefs = resp.json()["notification_preferences"]
        assert prefs["sms"] is True
        assert prefs["comments"] is False
        assert prefs["email"] is True


class TestBulkOperations:
    def test_bulk_status_reports_failures(self, make_client):
        session = make_sequence_session(
            {"items": [make_deal_submitted(), make_deal_underwriting()]},
            {"single": make_agent_profile()},  # notified agent of deal 101
        )
        client = make_client(underwriter(), session)

        resp = client.post(
            "/api/bulk/status", json={"deal_ids": [101, 102, 999], "status": "underwriting"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["succeeded"] == 2
        assert data["failed"] == 1
        assert data["errors"] == [{"deal_id": 999, "reason": "Deal not found"}]

    def test_bulk_status_rejects_bad_transition(self, make_client):
        session = make_sequence_session({"items": [make_deal_submitted()]})
        client = make_client(underwriter(), session)

        resp = client.post("/api/bulk/status", json={"deal_ids": [101], "status": "closed"})
        data = resp.json()
        assert data["succeeded"] == 0
        assert "submitted" in data["errors"][0]["reason"]

    def test_export_csv(self, make_client):
        session = make_sequence_session({"items": [make_deal_submitted()]})
        client = make_client(underwriter(), session)

        resp = client.post("/api/bulk/export", json={"deal_ids": [101]})
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=\"deals-export-" in resp.headers["content-disposition"]
        lines = resp.text.strip().split("\n")
        assert lines[0].startswith("Deal Number,Status,Address")
        assert "DEALFLOW-101,Submitted,1420 Elm St,Austin,TX" in lines[1]
        assert "\"$150,000\"" in lines[1]

    def test_empty_selection_is_422(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.post("/api/bulk/export", json={"deal_ids": []})
        assert resp.status_code == 422

    def test_admin_bulk_delete_removes_stored_files(self, make_client):
        session = make_sequence_session(
            {"items": [make_deal_submitted()]},
            {"items": ["deals/101/abc/inspection.pdf", "deals/101/def/photo.jpg"]},
        )
        storage = MagicMock()
        storage.delete_file = AsyncMock()
        client = make_client(admin(), session)

        with patch("src.services.bulk.get_storage_service", return_value=storage):
            resp = client.post("/api/bulk/delete", json={"deal_ids": [101]})

        assert resp.status_code == 200
        assert resp.json()["succeeded"] == 1
        session.commit.assert_awaited_once()
        assert [c.args[0] for c in storage.delete_file.await_args_list] == [
            "deals/101/abc/inspection.pdf",
            "deals/101/def/photo.jpg",
        ]

    def test_underwriter_cannot_bulk_delete(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.post("/api/bulk/delete", json={"deal_ids": [101]})
        assert resp.status_code == 403

    def test_agent_cannot_bulk_anything(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post("/api/bulk/priority", json={"deal_ids": [101], "priority": "high"})
        assert resp.status_code == 403


class TestCalculator:
    def test_analyze(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/calculator/analyze",
            json={
                "form": {
                    "arv": 300000,
                    "repair_costs": 30000,
                    "monthly_holding_cost": 0,
                    "buying_closing_costs": 4000,
                },
                "sqft": 1500,
            },
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["mao"] == 206000
        assert data["rule70_offer"] == 180000
        assert data["repair_guide"]["low"] == 37500

    def test_evaluate_custom_formula(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/formulas/evaluate",
            json={"expression": "ARV * 0.65 - Repairs", "variables": {"ARV": 200000, "Repairs": 20000}},
        )
        assert resp.json() == {"result": 110000}

    def test_invalid_formula_is_422(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post("/api/formulas/evaluate", json={"expression": "__import__('os')"})
        assert resp.status_code == 422

    def test_oversized_formula_is_422(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.post("/api/formulas/validate", json={"expression": "+".join(["1"] * 3000)})
        assert resp.status_code == 422
        assert resp.json()["errors"][0]["field"] == "body.expression"

    def test_amounts_beyond_column_range_are_422(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/calculator/analyze",
            json={
                "form": {
                    "arv": 1e308,
                    "repair_costs": 0,
                    "holding_months": 24,
                    "monthly_holding_cost": 1e308,
                },
            },
        )
        assert resp.status_code == 422
        fields = {e["field"] for e in resp.json()["errors"]}
        assert fields == {"body.form.arv", "body.form.monthly_holding_cost"}

    def test_defaults_when_nothing_saved(self, make_client):
        client = make_client(underwriter(), make_mock_session(single=None))

        resp = client.get("/api/formulas")
        assert resp.json()["mao"]["is_default"] is True

    def test_risk_score_is_staff_only(self, make_client):
        client = make_client(investor(), make_mock_session())

        resp = client.post(
            "/api/risk/score",
            json={"asking_price": 150000, "arv": 300000, "max_offer": 206000, "rehab_cost": 30000},
        )
        assert resp.status_code == 403


class TestHealth:
    def test_reports_api_and_database(self, app):
        from fastapi.testclient import TestClient

        db_service = MagicMock()
        db_service.health_check = AsyncMock(
            return_value={"name": "Database", "status": "healthy", "message": "ok"}
        )
        with patch("src.routes.health.get_db_service", return_value=db_service):
            resp = TestClient(app).get("/health/")

        assert resp.status_code == 200
        names = [item["name"] for item in resp.json()]
        assert names == ["API", "Database"]


class TestErrorBodies:
    def test_validation_errors_name_each_field(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/deals/",
            json={
                "property": {"address": "1420 Elm St", "city": "Austin", "state": "TX", "zip": "7870"},
                "seller_name": "Walter Grant",
                "asking_price": "150000",
            },
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["title"] == "Unprocessable Entity"
        assert [e["field"] for e in body["errors"]] == ["body.property.zip"]
        assert body["detail"].startswith("body.property.zip: ")

    def test_request_id_is_echoed(self, make_client):
        client = make_client(agent(), make_mock_session(single=None))

        resp = client.get("/api/deals/999", headers={"X-Request-ID": "req-42"})
        assert resp.status_code == 404
        assert resp.json()["request_id"] == "req-42"
        assert resp.json()["errors"] == []
