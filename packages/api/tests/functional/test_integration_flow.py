# This project was developed with assistance from AI tools.
"""Functional tests: Third-party integration proxies.

Without credentials every provider answers with labelled mock data. A
configured provider that fails surfaces as 502.
"""

from unittest.mock import AsyncMock, patch

import pytest

from src.core.config import settings
from src.integrations import IntegrationError

from .mock_db import make_mock_session
from .personas import agent, underwriter

pytestmark = pytest.mark.functional


@pytest.fixture(autouse=True)
def _unconfigured(monkeypatch):
    for key in (
        "PROPSTREAM_API_KEY",
        "GOOGLE_MAPS_API_KEY",
        "DOCUSIGN_ACCOUNT_ID",
        "DOCUSIGN_ACCESS_TOKEN",
        "RESEND_API_KEY",
        "SLACK_WEBHOOK_URL",
    ):
        monkeypatch.setattr(settings, key, None)


class TestStatus:
    def test_everything_reports_unconfigured(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.get("/api/integrations/status")
        assert resp.status_code == 200
        items = {i["name"]: i["configured"] for i in resp.json()["integrations"]}
        assert items["propstream"] is False
        assert items["docusign"] is False
        assert set(items) == {"propstream", "google_maps", "docusign", "email", "sms", "slack"}


class TestComps:
    def test_mock_estimate_scales_with_sqft(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.post(
            "/api/integrations/comps",
            json={"address": "1420 Elm St", "city": "Austin", "state": "TX", "sqft": 1500},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["is_mock"] is True
        assert data["estimated_arv"] == 305000
        assert data["comp_count"] == 3

    def test_agent_cannot_pull_comps(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/integrations/comps",
            json={"address": "1420 Elm St", "city": "Austin", "state": "TX"},
        )
        assert resp.status_code == 403

    def test_configured_provider_failure_is_502(self, monkeypatch, make_client):
        monkeypatch.setattr(settings, "PROPSTREAM_API_KEY", "test-key")
        client = make_client(underwriter(), make_mock_session())

        with patch(
            "src.integrations.propstream._request",
            AsyncMock(side_effect=IntegrationError("PropStream", "API error: 500")),
        ):
            resp = client.post(
                "/api/integrations/comps",
                json={"address": "1420 Elm St", "city": "Austin", "state": "TX"},
            )

        assert resp.status_code == 502
        assert "PropStream" in resp.json()["detail"]
        assert resp.json()["provider"] == "PropStream"


class TestMaps:
    def test_geocode_mock(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.get("/api/integrations/geocode", params={"address": "1420 Elm St"})
        assert resp.status_code == 200
        assert resp.json()["is_mock"] is True

    def test_reverse_geocode_keeps_coordinates(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post("/api/integrations/geocode/reverse", json={"lat": 30.27, "lng": -97.74})
        data = resp.json()
        assert (data["lat"], data["lng"]) == (30.27, -97.74)

    def test_validate_address_mock_is_valid(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/integrations/validate-address",
            json={"address": "1420 Elm St", "city": "Austin", "state": "TX"},
        )
        data = resp.json()
        assert data["is_valid"] is True
        assert data["result"]["city"] == "Austin"

    def test_drive_time_mock(self, make_client):
        client = make_client(agent(), make_mock_session())

        resp = client.post(
            "/api/integrations/drive-time",
            json={"origin": "Austin, TX", "destination": "Round Rock, TX"},
        )
        assert resp.json()["duration_minutes"] == 30


class TestEnvelopes:
    def test_mock_envelope_status(self, make_client):
        client = make_client(underwriter(), make_mock_session())

        resp = client.get("/api/integrations/envelopes/mock-1")
        assert resp.status_code == 200
        assert resp.json()["status"] == "sent"
