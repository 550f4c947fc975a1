# This project was developed with assistance from AI tools.
"""Tests for seller contact masking."""

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.testclient import TestClient

from src.middleware.pii import PIIMaskingMiddleware, mask_email, mask_phone, mask_pii


@pytest.mark.parametrize(
    "value,expected",
    [
        ("512-555-0147", "***-***-0147"),
        ("(512) 555 0147", "***-***-0147"),
        ("+1 512.555.0199", "***-***-0199"),
        ("12", "***-***-****"),
        (None, None),
    ],
)
def test_mask_phone(value, expected):
    assert mask_phone(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("walter.grant@example.com", "w***@example.com"),
        ("a@b.co", "a***@b.co"),
        ("not-an-email", "***"),
        ("@example.com", "***"),
        (None, None),
    ],
)
def test_mask_email(value, expected):
    assert mask_email(value) == expected


def test_mask_pii_walks_nested_structures():
    body = {
        "data": [
            {
                "deal": {"seller_phone": "512-555-0147", "seller_email": "w@x.com"},
                "seller_name": "Walter Grant",
            }
        ],
        "pagination": {"total": 1},
    }
    masked = mask_pii(body)
    deal = masked["data"][0]["deal"]
    assert deal["seller_phone"] == "***-***-0147"
    assert deal["seller_email"] == "w***@x.com"
    assert masked["data"][0]["seller_name"] == "Walter Grant"
    assert masked["pagination"] == {"total": 1}


def test_mask_pii_leaves_non_string_values():
    assert mask_pii({"seller_phone": 5125550147}) == {"seller_phone": 5125550147}


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(PIIMaskingMiddleware)

    @app.get("/deal")
    async def deal(request: Request, masked: bool = False):
        request.state.pii_mask = masked
        return {"seller_phone": "512-555-0147", "seller_email": "walter@example.com"}

    @app.get("/text")
    async def text(request: Request):
        request.state.pii_mask = True
        return PlainTextResponse("seller_phone: 512-555-0147")

    return app


def test_middleware_masks_when_flagged():
    resp = TestClient(_app()).get("/deal", params={"masked": True})
    assert resp.json() == {"seller_phone": "***-***-0147", "seller_email": "w***@example.com"}


def test_middleware_passthrough_when_not_flagged():
    resp = TestClient(_app()).get("/deal")
    assert resp.json()["seller_phone"] == "512-555-0147"


def test_middleware_ignores_non_json():
    resp = TestClient(_app()).get("/text")
    assert resp.text == "seller_phone: 512-555-0147"
