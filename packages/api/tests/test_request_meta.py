# This project was developed with assistance from AI tools.
"""Client address recorded on audit entries."""

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from src.core.config import settings
from src.main import app as dealflow_app
from src.routes._common import request_meta


def _client(trusted_hosts) -> TestClient:
    app = FastAPI()
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=trusted_hosts)

    @app.get("/meta")
    async def meta(request: Request):
        m = request_meta(request)
        return {"ip": m.ip_address, "ua": m.user_agent}

    return TestClient(app)


def test_forwarded_header_ignored_from_untrusted_peer():
    resp = _client([]).get(
        "/meta", headers={"X-Forwarded-For": "203.0.113.7", "User-Agent": "curl/8"}
    )
    assert resp.json() == {"ip": "testclient", "ua": "curl/8"}


def test_forwarded_header_used_behind_trusted_proxy():
    resp = _client("*").get("/meta", headers={"X-Forwarded-For": "203.0.113.7"})
    assert resp.json()["ip"] == "203.0.113.7"


def test_app_trusts_only_configured_proxies():
    proxies = [m for m in dealflow_app.user_middleware if m.cls is ProxyHeadersMiddleware]
    assert len(proxies) == 1
    assert proxies[0].kwargs["trusted_hosts"] == settings.FORWARDED_ALLOW_IPS
