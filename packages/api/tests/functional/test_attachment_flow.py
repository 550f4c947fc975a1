# This project was developed with assistance from AI tools.
"""Functional tests: Deal attachments across personas.

Exercises upload, download and delete through the real app with a mocked
DB and storage. Verifies:
- The deal's agent and staff can upload (201)
- Out-of-scope deal returns 404
- Investors are denied (403)
- Content-type validation rejects unsupported files (422)
- Oversized uploads are refused before anything is stored (413)
- Only the uploader or staff can delete
"""

from datetime import UTC, datetime
from io import BytesIO
from unittest.mock import AsyncMock

import pytest

from src.core.config import settings

from .data_factory import make_agent_profile, make_attachment, make_deal_submitted
from .mock_db import make_mock_session, make_sequence_session
from .personas import AGENT_USER_ID, agent, agent_bob, investor, underwriter

pytestmark = pytest.mark.functional


def _post_upload(client, deal_id=101, content_type="image/jpeg", filename="photo.jpg"):
    return client.post(
        f"/api/deals/{deal_id}/attachments",
        files={"file": (filename, BytesIO(b"\xff\xd8\xff fake jpeg"), content_type)},
        data={"category": "photo"},
    )


def _upload_session(deal):
    session = make_sequence_session({"single": deal}, {"single": make_agent_profile()})

    def _stamp(obj):
        obj.created_at = datetime(2026, 3, 1, tzinfo=UTC)

    session.refresh = AsyncMock(side_effect=_stamp)
    return session


class TestUpload:
    def test_agent_uploads_photo(self, make_upload_client):
        client, storage = make_upload_client(agent(), _upload_session(make_deal_submitted()))

        resp = _post_upload(client)
        assert resp.status_code == 201
        data = resp.json()
        assert data["deal_id"] == 101
        assert data["category"] == "photo"
        assert data["uploaded_by"] == AGENT_USER_ID
        assert data["file_name"] == "photo.jpg"
        storage.upload_file.assert_awaited_once()
        assert storage.upload_file.await_args.args[1] == "deals/101/abc123/photo.jpg"

    def test_underwriter_uploads(self, make_upload_client):
        client, _ = make_upload_client(underwriter(), _upload_session(make_deal_submitted()))

        resp = _post_upload(client, content_type="application/pdf", filename="inspection.pdf")
        assert resp.status_code == 201

    def test_out_of_scope_deal_is_404(self, make_upload_client):
        client, storage = make_upload_client(agent_bob(), make_mock_session(single=None))

        resp = _post_upload(client)
        assert resp.status_code == 404
        storage.upload_file.assert_not_awaited()

    def test_investor_denied(self, make_upload_client):
        client, storage = make_upload_client(investor(), make_mock_session())

        resp = _post_upload(client)
        assert resp.status_code == 403
        storage.upload_file.assert_not_awaited()

    def test_unsupported_type_is_422(self, make_upload_client):
        client, _ = make_upload_client(agent(), make_mock_session())

        resp = _post_upload(client, content_type="application/x-msdownload", filename="x.exe")
        assert resp.status_code == 422
        assert "Unsupported file type" in resp.json()["detail"]

    def test_oversized_upload_is_413(self, make_upload_client, monkeypatch):
        monkeypatch.setattr(settings, "UPLOAD_MAX_SIZE_MB", 1)
        session = _upload_session(make_deal_submitted())
        client, storage = make_upload_client(agent(), session)

        resp = client.post(
            "/api/deals/101/attachments",
            files={"file": ("scan.pdf", BytesIO(b"%" * (1024 * 1024 + 1)), "application/pdf")},
        )

        assert resp.status_code == 413
        assert resp.json()["detail"] == "File exceeds maximum of 1MB"
        storage.upload_file.assert_not_awaited()
        session.execute.assert_not_awaited()


class TestDownloadAndDelete:
    def test_download_returns_presigned_url(self, make_upload_client):
        client, _ = make_upload_client(agent(), make_mock_session(single=make_attachment()))

        resp = client.get("/api/attachments/501/download")
        assert resp.status_code == 200
        assert resp.json()["url"] == "https://s3.local/signed"

    def test_uploader_deletes(self, make_upload_client):
        session = make_mock_session(single=make_attachment())
        client, storage = make_upload_client(agent(), session)

        resp = client.delete("/api/attachments/501")
        assert resp.status_code == 204
        storage.delete_file.assert_awaited_once_with("deals/101/abc123/front.jpg")

    def test_other_agent_cannot_delete(self, make_upload_client):
        client, storage = make_upload_client(agent_bob(), make_mock_session(single=make_attachment()))

        resp = client.delete("/api/attachments/501")
        assert resp.status_code == 403
        storage.delete_file.assert_not_awaited()

    def test_staff_recategorizes(self, make_upload_client):
        attachment = make_attachment()
        client, _ = make_upload_client(underwriter(), make_mock_session(single=attachment))

        resp = client.patch("/api/attachments/501", json={"category": "inspection"})
        assert resp.status_code == 200
        assert resp.json()["category"] == "inspection"
