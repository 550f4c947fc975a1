# This project was developed with assistance from AI tools.
"""Audit hash chain unit tests (mocked sessions).

The append-only trigger and the advisory lock are covered by the
integration suite against a real PostgreSQL.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

from db import AuditLog
from db.enums import AuditAction, EntityType

from src.services.audit import (
    AUDIT_LOCK_KEY,
    RequestMeta,
    _compute_hash,
    verify_audit_chain,
    write_audit_log,
)


def _entry(id: int, prev_hash: str, **fields) -> AuditLog:
    return AuditLog(
        id=id,
        created_at=datetime(2026, 2, 1, 9, id, tzinfo=UTC),
        user_id=fields.get("user_id", "dana-reyes-uw"),
        action=fields.get("action", "update"),
        entity_type="deal",
        entity_id="102",
        old_values=fields.get("old_values"),
        new_values=fields.get("new_values", {"status": "underwriting"}),
        prev_hash=prev_hash,
    )


def _chain(n: int) -> list[AuditLog]:
    entries = [_entry(1, "genesis")]
    for i in range(2, n + 1):
        entries.append(_entry(i, _compute_hash(entries[-1])))
    return entries


def _session_with_latest(latest):
    lock_result = MagicMock()
    latest_result = MagicMock()
    latest_result.scalar_one_or_none.return_value = latest
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=[lock_result, latest_result])
    session.add = MagicMock()
    return session


class TestComputeHash:
    def test_deterministic(self):
        assert _compute_hash(_entry(1, "genesis")) == _compute_hash(_entry(1, "genesis"))

    def test_is_sha256_hex(self):
        assert len(_compute_hash(_entry(1, "genesis"))) == 64

    def test_changes_with_values(self):
        a = _entry(1, "genesis", new_values={"status": "underwriting"})
        b = _entry(1, "genesis", new_values={"status": "closed"})
        assert _compute_hash(a) != _compute_hash(b)

    def test_key_order_does_not_matter(self):
        a = _entry(1, "genesis", new_values={"a": 1, "b": 2})
        b = _entry(1, "genesis", new_values={"b": 2, "a": 1})
        assert _compute_hash(a) == _compute_hash(b)


class TestWriteAuditLog:
    async def test_first_entry_is_genesis(self):
        session = _session_with_latest(None)

        entry = await write_audit_log(
            session,
            user_id="maria-lopez-agent",
            action=AuditAction.CREATE,
            entity_type=EntityType.DEAL,
            entity_id=101,
            new_values={"status": "submitted"},
            meta=RequestMeta(ip_address="10.0.0.1", user_agent="pytest"),
            metadata={"source": "test"},
        )

        assert entry.prev_hash == "genesis"
        assert entry.action == "create"
        assert entry.entity_type == "deal"
        assert entry.entity_id == "101"
        assert entry.ip_address == "10.0.0.1"
        assert entry.extra == {"source": "test"}
        session.add.assert_called_once_with(entry)
        session.flush.assert_awaited_once()
        session.commit.assert_not_awaited()

    async def test_links_to_latest_entry(self):
        latest = _entry(7, "whatever")
        session = _session_with_latest(latest)

        entry = await write_audit_log(
            session, user_id="admin", action="bulk_update", entity_type="deal"
        )

        assert entry.prev_hash == _compute_hash(latest)
        assert entry.entity_id is None

    async def test_takes_advisory_lock_first(self):
        session = _session_with_latest(None)

        await write_audit_log(session, user_id="admin", action="view", entity_type="deal")

        first_stmt = session.execute.await_args_list[0].args[0]
        assert str(AUDIT_LOCK_KEY) in str(first_stmt)


class TestVerifyAuditChain:
    @staticmethod
    def _session(entries):
        result = MagicMock()
        result.scalars.return_value.all.return_value = entries
        session = AsyncMock()
        session.execute = AsyncMock(return_value=result)
        return session

    async def test_empty_log_is_ok(self):
        assert await verify_audit_chain(self._session([])) == {
            "status": "OK",
            "entries_checked": 0,
        }

    async def test_intact_chain(self):
        result = await verify_audit_chain(self._session(_chain(4)))
        assert result == {"status": "OK", "entries_checked": 4}

    async def test_edited_entry_breaks_next_link(self):
        entries = _chain(4)
        entries[1].new_values = {"status": "closed"}

        result = await verify_audit_chain(self._session(entries))
        assert result == {"status": "TAMPERED", "first_break_id": 3, "entries_checked": 3}

    async def test_first_entry_must_be_genesis(self):
        entries = _chain(2)
        entries[0].prev_hash = "0" * 64

        result = await verify_audit_chain(self._session(entries))
        assert result["first_break_id"] == 1
