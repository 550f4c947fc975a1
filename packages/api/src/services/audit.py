# This project was developed with assistance from AI tools.
"""Audit log service.

Writes append-only audit entries with a SHA-256 hash chain for tamper
evidence. A PostgreSQL advisory lock serializes writers so each entry links
to exactly one predecessor.
"""

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime

from db import AuditLog
from db.enums import AuditAction, EntityType
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Fixed advisory lock key for audit trail serialization.
# Only audit log inserts are serialized; other DB operations are unaffected.
AUDIT_LOCK_KEY = 900_001

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


@dataclass(frozen=True)
class RequestMeta:
    """Client details captured alongside an audited change."""

    ip_address: str | None = None
    user_agent: str | None = None


def _compute_hash(entry: AuditLog) -> str:
    """SHA-256 over the fields that make an entry what it is."""
    payload = "|".join(
        [
            str(entry.id),
            str(entry.created_at),
            str(entry.user_id),
            str(entry.action),
            str(entry.entity_type),
            str(entry.entity_id),
            json.dumps(entry.old_values, sort_keys=True, default=str),
            json.dumps(entry.new_values, sort_keys=True, default=str),
        ]
    )
    return hashlib.sha256(payload.encode()).hexdigest()


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


async def write_audit_log(
    session: AsyncSession,
    *,
    user_id: str | None,
    action: AuditAction | str,
    entity_type: EntityType | str,
    entity_id: str | int | None = None,
    old_values: dict | None = None,
    new_values: dict | None = None,
    meta: RequestMeta | None = None,
    metadata: dict | None = None,
) -> AuditLog:
    """Append one audit entry linked to the previous one.

    The caller owns the transaction; the entry is flushed, not committed.
    """
    # Released automatically when the transaction commits or rolls back.
    await session.execute(text(f"SELECT pg_advisory_xact_lock({AUDIT_LOCK_KEY})"))

    latest = await session.execute(select(AuditLog).order_by(AuditLog.id.desc()).limit(1))
    prev_entry = latest.scalar_one_or_none()
    prev_hash = _compute_hash(prev_entry) if prev_entry is not None else "genesis"

    entry = AuditLog(
        user_id=user_id,
        action=_enum_value(action),
        entity_type=_enum_value(entity_type),
        entity_id=str(entity_id) if entity_id is not None else None,
        old_values=old_values,
        new_values=new_values,
        ip_address=meta.ip_address if meta else None,
        user_agent=meta.user_agent if meta else None,
        extra=metadata,
        prev_hash=prev_hash,
    )
    session.add(entry)
    await session.flush()
    return entry


async def verify_audit_chain(session: AsyncSession) -> dict:
    """Walk the log in id order and recompute every link.

    Returns:
        {"status": "OK", "entries_checked": N} on success, or
        {"status": "TAMPERED", "first_break_id": id, "entries_checked": N}.
    """
    result = await session.execute(select(AuditLog).order_by(AuditLog.id.asc()))
    entries = list(result.scalars().all())

    for i, entry in enumerate(entries):
        expected = "genesis" if i == 0 else _compute_hash(entries[i - 1])
        if entry.prev_hash != expected:
            logger.error("Audit chain broken at entry %s", entry.id)
            return {"status": "TAMPERED", "first_break_id": entry.id, "entries_checked": i + 1}

    return {"status": "OK", "entries_checked": len(entries)}


async def search_audit_logs(
    session: AsyncSession,
    *,
    entity_type: str | None = None,
    entity_id: str | None = None,
    user_id: str | None = None,
    action: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[AuditLog], int]:
    """Filtered, newest-first page of audit entries plus the total match count."""
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    filters = []
    if entity_type:
        filters.append(AuditLog.entity_type == entity_type)
    if entity_id:
        filters.append(AuditLog.entity_id == str(entity_id))
    if user_id:
        filters.append(AuditLog.user_id == user_id)
    if action:
        filters.append(AuditLog.action == action)
    if start_date:
        filters.append(AuditLog.created_at >= start_date)
    if end_date:
        filters.append(AuditLog.created_at <= end_date)

    count_result = await session.execute(select(func.count(AuditLog.id)).where(*filters))
    total = count_result.scalar() or 0

    stmt = (
        select(AuditLog)
        .where(*filters)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all()), total


async def get_entity_history(
    session: AsyncSession,
    entity_type: str,
    entity_id: str | int,
) -> list[AuditLog]:
    """Full history of one entity, oldest first."""
    stmt = (
        select(AuditLog)
        .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == str(entity_id))
        .order_by(AuditLog.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())
