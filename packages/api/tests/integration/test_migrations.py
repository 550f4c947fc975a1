# This project was developed with assistance from AI tools.
"""Alembic migrations produce the full DealFlow schema."""

import pytest
from sqlalchemy import text

pytestmark = pytest.mark.integration

EXPECTED_TABLES = {
    "profiles",
    "properties",
    "deals",
    "underwriting_records",
    "attachments",
    "deal_comments",
    "notifications",
    "audit_logs",
    "investor_funding",
    "deal_activities",
    "offer_documents",
    "user_formula_settings",
    "demo_data_manifest",
}


async def test_all_tables_created(async_engine):
    async with async_engine.connect() as conn:
        result = await conn.execute(
            text("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public'")
        )
        tables = {row[0] for row in result}
    assert EXPECTED_TABLES <= tables


async def test_at_head_revision(async_engine):
    async with async_engine.connect() as conn:
        result = await conn.execute(text("SELECT version_num FROM alembic_version"))
        assert result.scalar() == "1b2c3d4e5f6a"


async def test_audit_triggers_installed(async_engine):
    async with async_engine.connect() as conn:
        result = await conn.execute(
            text(
                "SELECT tgname FROM pg_trigger "
                "WHERE tgrelid = 'audit_logs'::regclass AND NOT tgisinternal"
            )
        )
        triggers = {row[0] for row in result}
    assert triggers == {"audit_logs_no_update", "audit_logs_no_delete"}
