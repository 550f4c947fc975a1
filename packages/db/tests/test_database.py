# This project was developed with assistance from AI tools.
"""DatabaseService health reporting and settings."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import text

from db.config import DatabaseSettings
from db.database import DatabaseService, engine


def _engine(connect_side_effect=None):
    conn = AsyncMock()
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=conn, side_effect=connect_side_effect)
    ctx.__aexit__ = AsyncMock(return_value=False)
    eng = MagicMock()
    eng.connect.return_value = ctx
    eng.dispose = AsyncMock()
    return eng


async def test_health_check_healthy():
    result = await DatabaseService(_engine()).health_check()
    assert result == {"name": "Database", "status": "healthy", "message": "PostgreSQL reachable"}


async def test_health_check_reports_failure():
    result = await DatabaseService(_engine(OSError("connection refused"))).health_check()
    assert result["status"] == "unhealthy"
    assert "connection refused" in result["message"]


async def test_close_disposes_engine():
    eng = _engine()
    await DatabaseService(eng).close()
    eng.dispose.assert_awaited_once()


def test_database_url_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://u:p@db:5432/dealflow_test")
    monkeypatch.setenv("POOL_SIZE", "2")
    cfg = DatabaseSettings()
    assert cfg.DATABASE_URL.endswith("/dealflow_test")
    assert cfg.POOL_SIZE == 2


@pytest.mark.integration
async def test_database_connection():
    """Requires a running PostgreSQL at DATABASE_URL."""
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        assert result.scalar() == 1
