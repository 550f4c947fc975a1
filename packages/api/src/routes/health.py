# This project was developed with assistance from AI tools.
"""Liveness and dependency health."""

from db import get_db_service
from fastapi import APIRouter

from .. import __version__
from ..schemas.health import HealthItem

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health() -> list[HealthItem]:
    """API and database status. Unauthenticated for load balancer checks."""
    db_status = await get_db_service().health_check()
    return [
        HealthItem(name="API", status="healthy", message="DealFlow API is running", version=__version__),
        HealthItem(**db_status),
    ]
