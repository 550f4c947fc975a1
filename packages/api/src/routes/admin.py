# This project was developed with assistance from AI tools.
"""Admin endpoints for demo data seeding and audit trail queries."""

from datetime import datetime

from db import get_db
from db.enums import AuditAction, EntityType, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas import Pagination
from ..schemas.admin import SeedResponse, SeedStatusResponse
from ..schemas.audit import (
    AuditChainVerifyResponse,
    AuditHistoryResponse,
    AuditLogItem,
    AuditLogListResponse,
)
from ..services.audit import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    get_entity_history,
    search_audit_logs,
    verify_audit_chain,
)
from ..services.seed.seeder import get_seed_status, seed_demo_data

router = APIRouter()


@router.post(
    "/seed",
    response_model=SeedResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def seed_data(
    force: bool = False,
    session: AsyncSession = Depends(get_db),
) -> SeedResponse:
    """Seed demo data. Pass force=true to re-seed.

    Simulated for demonstration purposes -- not real deals.
    """
    result = await seed_demo_data(session, force=force)
    return SeedResponse(**result)


@router.get(
    "/seed/status",
    response_model=SeedStatusResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def seed_status(
    session: AsyncSession = Depends(get_db),
) -> SeedStatusResponse:
    """Check if demo data has been seeded."""
    result = await get_seed_status(session)
    return SeedStatusResponse(**result)


@router.get(
    "/audit",
    response_model=AuditLogListResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def search_audit(
    entity_type: EntityType | None = None,
    entity_id: str | None = None,
    user_id: str | None = None,
    action: AuditAction | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    session: AsyncSession = Depends(get_db),
) -> AuditLogListResponse:
    """Filtered audit entries, newest first."""
    rows, total = await search_audit_logs(
        session,
        entity_type=entity_type.value if entity_type else None,
        entity_id=entity_id,
        user_id=user_id,
        action=action.value if action else None,
        start_date=start_date,
        end_date=end_date,
        offset=offset,
        limit=limit,
    )
    return AuditLogListResponse(
        data=[AuditLogItem.model_validate(r) for r in rows],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=offset + len(rows) < total,
        ),
    )


@router.get(
    "/audit/verify",
    response_model=AuditChainVerifyResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def verify_audit(
    session: AsyncSession = Depends(get_db),
) -> AuditChainVerifyResponse:
    """Verify audit trail hash chain integrity."""
    result = await verify_audit_chain(session)
    return AuditChainVerifyResponse(**result)


@router.get(
    "/audit/{entity_type}/{entity_id}",
    response_model=AuditHistoryResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def entity_history(
    entity_type: EntityType,
    entity_id: str,
    session: AsyncSession = Depends(get_db),
) -> AuditHistoryResponse:
    """Every audit entry for one entity, oldest first."""
    rows = await get_entity_history(session, entity_type.value, entity_id)
    return AuditHistoryResponse(
        entity_type=entity_type.value,
        entity_id=entity_id,
        count=len(rows),
        entries=[AuditLogItem.model_validate(r) for r in rows],
    )
