# This project was developed with assistance from AI tools.
"""In-app notification inbox routes."""

from db import get_db
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.notification import NotificationItem, NotificationListResponse
from ..services import notification as notification_service

router = APIRouter()


@router.get("/", response_model=NotificationListResponse)
async def list_notifications(
    user: CurrentUser,
    limit: int = Query(default=notification_service.LIST_LIMIT, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    """Newest notifications plus the unread count across the whole inbox."""
    items, unread = await notification_service.list_notifications(session, user, limit)
    return NotificationListResponse(
        data=[NotificationItem.model_validate(n) for n in items],
        unread_count=unread,
    )


@router.post("/read-all")
async def mark_all_read(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> dict:
    updated = await notification_service.mark_all_read(session, user)
    return {"updated": updated}


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    if not await notification_service.mark_read(session, user, notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    if not await notification_service.delete_notification(session, user, notification_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
