# This project was developed with assistance from AI tools.
"""Notification schemas."""

from datetime import datetime
from typing import Literal

from db.enums import NotificationType
from pydantic import BaseModel, ConfigDict


class NotificationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: NotificationType
    title: str
    message: str
    deal_id: int | None = None
    action_url: str | None = None
    is_read: bool = False
    read_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    data: list[NotificationItem]
    unread_count: int


class NotificationPreferences(BaseModel):
    """Per-user channel and category switches.

    In-app notifications are always recorded; these only gate outbound
    email / SMS dispatch.
    """

    email: bool = True
    sms: bool = False
    push: bool = True
    digest: Literal["none", "daily", "weekly"] = "none"
    status_changes: bool = True
    new_assignments: bool = True
    comments: bool = True
    funding_updates: bool = True


# NotificationType -> preference category switch
PREFERENCE_FOR_TYPE: dict[NotificationType, str] = {
    NotificationType.STATUS_CHANGE: "status_changes",
    NotificationType.ASSIGNMENT: "new_assignments",
    NotificationType.COMMENT: "comments",
    NotificationType.NEW_DEAL: "new_assignments",
    NotificationType.FUNDING_REQUEST: "funding_updates",
    NotificationType.FUNDING_UPDATE: "funding_updates",
}
