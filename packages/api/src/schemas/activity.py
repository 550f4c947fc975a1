# This project was developed with assistance from AI tools.
"""Deal activity feed schemas."""

from datetime import datetime

from db.enums import ActivityType
from pydantic import BaseModel, ConfigDict, Field


class ActivityItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    user_id: str | None = None
    activity_type: ActivityType
    description: str
    metadata: dict | None = Field(default=None, validation_alias="extra")
    created_at: datetime


class ActivityListResponse(BaseModel):
    data: list[ActivityItem]
