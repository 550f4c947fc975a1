# This project was developed with assistance from AI tools.
"""User administration and profile schemas."""

from datetime import datetime

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field

from .notification import NotificationPreferences


class UserItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None = None
    phone: str | None = None
    role: UserRole
    is_active: bool = True
    created_at: datetime | None = None


class UserListResponse(BaseModel):
    data: list[UserItem]


class RoleUpdate(BaseModel):
    role: UserRole


class ActiveUpdate(BaseModel):
    is_active: bool


class ProfileResponse(UserItem):
    notification_preferences: NotificationPreferences = Field(
        default_factory=NotificationPreferences
    )


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=50)


class UnderwriterItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str | None = None
    email: str
    role: UserRole
