# This project was developed with assistance from AI tools.
"""Deal attachment schemas."""

from datetime import datetime

from db.enums import AttachmentCategory
from pydantic import BaseModel, ConfigDict


class AttachmentItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    deal_id: int
    uploaded_by: str
    file_name: str
    file_size: int | None = None
    mime_type: str | None = None
    category: AttachmentCategory
    created_at: datetime


class AttachmentListResponse(BaseModel):
    data: list[AttachmentItem]


class AttachmentCategoryUpdate(BaseModel):
    category: AttachmentCategory


class AttachmentDownload(BaseModel):
    url: str
    expires_in: int
