# This project was developed with assistance from AI tools.
"""Deal comment schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from .deal import UserSummary

MAX_COMMENT_LENGTH = 5000


class CommentCreate(BaseModel):
    content: str = Field(max_length=MAX_COMMENT_LENGTH)

    @field_validator("content")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment cannot be empty")
        return v


class CommentItem(BaseModel):
    id: int
    deal_id: int
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime | None = None
    author: UserSummary | None = None


class CommentListResponse(BaseModel):
    data: list[CommentItem]
