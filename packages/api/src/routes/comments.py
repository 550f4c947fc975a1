# This project was developed with assistance from AI tools.
"""Deal comment routes."""

from db import DealComment, get_db
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser
from ..schemas.comment import CommentCreate, CommentItem, CommentListResponse
from ..services import comment as comment_service
from ._common import request_meta, send_notifications_later, user_summary

router = APIRouter()


def _to_item(comment: DealComment) -> CommentItem:
    return CommentItem(
        id=comment.id,
        deal_id=comment.deal_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author=user_summary(comment.author),
    )


@router.get("/deals/{deal_id}/comments", response_model=CommentListResponse)
async def list_comments(
    deal_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CommentListResponse:
    comments = await comment_service.list_comments(session, user, deal_id)
    if comments is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return CommentListResponse(data=[_to_item(c) for c in comments])


@router.post(
    "/deals/{deal_id}/comments",
    response_model=CommentItem,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    deal_id: int,
    body: CommentCreate,
    background_tasks: BackgroundTasks,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CommentItem:
    """Comment on a deal; the agent and assignee are notified."""
    comment = await comment_service.add_comment(session, user, deal_id, body.content)
    send_notifications_later(background_tasks, session)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return _to_item(comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    request: Request,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    deleted = await comment_service.delete_comment(session, user, comment_id, request_meta(request))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
