# This project was developed with assistance from AI tools.
"""Deal attachment upload, listing and download routes."""

from db import get_db
from db.enums import AttachmentCategory
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..middleware.auth import CurrentUser
from ..schemas.attachment import (
    AttachmentCategoryUpdate,
    AttachmentDownload,
    AttachmentItem,
    AttachmentListResponse,
)
from ..services import attachment as attachment_service
from ..services.storage import ALLOWED_CONTENT_TYPES
from ._common import request_meta

router = APIRouter()

_CHUNK_SIZE = 1024 * 1024


async def _read_limited(file: UploadFile) -> bytes:
    """Read the upload in chunks, stopping as soon as it passes the size limit."""
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    too_large = HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"File exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB",
    )
    if file.size is not None and file.size > max_bytes:
        raise too_large

    chunks: list[bytes] = []
    total = 0
    while chunk := await file.read(_CHUNK_SIZE):
        total += len(chunk)
        if total > max_bytes:
            raise too_large
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(
    "/deals/{deal_id}/attachments",
    response_model=AttachmentItem,
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachment(
    deal_id: int,
    request: Request,
    user: CurrentUser,
    file: UploadFile = File(...),
    category: AttachmentCategory = Form(AttachmentCategory.OTHER),
    session: AsyncSession = Depends(get_db),
) -> AttachmentItem:
    """Upload a file (photo, contract, inspection, ...) to a deal."""
    content_type = file.content_type or ""
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=422,
            detail=f"Unsupported file type: {content_type}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}",
        )

    file_data = await _read_limited(file)

    try:
        attachment = await attachment_service.upload_attachment(
            session,
            user,
            deal_id,
            filename=file.filename or "upload",
            content_type=content_type,
            file_data=file_data,
            category=category,
            meta=request_meta(request),
        )
    except attachment_service.AttachmentTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc

    if attachment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return AttachmentItem.model_validate(attachment)


@router.get("/deals/{deal_id}/attachments", response_model=AttachmentListResponse)
async def list_attachments(
    deal_id: int,
    user: CurrentUser,
    category: AttachmentCategory | None = None,
    session: AsyncSession = Depends(get_db),
) -> AttachmentListResponse:
    attachments = await attachment_service.list_attachments(session, user, deal_id, category)
    if attachments is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Deal {deal_id} not found")
    return AttachmentListResponse(data=[AttachmentItem.model_validate(a) for a in attachments])


@router.patch("/attachments/{attachment_id}", response_model=AttachmentItem)
async def update_category(
    attachment_id: int,
    body: AttachmentCategoryUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AttachmentItem:
    attachment = await attachment_service.update_category(
        session, user, attachment_id, body.category
    )
    if attachment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
    return AttachmentItem.model_validate(attachment)


@router.get("/attachments/{attachment_id}/download", response_model=AttachmentDownload)
async def download_attachment(
    attachment_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> AttachmentDownload:
    """Short-lived presigned URL for the stored object."""
    url = await attachment_service.get_download_url(session, user, attachment_id)
    if url is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
    return AttachmentDownload(url=url, expires_in=settings.PRESIGNED_URL_TTL)


@router.delete("/attachments/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attachment(
    attachment_id: int,
    request: Request,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    deleted = await attachment_service.delete_attachment(
        session, user, attachment_id, request_meta(request)
    )
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")
