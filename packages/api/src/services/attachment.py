# This project was developed with assistance from AI tools.
"""Deal attachments stored in S3.

The object is uploaded before the row is inserted. If the insert fails the
object is deleted again so storage never holds files the database does not
know about.
"""

import logging

from db import Attachment
from db.enums import ActivityType, AttachmentCategory, AuditAction, EntityType, UserRole
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..schemas.auth import UserContext
from .activity import log_activity
from .audit import RequestMeta, write_audit_log
from .deal import get_deal, is_staff
from .errors import DomainValidationError, PermissionDeniedError
from .scope import apply_data_scope
from .storage import ALLOWED_CONTENT_TYPES, get_storage_service
from .users import ensure_profile

logger = logging.getLogger(__name__)


class AttachmentTooLargeError(DomainValidationError):
    """Upload exceeds UPLOAD_MAX_SIZE_MB (413)."""


async def list_attachments(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    category: AttachmentCategory | None = None,
) -> list[Attachment] | None:
    if await get_deal(session, user, deal_id) is None:
        return None
    stmt = (
        select(Attachment)
        .where(Attachment.deal_id == deal_id)
        .order_by(Attachment.created_at.desc())
    )
    if category is not None:
        stmt = stmt.where(Attachment.category == category)
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def get_attachment(
    session: AsyncSession, user: UserContext, attachment_id: int
) -> Attachment | None:
    stmt = select(Attachment).where(Attachment.id == attachment_id)
    stmt = apply_data_scope(stmt, user.data_scope, join_to_deal=Attachment.deal)
    result = await session.execute(stmt)
    return result.unique().scalar_one_or_none()


async def upload_attachment(
    session: AsyncSession,
    user: UserContext,
    deal_id: int,
    *,
    filename: str,
    content_type: str,
    file_data: bytes,
    category: AttachmentCategory = AttachmentCategory.OTHER,
    meta: RequestMeta | None = None,
) -> Attachment | None:
    """Store a file against a deal. Investors cannot upload."""
    if user.role == UserRole.INVESTOR:
        raise PermissionDeniedError("Investors cannot upload deal attachments")
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise DomainValidationError(f"Unsupported content type: {content_type}")
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if len(file_data) > max_bytes:
        raise AttachmentTooLargeError(
            f"File size {len(file_data)} exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB"
        )
    if not file_data:
        raise DomainValidationError("File is empty")

    deal = await get_deal(session, user, deal_id)
    if deal is None:
        return None
    await ensure_profile(session, user)

    storage = get_storage_service()
    object_key = storage.build_object_key(deal_id, filename)
    await storage.upload_file(file_data, object_key, content_type)

    try:
        attachment = Attachment(
            deal_id=deal_id,
            uploaded_by=user.user_id,
            file_name=filename,
            file_path=object_key,
            file_size=len(file_data),
            mime_type=content_type,
            category=category,
        )
        session.add(attachment)
        await session.flush()
        log_activity(
            session,
            deal_id,
            user.user_id,
            ActivityType.ATTACHMENT_UPLOADED,
            f"Uploaded {filename} ({category.value})",
            {"attachment_id": attachment.id},
        )
        await write_audit_log(
            session,
            user_id=user.user_id,
            action=AuditAction.CREATE,
            entity_type=EntityType.ATTACHMENT,
            entity_id=attachment.id,
            new_values={"deal_id": deal_id, "file_name": filename, "category": category.value},
            meta=meta,
        )
        await session.commit()
    except SQLAlchemyError:
        logger.error("Attachment insert failed for deal %s, removing %s", deal_id, object_key)
        await session.rollback()
        await storage.delete_file(object_key)
        raise

    await session.refresh(attachment)
    return attachment


async def update_category(
    session: AsyncSession,
    user: UserContext,
    attachment_id: int,
    category: AttachmentCategory,
) -> Attachment | None:
    attachment = await get_attachment(session, user, attachment_id)
    if attachment is None:
        return None
    if attachment.uploaded_by != user.user_id and not is_staff(user):
        raise PermissionDeniedError("Only the uploader or staff can recategorize this file")
    attachment.category = category
    await session.commit()
    await session.refresh(attachment)
    return attachment


async def delete_attachment(
    session: AsyncSession,
    user: UserContext,
    attachment_id: int,
    meta: RequestMeta | None = None,
) -> bool:
    """Uploader, underwriter or admin. Removes the stored object too."""
    attachment = await get_attachment(session, user, attachment_id)
    if attachment is None:
        return False
    if attachment.uploaded_by != user.user_id and not is_staff(user):
        raise PermissionDeniedError("Only the uploader or staff can delete this file")

    object_key = attachment.file_path
    await write_audit_log(
        session,
        user_id=user.user_id,
        action=AuditAction.DELETE,
        entity_type=EntityType.ATTACHMENT,
        entity_id=attachment.id,
        old_values={"deal_id": attachment.deal_id, "file_name": attachment.file_name},
        meta=meta,
    )
    await session.delete(attachment)
    await session.commit()
    await get_storage_service().delete_file(object_key)
    return True


async def get_download_url(
    session: AsyncSession, user: UserContext, attachment_id: int
) -> str | None:
    attachment = await get_attachment(session, user, attachment_id)
    if attachment is None:
        return None
    return await get_storage_service().get_download_url(
        attachment.file_path, expires_in=settings.PRESIGNED_URL_TTL
    )
