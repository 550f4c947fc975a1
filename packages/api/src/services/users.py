# This project was developed with assistance from AI tools.
"""Profiles: the local mirror of identity-provider users.

A profile is created the first time a user does something that needs a row
to point at (submitting a deal, commenting, requesting funding).
"""

import logging

from db import Profile
from db.enums import AuditAction, EntityType, UserRole
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from ..schemas.notification import NotificationPreferences
from ..schemas.user import ProfileUpdate
from .audit import RequestMeta, write_audit_log
from .errors import PermissionDeniedError

logger = logging.getLogger(__name__)


async def get_profile(session: AsyncSession, user_id: str) -> Profile | None:
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    return result.unique().scalar_one_or_none()


async def ensure_profile(session: AsyncSession, user: UserContext) -> Profile:
    """Return the caller's profile, creating it from the token claims if absent."""
    profile = await get_profile(session, user.user_id)
    if profile is None:
        profile = Profile(
            id=user.user_id,
            email=user.email,
            full_name=user.name or None,
            role=user.role,
            is_active=True,
            notification_preferences=NotificationPreferences().model_dump(),
        )
        session.add(profile)
        await session.flush()
        logger.info("Created profile for %s (%s)", user.user_id, user.role.value)
    return profile


async def list_users(session: AsyncSession, role: UserRole | None = None) -> list[Profile]:
    stmt = select(Profile).order_by(Profile.created_at.desc())
    if role is not None:
        stmt = stmt.where(Profile.role == role)
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def list_underwriters(session: AsyncSession) -> list[Profile]:
    """Active users a deal can be assigned to."""
    stmt = (
        select(Profile)
        .where(
            Profile.role.in_([UserRole.UNDERWRITER, UserRole.ADMIN]),
            Profile.is_active.is_(True),
        )
        .order_by(Profile.full_name)
    )
    result = await session.execute(stmt)
    return list(result.unique().scalars().all())


async def update_role(
    session: AsyncSession,
    admin: UserContext,
    user_id: str,
    role: UserRole,
    meta: RequestMeta | None = None,
) -> Profile | None:
    """Change a user's role. Admins cannot change their own role."""
    if user_id == admin.user_id:
        raise PermissionDeniedError("You cannot change your own role")

    profile = await get_profile(session, user_id)
    if profile is None:
        return None

    old_role = profile.role
    profile.role = role
    await write_audit_log(
        session,
        user_id=admin.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.USER,
        entity_id=user_id,
        old_values={"role": getattr(old_role, "value", old_role)},
        new_values={"role": role.value},
        meta=meta,
    )
    await session.commit()
    logger.info("User %s role changed %s -> %s by %s", user_id, old_role, role.value, admin.user_id)
    return profile


async def set_active(
    session: AsyncSession,
    admin: UserContext,
    user_id: str,
    is_active: bool,
    meta: RequestMeta | None = None,
) -> Profile | None:
    if user_id == admin.user_id and not is_active:
        raise PermissionDeniedError("You cannot deactivate your own account")

    profile = await get_profile(session, user_id)
    if profile is None:
        return None

    old = profile.is_active
    profile.is_active = is_active
    await write_audit_log(
        session,
        user_id=admin.user_id,
        action=AuditAction.UPDATE,
        entity_type=EntityType.USER,
        entity_id=user_id,
        old_values={"is_active": old},
        new_values={"is_active": is_active},
        meta=meta,
    )
    await session.commit()
    return profile


async def update_own_profile(
    session: AsyncSession, user: UserContext, update: ProfileUpdate
) -> Profile:
    profile = await ensure_profile(session, user)
    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)
    await session.commit()
    return profile


async def update_notification_preferences(
    session: AsyncSession, user: UserContext, prefs: NotificationPreferences
) -> Profile:
    profile = await ensure_profile(session, user)
    profile.notification_preferences = prefs.model_dump()
    await session.commit()
    return profile
