# This project was developed with assistance from AI tools.
"""User administration and own-profile routes."""

from db import Profile, get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import AdminUser, CurrentUser, StaffUser
from ..schemas.notification import NotificationPreferences
from ..schemas.user import (
    ActiveUpdate,
    ProfileResponse,
    ProfileUpdate,
    RoleUpdate,
    UnderwriterItem,
    UserItem,
    UserListResponse,
)
from ..services import users as user_service
from ..services.notification import get_preferences
from ._common import request_meta

router = APIRouter()


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        phone=profile.phone,
        role=profile.role,
        is_active=profile.is_active,
        created_at=profile.created_at,
        notification_preferences=get_preferences(profile),
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    _admin: AdminUser,
    role: UserRole | None = None,
    session: AsyncSession = Depends(get_db),
) -> UserListResponse:
    users = await user_service.list_users(session, role)
    return UserListResponse(data=[UserItem.model_validate(u) for u in users])


@router.get("/users/underwriters", response_model=list[UnderwriterItem])
async def list_underwriters(
    _user: StaffUser,
    session: AsyncSession = Depends(get_db),
) -> list[UnderwriterItem]:
    """Active users a deal can be assigned to."""
    return [UnderwriterItem.model_validate(p) for p in await user_service.list_underwriters(session)]


@router.patch("/users/{user_id}/role", response_model=UserItem)
async def update_role(
    user_id: str,
    body: RoleUpdate,
    request: Request,
    admin: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> UserItem:
    profile = await user_service.update_role(
        session, admin, user_id, body.role, request_meta(request)
    )
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserItem.model_validate(profile)


@router.patch("/users/{user_id}/active", response_model=UserItem)
async def set_active(
    user_id: str,
    body: ActiveUpdate,
    request: Request,
    admin: AdminUser,
    session: AsyncSession = Depends(get_db),
) -> UserItem:
    profile = await user_service.set_active(
        session, admin, user_id, body.is_active, request_meta(request)
    )
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserItem.model_validate(profile)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    """The caller's profile, created from the token on first access."""
    profile = await user_service.ensure_profile(session, user)
    await session.commit()
    return _profile_response(profile)


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    body: ProfileUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    profile = await user_service.update_own_profile(session, user, body)
    return _profile_response(profile)


@router.put("/profile/notifications", response_model=ProfileResponse)
async def update_notification_preferences(
    body: NotificationPreferences,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    profile = await user_service.update_notification_preferences(session, user, body)
    return _profile_response(profile)
