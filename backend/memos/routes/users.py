"""
Memos Backend - User Route Handlers
====================================

What:  /api/user endpoints: the caller's own record, the HOST-only user
       list, public profiles, profile updates and per-user settings.
How:   Thin handlers; access rules live in UserService.

Route Inventory:
    GET   /api/user/me             caller's full record
    GET   /api/user                HOST only, paginated
    GET   /api/user/{id}           public profile
    PATCH /api/user/{id}           self or HOST
    GET   /api/user/{id}/setting   self or HOST (default row created on first read)
    PATCH /api/user/{id}/setting   self or HOST
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import Settings, get_settings
from memos.database import get_db_session
from memos.dependencies import get_current_user
from memos.models.enums import RowStatus
from memos.models.user import User
from memos.schemas.common import ErrorResponse
from memos.schemas.user import (
    UserProfile,
    UserRecord,
    UserSettingRecord,
    UserSettingUpdateRequest,
    UserUpdateRequest,
    user_record,
)
from memos.services.user_service import user_service

router = APIRouter(prefix="/api/user", tags=["Users"])

AUTH_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    404: {"description": "User not found", "model": ErrorResponse},
}


@router.get(
    "/me",
    response_model=UserRecord,
    responses=AUTH_ERRORS,
    summary="Get the authenticated user",
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserRecord:
    return user_record(current_user)


@router.get(
    "",
    response_model=List[UserRecord],
    responses={**AUTH_ERRORS, 403: {"description": "HOST only", "model": ErrorResponse}},
    summary="List users (HOST only)",
)
async def list_users(
    row_status: RowStatus = Query(default=RowStatus.NORMAL, alias="rowStatus"),
    limit: int = Query(default=50, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserRecord]:
    return await user_service.list_users(
        db, current_user, row_status=row_status, limit=limit, offset=offset
    )


@router.get(
    "/{user_id}",
    response_model=UserProfile,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user's public profile",
)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db, user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRecord,
    responses={
        **AUTH_ERRORS,
        403: {"description": "Not this user and not HOST", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Update a user",
)
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserRecord:
    return await user_service.update_user(db, current_user, user_id, payload)


@router.get(
    "/{user_id}/setting",
    response_model=UserSettingRecord,
    responses={**AUTH_ERRORS, 403: {"description": "Not this user and not HOST", "model": ErrorResponse}},
    summary="Get a user's settings",
)
async def get_user_setting(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> UserSettingRecord:
    return await user_service.get_setting(db, current_user, user_id, settings)


@router.patch(
    "/{user_id}/setting",
    response_model=UserSettingRecord,
    responses={**AUTH_ERRORS, 403: {"description": "Not this user and not HOST", "model": ErrorResponse}},
    summary="Update a user's settings",
)
async def update_user_setting(
    user_id: int,
    payload: UserSettingUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> UserSettingRecord:
    return await user_service.update_setting(db, current_user, user_id, payload, settings)
