"""
Workspace route handlers: instance profile and setting documents.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import Settings, get_settings
from memos.database import get_db_session
from memos.dependencies import get_current_user
from memos.models.user import User
from memos.schemas.common import ErrorResponse
from memos.schemas.workspace import WorkspaceProfile
from memos.services.workspace_service import workspace_service

router = APIRouter(prefix="/api/workspace", tags=["Workspace"])


@router.get("/profile", response_model=WorkspaceProfile, summary="Workspace profile")
async def get_profile(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> WorkspaceProfile:
    instance_url = str(request.base_url).rstrip("/")
    return await workspace_service.get_profile(db, instance_url)


@router.get(
    "/setting",
    responses={
        400: {"description": "Setting name missing", "model": ErrorResponse},
        404: {"description": "Unknown setting", "model": ErrorResponse},
    },
    summary="Get a workspace setting",
    description="`name` is `settings/GENERAL`, `settings/MEMO_RELATED` or `settings/STORAGE`.",
)
async def get_setting(
    name: Optional[str] = Query(default=None),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    return workspace_service.get_setting(name, settings)


@router.post(
    "/setting",
    responses={403: {"description": "HOST only", "model": ErrorResponse}},
    summary="Update a workspace setting (HOST only)",
)
async def update_setting(
    body: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    return workspace_service.update_setting(current_user, body)
