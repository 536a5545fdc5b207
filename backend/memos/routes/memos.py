"""
Memos Backend - Memo Route Handlers
====================================

What:  /api/memo CRUD, public stats and the rich memo view.
How:   Thin handlers; visibility and ownership rules live in MemoService.

Route Inventory:
    POST   /api/memo              create (auth)
    GET    /api/memo              list (optional auth); X-Total-Count header
    GET    /api/memo/stats        public activity stats
    GET    /api/memo/{id}         read (optional auth)
    PATCH  /api/memo/{id}         update (creator or HOST)
    DELETE /api/memo/{id}         archive (creator or HOST)
    GET    /api/memo/{id}/view    view with parsed markdown nodes

Caching:
    Responses depend on who is asking, so nothing here is cacheable by
    shared caches.
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from memos.config import Settings, get_settings
from memos.database import get_db_session
from memos.dependencies import get_current_user, get_optional_user
from memos.models.enums import RowStatus, Visibility
from memos.models.user import User
from memos.schemas.common import ErrorResponse, MessageResponse
from memos.schemas.memo import (
    MemoCreateRequest,
    MemoRecord,
    MemoStats,
    MemoUpdateRequest,
    MemoView,
)
from memos.services.memo_service import DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT, memo_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/memo", tags=["Memos"])

READ_ERRORS = {
    401: {"description": "PROTECTED memo read anonymously, or invalid token", "model": ErrorResponse},
    403: {"description": "PRIVATE memo of another user", "model": ErrorResponse},
    404: {"description": "Memo not found", "model": ErrorResponse},
}
WRITE_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Not the creator and not HOST", "model": ErrorResponse},
    404: {"description": "Memo not found", "model": ErrorResponse},
}


@router.post(
    "",
    response_model=MemoRecord,
    responses={
        400: {"description": "Content missing or over the length limit", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        404: {"description": "Attached resource not found", "model": ErrorResponse},
    },
    summary="Create a memo",
    description=(
        "Creates a memo for the authenticated user. Hashtags in the content are "
        "extracted and linked as tags; `resourceIdList` attaches uploaded resources."
    ),
)
async def create_memo(
    payload: MemoCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> MemoRecord:
    return await memo_service.create_memo(db, current_user, payload, settings)


@router.get(
    "",
    response_model=List[MemoRecord],
    responses={401: {"description": "Invalid bearer token", "model": ErrorResponse}},
    summary="List memos",
    description=(
        "Lists memos newest first. Without `visibility` or `creatorId` only PUBLIC "
        "memos are returned; PRIVATE memos are only ever returned to their creator. "
        "The total match count is sent in the X-Total-Count header."
    ),
)
async def list_memos(
    response: Response,
    row_status: RowStatus = Query(default=RowStatus.NORMAL, alias="rowStatus"),
    creator_id: Optional[int] = Query(default=None, alias="creatorId"),
    tag: Optional[str] = Query(default=None, description="Only memos carrying this tag"),
    visibility: Optional[Visibility] = Query(default=None),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=MAX_LIST_LIMIT),
    offset: int = Query(default=0, ge=0),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[MemoRecord]:
    records, total = await memo_service.list_memos(
        db,
        viewer,
        row_status=row_status,
        creator_id=creator_id,
        tag=tag,
        visibility=visibility,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(total)
    return records


@router.get(
    "/stats",
    response_model=MemoStats,
    summary="Public memo statistics",
    description="Total NORMAL PUBLIC memos and a per-day histogram of the last 30 days.",
)
async def get_stats(db: AsyncSession = Depends(get_db_session)) -> MemoStats:
    return await memo_service.get_stats(db)


@router.get(
    "/{memo_id}",
    response_model=MemoRecord,
    responses=READ_ERRORS,
    summary="Get a memo",
)
async def get_memo(
    memo_id: int,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> MemoRecord:
    return await memo_service.get_memo(db, viewer, memo_id)


@router.patch(
    "/{memo_id}",
    response_model=MemoRecord,
    responses={**WRITE_ERRORS, 400: {"description": "Invalid content", "model": ErrorResponse}},
    summary="Update a memo",
)
async def update_memo(
    memo_id: int,
    payload: MemoUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> MemoRecord:
    return await memo_service.update_memo(db, current_user, memo_id, payload, settings)


@router.delete(
    "/{memo_id}",
    response_model=MessageResponse,
    responses=WRITE_ERRORS,
    summary="Archive a memo",
    description="Soft delete: the memo's row status becomes ARCHIVED.",
)
async def delete_memo(
    memo_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await memo_service.delete_memo(db, current_user, memo_id)
    return MessageResponse(message="Memo deleted successfully")


@router.get(
    "/{memo_id}/view",
    response_model=MemoView,
    responses=READ_ERRORS,
    summary="Get a memo in the rich client view",
    description=(
        "Returns the memo with resource names (`memos/{id}`, `users/{id}`), "
        "parsed markdown nodes, a snippet and ISO timestamps."
    ),
)
async def get_memo_view(
    memo_id: int,
    inline_mode: Literal["paragraph", "flat"] = Query(default="paragraph", alias="inlineMode"),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> MemoView:
    return await memo_service.get_memo_view(db, viewer, memo_id, inline_mode)
