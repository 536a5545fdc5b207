"""
Tag route handlers: list the caller's tags with memo counts, create one
explicitly, delete one.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memos.database import get_db_session
from memos.dependencies import get_current_user
from memos.models.user import User
from memos.schemas.common import ErrorResponse, MessageResponse
from memos.schemas.tag import TagCreateRequest, TagRecord, TagWithCount
from memos.services.tag_service import tag_service

router = APIRouter(prefix="/api/tag", tags=["Tags"])


@router.get("", response_model=List[TagWithCount], summary="List the caller's tags")
async def list_tags(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[TagWithCount]:
    return await tag_service.list_tags(db, current_user)


@router.post(
    "",
    response_model=TagRecord,
    responses={400: {"description": "Invalid tag name", "model": ErrorResponse}},
    summary="Create a tag (idempotent)",
)
async def create_tag(
    payload: TagCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TagRecord:
    return await tag_service.create_tag(db, current_user, payload.name)


@router.delete(
    "/{tag_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Tag not found", "model": ErrorResponse}},
    summary="Delete a tag and its memo links",
)
async def delete_tag(
    tag_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await tag_service.delete_tag(db, current_user, tag_id)
    return MessageResponse(message="Tag deleted successfully")
