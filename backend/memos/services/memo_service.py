"""
Memos Backend - Memo Service (Business Logic)
==============================================

What:  Create, list, read, update and archive memos, plus the public
       activity stats.
How:   Every write keeps two derived associations in step with the memo:
       tags (extracted from content) and attached resources (by id).
Who:   Called by the /api/memo routes.

Visibility Rules (read side):
    PUBLIC     anyone, including anonymous callers
    PROTECTED  any authenticated user; anonymous callers get 401
    PRIVATE    the creator only; everyone else gets 403

    Listing without `visibility` or `creatorId` returns PUBLIC memos only.
    Listing one creator's memos returns what the viewer is allowed to read.

Write Rules:
    Update and delete are allowed for the creator and for a HOST.
    Delete is soft: row_status becomes ARCHIVED and the row stays.
"""

import logging
import uuid
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from memos.clock import SECONDS_PER_DAY, current_epoch, start_of_day
from memos.config import Settings
from memos.database import translate_db_errors
from memos.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from memos.markdown.tags import extract_tags
from memos.models.enums import RowStatus, Visibility
from memos.models.memo import Memo
from memos.models.resource import Resource
from memos.models.tag import Tag
from memos.models.user import User
from memos.schemas.memo import (
    HistogramBucket,
    MemoCreateRequest,
    MemoRecord,
    MemoStats,
    MemoUpdateRequest,
    MemoView,
    memo_record,
)
from memos.schemas.resource import resource_record
from memos.services.memo_view import to_memo_view
from memos.services.tag_service import tag_service
from memos.services.user_service import is_host

logger = logging.getLogger(__name__)

# What: Window covered by the stats histogram
STATS_WINDOW_DAYS = 30

DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 1000


def validate_content(content: Optional[str], limit: int) -> str:
    if content is None or not content.strip():
        raise ValidationError(message="Content is required", field="content")
    if len(content) > limit:
        raise ValidationError(
            message=f"Content exceeds the limit of {limit} characters",
            field="content",
            context={"limit": limit, "length": len(content)},
        )
    return content


def can_read(memo: Memo, viewer: Optional[User]) -> bool:
    if memo.visibility == Visibility.PUBLIC.value:
        return True
    if viewer is None:
        return False
    if memo.visibility == Visibility.PROTECTED.value:
        return True
    return memo.creator_id == viewer.id


class MemoService:

    # ── Internal Helpers ──────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, memo_id: int) -> Memo:
        memo = await db.scalar(select(Memo).where(Memo.id == memo_id))
        if memo is None:
            raise NotFoundError(resource="memo", resource_id=str(memo_id))
        return memo

    def _check_read(self, memo: Memo, viewer: Optional[User]) -> None:
        if can_read(memo, viewer):
            return
        if viewer is None and memo.visibility == Visibility.PROTECTED.value:
            raise AuthenticationError()
        raise PermissionDeniedError(context={"memo_id": memo.id})

    def _check_write(self, memo: Memo, actor: User) -> None:
        if memo.creator_id != actor.id and not is_host(actor):
            raise PermissionDeniedError(context={"memo_id": memo.id})

    async def _sync_tags(self, db: AsyncSession, memo: Memo) -> None:
        names = extract_tags(memo.content)
        memo.tags = await tag_service.ensure_tags(db, memo.creator_id, names)

    async def _resolve_resources(
        self, db: AsyncSession, owner_id: int, resource_ids: Sequence[int]
    ) -> List[Resource]:
        """Load the owner's resources for `resource_ids`, preserving order."""
        unique_ids = list(dict.fromkeys(resource_ids))
        if not unique_ids:
            return []
        result = await db.execute(
            select(Resource).where(Resource.id.in_(unique_ids), Resource.creator_id == owner_id)
        )
        by_id = {resource.id: resource for resource in result.scalars().all()}
        missing = [rid for rid in unique_ids if rid not in by_id]
        if missing:
            raise NotFoundError(resource="resource", resource_id=",".join(str(m) for m in missing))
        return [by_id[rid] for rid in unique_ids]

    # ── Create ────────────────────────────────────────────────────────────

    @translate_db_errors("create_memo")
    async def create_memo(
        self,
        db: AsyncSession,
        actor: User,
        payload: MemoCreateRequest,
        settings: Settings,
    ) -> MemoRecord:
        """
        Create a memo owned by `actor`.

        Workflow:
            1. Validate content (required, bounded by the configured limit)
            2. Insert the memo row
            3. Link tags extracted from the content (creating tag rows)
            4. Link the requested resources (must belong to the actor)
        """
        content = validate_content(payload.content, settings.memo_content_length_limit)
        visibility = (payload.visibility.value if payload.visibility else settings.default_memo_visibility)

        now = current_epoch()
        memo = Memo(
            uid=str(uuid.uuid4()),
            creator_id=actor.id,
            content=content,
            visibility=visibility,
            row_status=RowStatus.NORMAL.value,
            created_ts=now,
            updated_ts=now,
        )
        memo.tags = []
        memo.resources = await self._resolve_resources(db, actor.id, payload.resource_id_list)
        db.add(memo)
        await db.flush()

        await self._sync_tags(db, memo)
        await db.flush()

        logger.info(
            "Memo %d created by user %d (%s, %d tag(s), %d resource(s))",
            memo.id, actor.id, visibility, len(memo.tags), len(memo.resources),
        )
        return memo_record(memo)

    # ── Read ──────────────────────────────────────────────────────────────

    @translate_db_errors("list_memos")
    async def list_memos(
        self,
        db: AsyncSession,
        viewer: Optional[User],
        row_status: RowStatus = RowStatus.NORMAL,
        creator_id: Optional[int] = None,
        tag: Optional[str] = None,
        visibility: Optional[Visibility] = None,
        limit: int = DEFAULT_LIST_LIMIT,
        offset: int = 0,
    ) -> Tuple[List[MemoRecord], int]:
        """
        List memos newest first.

        Returns:
            (page of records, total matching count before limit/offset)
        """
        conditions = [Memo.row_status == row_status.value]

        if creator_id is not None:
            conditions.append(Memo.creator_id == creator_id)

        if visibility is not None:
            conditions.append(Memo.visibility == visibility.value)
            if visibility == Visibility.PRIVATE:
                # Only ever the viewer's own private memos
                conditions.append(Memo.creator_id == viewer.id if viewer else false())
            elif visibility == Visibility.PROTECTED and viewer is None:
                conditions.append(false())
        elif creator_id is not None:
            if viewer is None:
                conditions.append(Memo.visibility == Visibility.PUBLIC.value)
            elif viewer.id != creator_id:
                conditions.append(Memo.visibility != Visibility.PRIVATE.value)
        else:
            conditions.append(Memo.visibility == Visibility.PUBLIC.value)

        if tag:
            conditions.append(Memo.tags.any(Tag.name == tag.lstrip("#")))

        total = await db.scalar(select(func.count(Memo.id)).where(*conditions))
        result = await db.execute(
            select(Memo)
            .where(*conditions)
            .order_by(Memo.created_ts.desc(), Memo.id.desc())
            .limit(limit)
            .offset(offset)
        )
        records = [memo_record(memo) for memo in result.scalars().all()]
        return records, total or 0

    @translate_db_errors("get_memo")
    async def get_memo(self, db: AsyncSession, viewer: Optional[User], memo_id: int) -> MemoRecord:
        memo = await self._load(db, memo_id)
        self._check_read(memo, viewer)
        return memo_record(memo)

    @translate_db_errors("get_memo_view")
    async def get_memo_view(
        self,
        db: AsyncSession,
        viewer: Optional[User],
        memo_id: int,
        inline_mode: str,
    ) -> MemoView:
        memo = await self._load(db, memo_id)
        self._check_read(memo, viewer)
        resources = [resource_record(resource) for resource in memo.resources]
        return to_memo_view(memo_record(memo), resources, inline_mode=inline_mode)

    @translate_db_errors("get_stats")
    async def get_stats(self, db: AsyncSession, now: Optional[int] = None) -> MemoStats:
        """
        Count NORMAL PUBLIC memos, and bucket the last 30 days of them by
        UTC day (newest day first, empty days omitted).
        """
        if now is None:
            now = current_epoch()
        public = [
            Memo.row_status == RowStatus.NORMAL.value,
            Memo.visibility == Visibility.PUBLIC.value,
        ]

        total = await db.scalar(select(func.count(Memo.id)).where(*public))

        since = now - STATS_WINDOW_DAYS * SECONDS_PER_DAY
        result = await db.execute(select(Memo.created_ts).where(*public, Memo.created_ts > since))
        per_day = Counter(start_of_day(ts) for ts in result.scalars().all())

        histogram = [
            HistogramBucket(ts=day, count=count)
            for day, count in sorted(per_day.items(), reverse=True)
        ]
        return MemoStats(total=total or 0, daily_histogram=histogram)

    # ── Update / Delete ───────────────────────────────────────────────────

    @translate_db_errors("update_memo")
    async def update_memo(
        self,
        db: AsyncSession,
        actor: User,
        memo_id: int,
        payload: MemoUpdateRequest,
        settings: Settings,
    ) -> MemoRecord:
        """
        Partially update a memo. A content change re-syncs tags; a
        `resourceIdList` replaces the attached resources wholesale.
        """
        memo = await self._load(db, memo_id)
        self._check_write(memo, actor)

        if payload.content is not None:
            memo.content = validate_content(payload.content, settings.memo_content_length_limit)
            await self._sync_tags(db, memo)
        if payload.visibility is not None:
            memo.visibility = payload.visibility.value
        if payload.resource_id_list is not None:
            memo.resources = await self._resolve_resources(
                db, memo.creator_id, payload.resource_id_list
            )

        memo.updated_ts = current_epoch()
        await db.flush()
        logger.info("Memo %d updated by user %d", memo.id, actor.id)
        return memo_record(memo)

    @translate_db_errors("delete_memo")
    async def delete_memo(self, db: AsyncSession, actor: User, memo_id: int) -> None:
        memo = await self._load(db, memo_id)
        self._check_write(memo, actor)

        memo.row_status = RowStatus.ARCHIVED.value
        memo.updated_ts = current_epoch()
        await db.flush()
        logger.info("Memo %d archived by user %d", memo.id, actor.id)


# ── Singleton Instance ────────────────────────────────────────────────────
memo_service = MemoService()
