"""
Memos Backend - Tag Service
============================

What:  Per-user tag rows: listing with memo counts, explicit create/delete,
       and the get-or-create step MemoService runs whenever memo content
       changes.
How:   Tag names come from `extract_tags()`; a tag row belongs to one
       creator and is linked to memos through `memo_tag`.
"""

import logging
from typing import Dict, List, Sequence

from sqlalchemy import and_, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from memos.clock import current_epoch
from memos.database import translate_db_errors
from memos.exceptions import NotFoundError, ValidationError
from memos.markdown.tags import TAG_RE, is_valid_tag
from memos.models.enums import RowStatus
from memos.models.memo import Memo, memo_tag
from memos.models.tag import Tag
from memos.models.user import User
from memos.schemas.tag import TagRecord, TagWithCount, tag_record

logger = logging.getLogger(__name__)


def normalize_tag_name(name: str) -> str:
    """
    Accept `work` or `#work`; reject anything `extract_tags()` would not
    produce from memo text.
    """
    candidate = (name or "").strip()
    if candidate.startswith("#"):
        candidate = candidate[1:]
    match = TAG_RE.fullmatch(f"#{candidate}")
    if match is None or not is_valid_tag(candidate):
        raise ValidationError(
            message=f"Invalid tag name '{name}'",
            field="name",
        )
    return candidate


class TagService:

    async def ensure_tags(
        self, db: AsyncSession, creator_id: int, names: Sequence[str]
    ) -> List[Tag]:
        """
        Return Tag rows for `names` (same order), creating missing ones.

        Runs inside the caller's transaction; new rows are flushed so they
        have ids before being linked.
        """
        if not names:
            return []

        result = await db.execute(
            select(Tag).where(Tag.creator_id == creator_id, Tag.name.in_(list(names)))
        )
        existing: Dict[str, Tag] = {tag.name: tag for tag in result.scalars().all()}

        now = current_epoch()
        created = []
        for name in names:
            if name not in existing:
                tag = Tag(creator_id=creator_id, name=name, created_ts=now)
                db.add(tag)
                existing[name] = tag
                created.append(name)
        if created:
            await db.flush()
            logger.debug("Created %d tag(s) for user %d: %s", len(created), creator_id, created)

        return [existing[name] for name in names]

    @translate_db_errors("list_tags")
    async def list_tags(self, db: AsyncSession, actor: User) -> List[TagWithCount]:
        memo_count = func.count(Memo.id)
        result = await db.execute(
            select(Tag, memo_count)
            .outerjoin(memo_tag, memo_tag.c.tag_id == Tag.id)
            .outerjoin(
                Memo,
                and_(
                    Memo.id == memo_tag.c.memo_id,
                    Memo.row_status == RowStatus.NORMAL.value,
                ),
            )
            .where(Tag.creator_id == actor.id)
            .group_by(Tag.id)
            .order_by(Tag.name.asc())
        )
        return [
            TagWithCount(**tag_record(tag).model_dump(), memo_count=count)
            for tag, count in result.all()
        ]

    @translate_db_errors("create_tag")
    async def create_tag(self, db: AsyncSession, actor: User, name: str) -> TagRecord:
        """Create a tag; creating an existing name returns the existing row."""
        normalized = normalize_tag_name(name)
        (tag,) = await self.ensure_tags(db, actor.id, [normalized])
        return tag_record(tag)

    @translate_db_errors("delete_tag")
    async def delete_tag(self, db: AsyncSession, actor: User, tag_id: int) -> None:
        """Delete one of the actor's tags and every memo link to it."""
        tag = await db.scalar(
            select(Tag).where(Tag.id == tag_id, Tag.creator_id == actor.id)
        )
        if tag is None:
            raise NotFoundError(resource="tag", resource_id=str(tag_id))

        await db.execute(delete(memo_tag).where(memo_tag.c.tag_id == tag.id))
        await db.delete(tag)
        await db.flush()
        logger.info("Tag %d ('%s') deleted by user %d", tag_id, tag.name, actor.id)


# ── Singleton Instance ────────────────────────────────────────────────────
tag_service = TagService()
