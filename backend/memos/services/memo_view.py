"""
Memo view adapter.

Converts a flat MemoRecord into the shape rich clients render: resource
names instead of numeric ids, parsed markdown nodes, a plain-text snippet
and ISO datetimes. Pure function; no database access.
"""

from typing import Sequence

from memos.clock import epoch_to_datetime
from memos.markdown.codec import INLINE_MODE_PARAGRAPH, parse
from memos.models.enums import RowStatus
from memos.schemas.memo import MemoRecord, MemoView
from memos.schemas.resource import ResourceRecord

SNIPPET_LENGTH = 100


def to_memo_view(
    memo: MemoRecord,
    resources: Sequence[ResourceRecord] = (),
    inline_mode: str = INLINE_MODE_PARAGRAPH,
) -> MemoView:
    state = RowStatus.ARCHIVED.value if memo.row_status == RowStatus.ARCHIVED.value else RowStatus.NORMAL.value
    return MemoView(
        name=f"memos/{memo.id}",
        uid=memo.uid,
        creator=f"users/{memo.creator_id}",
        content=memo.content,
        nodes=parse(memo.content, inline_mode=inline_mode),
        visibility=memo.visibility,
        tags=list(memo.tags),
        pinned=False,
        resources=list(resources),
        snippet=memo.content[:SNIPPET_LENGTH],
        create_time=epoch_to_datetime(memo.created_ts),
        update_time=epoch_to_datetime(memo.updated_ts),
        display_time=epoch_to_datetime(memo.created_ts),
        state=state,
    )
