"""Tag schemas and the tag row-to-record mapping."""

from pydantic import Field

from memos.models.tag import Tag
from memos.schemas.common import CamelModel


class TagRecord(CamelModel):
    id: int
    creator_id: int
    name: str
    created_ts: int


def tag_record(row: Tag) -> TagRecord:
    return TagRecord(
        id=row.id,
        creator_id=row.creator_id,
        name=row.name,
        created_ts=row.created_ts,
    )


class TagWithCount(TagRecord):
    memo_count: int = Field(default=0, description="NORMAL memos carrying this tag")


class TagCreateRequest(CamelModel):
    name: str = Field(min_length=1, max_length=255)
