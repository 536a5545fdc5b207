"""
Memos Backend - Memo Schemas
=============================

What:  Request/response shapes for /api/memo, the memo row-to-record
       mapping, and the rich view shape produced by the memo view adapter.

Two response shapes:
    MemoRecord:  flat record with integer epoch timestamps, returned by the
                 CRUD endpoints (`resourceIdList`, `tags` included).
    MemoView:    client-facing view with resource names (`memos/{id}`),
                 parsed markdown nodes, a snippet and ISO datetimes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from memos.markdown.nodes import MarkdownNode
from memos.models.enums import Visibility
from memos.models.memo import Memo
from memos.schemas.common import CamelModel
from memos.schemas.resource import ResourceRecord


# ══════════════════════════════════════════════════════════════════════════
# Records
# ══════════════════════════════════════════════════════════════════════════


class MemoRecord(CamelModel):
    id: int
    uid: str
    creator_id: int
    content: str
    visibility: str
    row_status: str
    created_ts: int
    updated_ts: int
    resource_id_list: List[int] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


def memo_record(row: Memo) -> MemoRecord:
    """Map a Memo row (with its eagerly loaded tags/resources) to a record."""
    return MemoRecord(
        id=row.id,
        uid=row.uid,
        creator_id=row.creator_id,
        content=row.content,
        visibility=row.visibility,
        row_status=row.row_status,
        created_ts=row.created_ts,
        updated_ts=row.updated_ts,
        resource_id_list=[resource.id for resource in row.resources],
        tags=[tag.name for tag in row.tags],
    )


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════


class MemoCreateRequest(CamelModel):
    # Optional here so an absent content yields the service's 400
    content: Optional[str] = None
    visibility: Optional[Visibility] = None
    resource_id_list: List[int] = Field(default_factory=list)

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, v):
        return v.upper() if isinstance(v, str) else v


class MemoUpdateRequest(CamelModel):
    content: Optional[str] = None
    visibility: Optional[Visibility] = None
    resource_id_list: Optional[List[int]] = None

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, v):
        return v.upper() if isinstance(v, str) else v


# ══════════════════════════════════════════════════════════════════════════
# Stats
# ══════════════════════════════════════════════════════════════════════════


class HistogramBucket(CamelModel):
    ts: int = Field(description="00:00 UTC of the day, epoch seconds")
    count: int


class MemoStats(CamelModel):
    total: int = Field(description="NORMAL PUBLIC memos")
    daily_histogram: List[HistogramBucket] = Field(
        default_factory=list,
        description="Per-day counts over the last 30 days, newest first",
    )


# ══════════════════════════════════════════════════════════════════════════
# View
# ══════════════════════════════════════════════════════════════════════════


class MemoView(CamelModel):
    name: str = Field(description="memos/{id}")
    uid: str
    creator: str = Field(description="users/{creatorId}")
    content: str
    nodes: List[MarkdownNode]
    visibility: str
    tags: List[str]
    pinned: bool = False
    resources: List[ResourceRecord] = Field(default_factory=list)
    snippet: str
    create_time: datetime
    update_time: datetime
    display_time: datetime
    state: str
