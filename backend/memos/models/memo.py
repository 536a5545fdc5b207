"""
Memos Backend - Memo SQLAlchemy Model
======================================

What:  The `memo` table plus its two association tables, `memo_tag` and
       `memo_resource`.
How:   Tags and resources are many-to-many through plain association
       tables. Both collections load with `selectin` so that async code
       never triggers an implicit lazy load.

Query Patterns:
    - Feed: WHERE row_status = 'NORMAL' AND visibility = 'PUBLIC'
            ORDER BY created_ts DESC LIMIT :limit OFFSET :offset
      → idx_memo_created_ts
    - Per-user list: WHERE creator_id = :id → idx_memo_creator_id
"""

from typing import List

from sqlalchemy import BigInteger, Column, ForeignKey, Index, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from memos.clock import current_epoch
from memos.database import Base
from memos.models.enums import RowStatus, Visibility

memo_tag = Table(
    "memo_tag",
    Base.metadata,
    Column("memo_id", Integer, ForeignKey("memo.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)

memo_resource = Table(
    "memo_resource",
    Base.metadata,
    Column("memo_id", Integer, ForeignKey("memo.id", ondelete="CASCADE"), primary_key=True),
    Column("resource_id", Integer, ForeignKey("resource.id", ondelete="CASCADE"), primary_key=True),
)


class Memo(Base):
    """
    A memo. Deleting a memo archives it; rows are never removed by the API.
    """

    __tablename__ = "memo"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )

    # Raw markdown as typed by the user; structure is derived on read
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Visibility.PRIVATE.value
    )
    row_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RowStatus.NORMAL.value
    )
    created_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)
    updated_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)

    tags: Mapped[List["Tag"]] = relationship(  # noqa: F821
        "Tag", secondary=memo_tag, lazy="selectin", order_by="Tag.id"
    )
    resources: Mapped[List["Resource"]] = relationship(  # noqa: F821
        "Resource", secondary=memo_resource, lazy="selectin", order_by="Resource.id"
    )

    __table_args__ = (
        Index("idx_memo_created_ts", "created_ts"),
        Index("idx_memo_creator_id", "creator_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Memo(id={self.id}, creator_id={self.creator_id}, "
            f"visibility='{self.visibility}', row_status='{self.row_status}')>"
        )
