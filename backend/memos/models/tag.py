"""
Tag SQLAlchemy model.

Tag names are unique per creator: two users may both own `#work`, but one
user never has two `#work` rows.
"""

from sqlalchemy import BigInteger, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from memos.clock import current_epoch
from memos.database import Base


class Tag(Base):
    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)

    __table_args__ = (
        UniqueConstraint("creator_id", "name", name="uq_tag_creator_name"),
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, creator_id={self.creator_id}, name='{self.name}')>"
