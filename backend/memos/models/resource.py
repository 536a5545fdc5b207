"""
Resource SQLAlchemy model.

A resource is the metadata row for one uploaded blob. The bytes live in the
object store under the key `{uid}/{filename}`; `external_uri` records where
(`local://...` or `s3://bucket/...`).
"""

from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from memos.clock import current_epoch
from memos.database import Base


class Resource(Base):
    __tablename__ = "resource"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(255), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    external_uri: Mapped[str] = mapped_column(Text, nullable=False)
    created_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)

    @property
    def object_key(self) -> str:
        return f"{self.uid}/{self.filename}"

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, uid='{self.uid}', filename='{self.filename}')>"
