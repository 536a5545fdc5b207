"""
Memos Backend - User & UserSetting SQLAlchemy Models
=====================================================

What:  ORM models for the `user` and `user_setting` tables.
How:   Inherit from the shared DeclarativeBase; Alembic migration 001
       creates the same tables for server databases.
Who:   Used by AuthService, UserService and the auth dependency.

Table Design:
    - Integer surrogate `id` for joins, random `uid` (UUID4 text) for
      tokens and public names (`users/{uid}` in the workspace profile)
    - Timestamps are integer epoch seconds, never datetimes
    - Users are never hard-deleted; `row_status` flips to ARCHIVED
"""

from typing import Optional

from sqlalchemy import BigInteger, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from memos.clock import current_epoch
from memos.database import Base
from memos.models.enums import Role, RowStatus, Visibility


class User(Base):
    """An account. The first account ever created is the HOST."""

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identity ──────────────────────────────────────────────────────────
    # `uid` is the token subject; `username` is the sign-in name
    uid: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    nickname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.USER.value)

    # ── Profile ───────────────────────────────────────────────────────────
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # bcrypt hash; never leaves the service layer
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    row_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RowStatus.NORMAL.value
    )
    created_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)
    updated_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"


class UserSetting(Base):
    """
    Per-user preferences. One row per user, created with configured
    defaults the first time the setting is read.
    """

    __tablename__ = "user_setting"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    locale: Mapped[str] = mapped_column(String(32), nullable=False, default="en")
    appearance: Mapped[str] = mapped_column(String(32), nullable=False, default="system")
    memo_visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=Visibility.PRIVATE.value
    )
    created_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)
    updated_ts: Mapped[int] = mapped_column(BigInteger, nullable=False, default=current_epoch)

    def __repr__(self) -> str:
        return f"<UserSetting(user_id={self.user_id}, locale='{self.locale}')>"
