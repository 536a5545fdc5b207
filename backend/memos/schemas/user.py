"""
User and user setting schemas, with their row-to-record mappings.

`UserRecord` is the only shape in which a user leaves the service layer;
it never carries the password hash.
"""

from typing import Optional

from pydantic import Field, field_validator

from memos.models.enums import Visibility
from memos.models.user import User, UserSetting
from memos.schemas.common import CamelModel


class UserRecord(CamelModel):
    id: int
    uid: str
    username: str
    nickname: str = ""
    role: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    description: str = ""
    row_status: str
    created_ts: int
    updated_ts: int


def user_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        uid=row.uid,
        username=row.username,
        nickname=row.nickname or "",
        role=row.role,
        email=row.email,
        avatar_url=row.avatar_url,
        description=row.description or "",
        row_status=row.row_status,
        created_ts=row.created_ts,
        updated_ts=row.updated_ts,
    )


class UserProfile(CamelModel):
    """Public profile returned by GET /api/user/{id} to any caller."""

    id: int
    uid: str
    username: str
    nickname: str = ""
    role: str
    avatar_url: Optional[str] = None
    created_ts: int


def user_profile(row: User) -> UserProfile:
    return UserProfile(
        id=row.id,
        uid=row.uid,
        username=row.username,
        nickname=row.nickname or "",
        role=row.role,
        avatar_url=row.avatar_url,
        created_ts=row.created_ts,
    )


class UserUpdateRequest(CamelModel):
    username: Optional[str] = Field(default=None, max_length=255)
    nickname: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = None
    description: Optional[str] = None


class UserSettingRecord(CamelModel):
    name: str = Field(description="Resource name, users/{id}/setting")
    user_id: int
    locale: str
    appearance: str
    memo_visibility: str
    updated_ts: int


def user_setting_record(row: UserSetting) -> UserSettingRecord:
    return UserSettingRecord(
        name=f"users/{row.user_id}/setting",
        user_id=row.user_id,
        locale=row.locale,
        appearance=row.appearance,
        memo_visibility=row.memo_visibility,
        updated_ts=row.updated_ts,
    )


class UserSettingUpdateRequest(CamelModel):
    locale: Optional[str] = Field(default=None, min_length=1, max_length=32)
    appearance: Optional[str] = Field(default=None, min_length=1, max_length=32)
    memo_visibility: Optional[Visibility] = None

    @field_validator("memo_visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, v):
        return v.upper() if isinstance(v, str) else v
