"""
Memos Backend - User Service
=============================

What:  User lookup, listing, profile updates and per-user settings.
Who:   Called by the /api/user routes and by the `get_current_user`
       dependency (token subject → user row).

Access Rules:
    - Listing users:          HOST only
    - Public profile:         anyone
    - Update user / settings: the user themself, or a HOST
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memos.clock import current_epoch
from memos.config import Settings
from memos.database import translate_db_errors
from memos.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from memos.models.enums import Role, RowStatus
from memos.models.user import User, UserSetting
from memos.schemas.user import (
    UserProfile,
    UserRecord,
    UserSettingRecord,
    UserSettingUpdateRequest,
    UserUpdateRequest,
    user_profile,
    user_record,
    user_setting_record,
)

logger = logging.getLogger(__name__)


def is_host(user: User) -> bool:
    return user.role == Role.HOST.value


def require_self_or_host(actor: User, user_id: int) -> None:
    if actor.id != user_id and not is_host(actor):
        raise PermissionDeniedError(context={"user_id": user_id})


class UserService:

    @translate_db_errors("get_active_user_by_uid")
    async def get_active_user_by_uid(self, db: AsyncSession, uid: str) -> Optional[User]:
        return await db.scalar(
            select(User).where(User.uid == uid, User.row_status == RowStatus.NORMAL.value)
        )

    async def _require_active_user(self, db: AsyncSession, user_id: int) -> User:
        user = await db.scalar(
            select(User).where(User.id == user_id, User.row_status == RowStatus.NORMAL.value)
        )
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    @translate_db_errors("list_users")
    async def list_users(
        self,
        db: AsyncSession,
        actor: User,
        row_status: RowStatus = RowStatus.NORMAL,
        limit: int = 50,
        offset: int = 0,
    ) -> List[UserRecord]:
        if not is_host(actor):
            raise PermissionDeniedError()

        result = await db.execute(
            select(User)
            .where(User.row_status == row_status.value)
            .order_by(User.created_ts.asc(), User.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return [user_record(row) for row in result.scalars().all()]

    @translate_db_errors("get_profile")
    async def get_profile(self, db: AsyncSession, user_id: int) -> UserProfile:
        return user_profile(await self._require_active_user(db, user_id))

    @translate_db_errors("update_user")
    async def update_user(
        self,
        db: AsyncSession,
        actor: User,
        user_id: int,
        payload: UserUpdateRequest,
    ) -> UserRecord:
        """
        Partially update a user. Only fields present in the payload change.

        Raises:
            NotFoundError:          user missing or archived
            PermissionDeniedError:  actor is neither the user nor a HOST
            ValidationError:        username null or blank (400)
            ConflictError:          new username already taken
        """
        user = await self._require_active_user(db, user_id)
        require_self_or_host(actor, user.id)

        changes = payload.model_dump(exclude_unset=True)
        if "username" in changes:
            new_username = (changes["username"] or "").strip()
            if not new_username:
                raise ValidationError(message="Username must not be empty", field="username")
            if new_username != user.username:
                taken = await db.scalar(
                    select(User.id).where(User.username == new_username, User.id != user.id)
                )
                if taken is not None:
                    raise ConflictError(
                        message="USERNAME_ALREADY_EXISTS",
                        context={"username": new_username},
                    )
            changes["username"] = new_username

        for field, value in changes.items():
            if field in ("nickname", "description") and value is None:
                value = ""
            setattr(user, field, value)
        if changes:
            user.updated_ts = current_epoch()
            await db.flush()
            logger.info("User %d updated fields: %s", user.id, ", ".join(sorted(changes)))

        return user_record(user)

    async def _get_or_create_setting(
        self, db: AsyncSession, user_id: int, settings: Settings
    ) -> UserSetting:
        setting = await db.get(UserSetting, user_id)
        if setting is None:
            now = current_epoch()
            setting = UserSetting(
                user_id=user_id,
                locale=settings.default_locale,
                appearance=settings.default_appearance,
                memo_visibility=settings.default_memo_visibility,
                created_ts=now,
                updated_ts=now,
            )
            db.add(setting)
            await db.flush()
            logger.debug("Default setting row created for user %d", user_id)
        return setting

    @translate_db_errors("get_setting")
    async def get_setting(
        self, db: AsyncSession, actor: User, user_id: int, settings: Settings
    ) -> UserSettingRecord:
        user = await self._require_active_user(db, user_id)
        require_self_or_host(actor, user.id)
        return user_setting_record(await self._get_or_create_setting(db, user.id, settings))

    @translate_db_errors("update_setting")
    async def update_setting(
        self,
        db: AsyncSession,
        actor: User,
        user_id: int,
        payload: UserSettingUpdateRequest,
        settings: Settings,
    ) -> UserSettingRecord:
        user = await self._require_active_user(db, user_id)
        require_self_or_host(actor, user.id)

        setting = await self._get_or_create_setting(db, user.id, settings)
        if payload.locale is not None:
            setting.locale = payload.locale
        if payload.appearance is not None:
            setting.appearance = payload.appearance
        if payload.memo_visibility is not None:
            setting.memo_visibility = payload.memo_visibility.value
        setting.updated_ts = current_epoch()
        await db.flush()
        return user_setting_record(setting)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
