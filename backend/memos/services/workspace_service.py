"""
Memos Backend - Workspace Service
==================================

What:  Instance-level information for clients: the workspace profile and
       the GENERAL / MEMO_RELATED / STORAGE setting documents.
How:   Setting documents are built from the application's Settings on
       every request; they are not stored. POST /setting (HOST only)
       echoes what it was given.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memos import __version__
from memos.config import Settings
from memos.database import translate_db_errors
from memos.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from memos.models.enums import Role, RowStatus
from memos.models.user import User
from memos.schemas.workspace import WorkspaceProfile
from memos.services.user_service import is_host

logger = logging.getLogger(__name__)

SETTING_PREFIX = "settings/"


# ── Setting Documents ─────────────────────────────────────────────────────

def _general_setting(settings: Settings) -> Dict[str, Any]:
    return {
        "disallowUserRegistration": not settings.allow_signup,
        "disallowPasswordAuth": False,
        "additionalScript": "",
        "additionalStyle": "",
        "customProfile": {
            "title": "Memos",
            "description": "A privacy-first, lightweight note-taking service",
            "logoUrl": "/logo.webp",
            "locale": settings.default_locale,
            "appearance": settings.default_appearance,
        },
        "weekStartDayOffset": 0,
        "disallowChangeUsername": False,
        "disallowChangeNickname": False,
    }


def _memo_related_setting(settings: Settings) -> Dict[str, Any]:
    return {
        "disallowPublicVisibility": False,
        "displayWithUpdateTime": False,
        "contentLengthLimit": settings.memo_content_length_limit,
        "enableAutoCompact": False,
        "enableDoubleClickEdit": True,
        "enableLinkPreview": True,
        "enableComment": False,
        "enableLocation": False,
        "enableTagSuggestion": True,
        "disableMarkdownShortcuts": False,
        "reactions": ["👍", "👎", "❤️", "😄", "😢", "😮", "😠"],
    }


def _storage_setting(settings: Settings) -> Dict[str, Any]:
    document: Dict[str, Any] = {
        "storageType": "S3" if settings.storage_backend == "s3" else "LOCAL",
        "filepathTemplate": "{{uid}}/{{filename}}",
        "uploadSizeLimitMb": settings.max_upload_size // (1024 * 1024),
    }
    if settings.storage_backend == "s3":
        # Credentials are never echoed
        document["s3Config"] = {
            "endpoint": settings.s3_endpoint_url or "",
            "region": settings.s3_region,
            "bucket": settings.s3_bucket or "",
        }
    return document


# What: Setting key → (response field name, document builder)
SETTING_BUILDERS: Dict[str, tuple] = {
    "GENERAL": ("generalSetting", _general_setting),
    "MEMO_RELATED": ("memoRelatedSetting", _memo_related_setting),
    "STORAGE": ("storageSetting", _storage_setting),
}


class WorkspaceService:

    @translate_db_errors("get_workspace_profile")
    async def get_profile(self, db: AsyncSession, instance_url: str) -> WorkspaceProfile:
        owner_uid = await db.scalar(
            select(User.uid)
            .where(User.role == Role.HOST.value, User.row_status == RowStatus.NORMAL.value)
            .order_by(User.created_ts.asc(), User.id.asc())
            .limit(1)
        )
        return WorkspaceProfile(
            owner=f"users/{owner_uid}" if owner_uid else "",
            version=__version__,
            mode="prod",
            instance_url=instance_url,
        )

    def get_setting(self, name: Optional[str], settings: Settings) -> Dict[str, Any]:
        """
        Build the setting document for `name` (`settings/GENERAL`, ...).

        Raises:
            ValidationError: name missing (400)
            NotFoundError:   unknown key (404)
        """
        if not name:
            raise ValidationError(message="Setting name is required", field="name")

        key = name[len(SETTING_PREFIX):] if name.startswith(SETTING_PREFIX) else name
        entry = SETTING_BUILDERS.get(key)
        if entry is None:
            raise NotFoundError(resource="workspace setting", resource_id=name)

        field, build = entry
        return {"name": f"{SETTING_PREFIX}{key}", field: build(settings)}

    def update_setting(self, actor: User, body: Dict[str, Any]) -> Dict[str, Any]:
        if not is_host(actor):
            raise PermissionDeniedError(
                message="Forbidden: only the HOST can update workspace settings"
            )
        setting = body.get("setting", body)
        logger.info("Workspace setting update accepted from user %d", actor.id)
        return setting


# ── Singleton Instance ────────────────────────────────────────────────────
workspace_service = WorkspaceService()
