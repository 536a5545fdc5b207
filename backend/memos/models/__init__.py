# Models package init
"""
Memos Backend - ORM Models
===========================

Importing this package registers every table on `Base.metadata`, which
`create_schema()` and Alembic rely on.
"""

from memos.models.enums import Role, RowStatus, Visibility
from memos.models.memo import Memo, memo_resource, memo_tag
from memos.models.resource import Resource
from memos.models.tag import Tag
from memos.models.user import User, UserSetting

__all__ = [
    "Memo",
    "Resource",
    "Role",
    "RowStatus",
    "Tag",
    "User",
    "UserSetting",
    "Visibility",
    "memo_resource",
    "memo_tag",
]
