"""
Enumerations stored as plain strings in the database and on the wire.
"""

from enum import Enum


class Role(str, Enum):
    HOST = "HOST"
    USER = "USER"


class RowStatus(str, Enum):
    NORMAL = "NORMAL"
    ARCHIVED = "ARCHIVED"


class Visibility(str, Enum):
    PRIVATE = "PRIVATE"
    PROTECTED = "PROTECTED"
    PUBLIC = "PUBLIC"
