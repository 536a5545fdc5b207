# Markdown package init
"""
Memos Backend - Markdown Package
=================================

What:  Structural view of memo text, independent of HTTP and storage.

    - nodes.py:  MarkdownNode model, NodeKind enum, node constructors
    - codec.py:  parse() / restore() over a declarative line rule table
    - tags.py:   #hashtag extraction used to keep memo tags in sync
"""

from memos.markdown.codec import (
    INLINE_MODE_FLAT,
    INLINE_MODE_PARAGRAPH,
    INLINE_MODES,
    LINE_RULES,
    LineRule,
    parse,
    restore,
)
from memos.markdown.nodes import MarkdownNode, NodeKind
from memos.markdown.tags import extract_tags

__all__ = [
    "INLINE_MODE_FLAT",
    "INLINE_MODE_PARAGRAPH",
    "INLINE_MODES",
    "LINE_RULES",
    "LineRule",
    "MarkdownNode",
    "NodeKind",
    "extract_tags",
    "parse",
    "restore",
]
