"""
Markdown node model.

A memo's content is represented as an ordered list of typed nodes. Block
kinds (`paragraph`, `heading`, the three list item kinds) own inline
children (`text` and `code` only); `codeBlock` owns raw `content` instead of
children; `text`, `code` and `lineBreak` are leaves.

Attributes per kind:
    heading            level: int (1-6)
    unorderedListItem  indent: int
    orderedListItem    indent: int, number: str (original numbering text)
    taskListItem       indent: int, complete: bool
    codeBlock          language: str (may be empty)
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class NodeKind(str, Enum):
    TEXT = "text"
    LINE_BREAK = "lineBreak"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    UNORDERED_LIST_ITEM = "unorderedListItem"
    ORDERED_LIST_ITEM = "orderedListItem"
    TASK_LIST_ITEM = "taskListItem"
    CODE_BLOCK = "codeBlock"
    CODE = "code"


INLINE_KINDS = frozenset({NodeKind.TEXT.value, NodeKind.CODE.value})
LIST_KINDS = frozenset(
    {
        NodeKind.UNORDERED_LIST_ITEM.value,
        NodeKind.ORDERED_LIST_ITEM.value,
        NodeKind.TASK_LIST_ITEM.value,
    }
)


class MarkdownNode(BaseModel):
    """
    One parsed unit of document structure.

    `kind` is kept as a plain string so that node lists received from
    clients with kinds this server does not know still validate; restore()
    degrades those instead of rejecting the request.
    """

    kind: str = Field(description="Node kind, one of NodeKind values")
    attributes: Dict[str, Any] = Field(default_factory=dict)
    children: List["MarkdownNode"] = Field(default_factory=list)
    content: Optional[str] = Field(default=None)

    def is_kind(self, kind: NodeKind) -> bool:
        return self.kind == kind.value


MarkdownNode.model_rebuild()


# ── Constructors ──────────────────────────────────────────────────────────

def text_node(content: str) -> MarkdownNode:
    return MarkdownNode(kind=NodeKind.TEXT.value, content=content)


def code_node(content: str) -> MarkdownNode:
    return MarkdownNode(kind=NodeKind.CODE.value, content=content)


def line_break_node() -> MarkdownNode:
    return MarkdownNode(kind=NodeKind.LINE_BREAK.value)


def paragraph_node(children: List[MarkdownNode]) -> MarkdownNode:
    return MarkdownNode(kind=NodeKind.PARAGRAPH.value, children=children)


def heading_node(level: int, children: List[MarkdownNode]) -> MarkdownNode:
    return MarkdownNode(kind=NodeKind.HEADING.value, attributes={"level": level}, children=children)


def unordered_list_item_node(indent: int, children: List[MarkdownNode]) -> MarkdownNode:
    return MarkdownNode(
        kind=NodeKind.UNORDERED_LIST_ITEM.value,
        attributes={"indent": indent},
        children=children,
    )


def ordered_list_item_node(indent: int, number: str, children: List[MarkdownNode]) -> MarkdownNode:
    return MarkdownNode(
        kind=NodeKind.ORDERED_LIST_ITEM.value,
        attributes={"indent": indent, "number": number},
        children=children,
    )


def task_list_item_node(indent: int, complete: bool, children: List[MarkdownNode]) -> MarkdownNode:
    return MarkdownNode(
        kind=NodeKind.TASK_LIST_ITEM.value,
        attributes={"indent": indent, "complete": complete},
        children=children,
    )


def code_block_node(language: str, content: str) -> MarkdownNode:
    return MarkdownNode(
        kind=NodeKind.CODE_BLOCK.value,
        attributes={"language": language},
        content=content,
    )
