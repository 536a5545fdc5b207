"""Request/response shapes for the /api/markdown parse and restore endpoints."""

from typing import List, Literal

from pydantic import Field

from memos.markdown.nodes import MarkdownNode
from memos.schemas.common import CamelModel


class ParseMarkdownRequest(CamelModel):
    markdown: str = Field(description="Raw memo text")
    inline_mode: Literal["paragraph", "flat"] = Field(
        default="paragraph",
        description="paragraph: inline nodes wrapped in a paragraph; flat: top-level inline nodes",
    )


class ParseMarkdownResponse(CamelModel):
    nodes: List[MarkdownNode]


class RestoreMarkdownRequest(CamelModel):
    nodes: List[MarkdownNode]


class RestoreMarkdownResponse(CamelModel):
    markdown: str
