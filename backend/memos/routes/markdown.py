"""
Markdown route handlers.

Expose the node codec over HTTP so clients without a local parser can
turn memo text into nodes and back.
"""

from fastapi import APIRouter

from memos.markdown.codec import parse, restore
from memos.schemas.markdown import (
    ParseMarkdownRequest,
    ParseMarkdownResponse,
    RestoreMarkdownRequest,
    RestoreMarkdownResponse,
)

router = APIRouter(prefix="/api/markdown", tags=["Markdown"])


@router.post(
    "/parse",
    response_model=ParseMarkdownResponse,
    summary="Parse markdown into nodes",
    description=(
        "Never fails on input text: unrecognised lines degrade to plain text. "
        "`flat` mode drops line boundaries for lines with inline code (each "
        "fragment becomes its own top-level node), so restoring flat nodes is "
        "not lossless; `paragraph` is the mode to store and round-trip."
    ),
)
async def parse_markdown(payload: ParseMarkdownRequest) -> ParseMarkdownResponse:
    return ParseMarkdownResponse(nodes=parse(payload.markdown, inline_mode=payload.inline_mode))


@router.post(
    "/restore",
    response_model=RestoreMarkdownResponse,
    summary="Restore markdown from nodes",
)
async def restore_markdown(payload: RestoreMarkdownRequest) -> RestoreMarkdownResponse:
    return RestoreMarkdownResponse(markdown=restore(payload.nodes))
