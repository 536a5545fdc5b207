"""
Memos Backend - Markdown Node Codec
====================================

What:  Best-effort structural parse of memo text into MarkdownNode lists,
       and best-effort restoration of text from such lists.
How:   Single forward pass over lines, no backtracking:

       1. A fence line (optional leading whitespace, three backticks,
          optional language tag) consumes following lines verbatim up to a
          closing fence line or end of input → one `codeBlock`.
       2. Any other line is offered to LINE_RULES top to bottom; the first
          rule whose pattern matches builds the node(s) for that line:

              taskListItem       "- [ ] x" / "- [x] x" (x case-insensitive)
              unorderedListItem  "- x"
              orderedListItem    "<digits>. x"
              heading            "#".."######" then a space
              inlineCode         line containing a `code` span
              text               any other non-blank line
              lineBreak          blank line

       Every step advances the cursor by at least one line, and the last
       two rules together accept every line, so parsing always terminates
       and never fails.

Inline modes:
    "paragraph" (canonical): inline-code and plain lines become one
        `paragraph` node whose children are `text`/`code` nodes.
    "flat": the same inline nodes are returned directly at top level.

Restore contract:
    One output line per top-level node. The result is not byte-identical
    to the input (list indentation, fence lines and task markers are
    normalized) but, in paragraph mode,
        restore(parse(restore(parse(x)))) == restore(parse(x))
    In flat mode an inline-code line restores as one line per fragment, so
    flat output is neither lossless nor idempotent; store paragraph nodes.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from memos.markdown.nodes import (
    INLINE_KINDS,
    MarkdownNode,
    NodeKind,
    code_block_node,
    code_node,
    heading_node,
    line_break_node,
    ordered_list_item_node,
    paragraph_node,
    task_list_item_node,
    text_node,
    unordered_list_item_node,
)

logger = logging.getLogger(__name__)

INLINE_MODE_PARAGRAPH = "paragraph"
INLINE_MODE_FLAT = "flat"
INLINE_MODES = (INLINE_MODE_PARAGRAPH, INLINE_MODE_FLAT)

INDENT_WIDTH = 2

# ── Patterns ──────────────────────────────────────────────────────────────
FENCE_OPEN_RE = re.compile(r"^\s*```\s*([^`]*?)\s*$")
FENCE_CLOSE_RE = re.compile(r"^\s*```\s*$")

TASK_RE = re.compile(r"^(\s*)- \[([ xX])\](?: (.*))?$")
UNORDERED_RE = re.compile(r"^(\s*)- (.*)$")
ORDERED_RE = re.compile(r"^(\s*)(\d+)\. (.*)$")
HEADING_RE = re.compile(r"^(#{1,6}) (.*)$")
INLINE_CODE_LINE_RE = re.compile(r"^.*`[^`]+`")
NON_BLANK_RE = re.compile(r"^.*\S")
BLANK_RE = re.compile(r"^\s*$")

INLINE_CODE_RE = re.compile(r"`([^`]+)`")


def split_inline(text: str) -> List[MarkdownNode]:
    """
    Split `text` on backtick-delimited spans.

    Each span becomes a `code` node; each non-empty fragment around the
    spans becomes a `text` node. Concatenating the restored children gives
    back `text` exactly.
    """
    nodes: List[MarkdownNode] = []
    position = 0
    for match in INLINE_CODE_RE.finditer(text):
        if match.start() > position:
            nodes.append(text_node(text[position:match.start()]))
        nodes.append(code_node(match.group(1)))
        position = match.end()
    if position < len(text):
        nodes.append(text_node(text[position:]))
    return nodes


def indent_level(whitespace: str) -> int:
    return len(whitespace) // INDENT_WIDTH


# ── Rule Builders ─────────────────────────────────────────────────────────
# Each builder turns a successful match into the node(s) for one line.

def _build_task(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    complete = match.group(2).lower() == "x"
    return [task_list_item_node(indent_level(match.group(1)), complete, split_inline(match.group(3) or ""))]


def _build_unordered(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    return [unordered_list_item_node(indent_level(match.group(1)), split_inline(match.group(2)))]


def _build_ordered(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    return [
        ordered_list_item_node(
            indent_level(match.group(1)),
            match.group(2),
            split_inline(match.group(3)),
        )
    ]


def _build_heading(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    return [heading_node(len(match.group(1)), split_inline(match.group(2)))]


def _build_inline(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    inline = split_inline(match.string)
    if inline_mode == INLINE_MODE_FLAT:
        return inline
    return [paragraph_node(inline)]


def _build_text(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    logger.debug("No structural rule matched, keeping line as text (%d chars)", len(match.string))
    if inline_mode == INLINE_MODE_FLAT:
        return [text_node(match.string)]
    return [paragraph_node([text_node(match.string)])]


def _build_line_break(match: re.Match, inline_mode: str) -> List[MarkdownNode]:
    return [line_break_node()]


@dataclass(frozen=True)
class LineRule:
    """One entry of the line rule table: a name, a predicate pattern, a builder."""

    name: str
    pattern: re.Pattern
    build: Callable[[re.Match, str], List[MarkdownNode]]

    def apply(self, line: str, inline_mode: str = INLINE_MODE_PARAGRAPH) -> Optional[List[MarkdownNode]]:
        """Return the nodes for `line`, or None when this rule does not match."""
        match = self.pattern.match(line)
        if match is None:
            return None
        return self.build(match, inline_mode)


# Evaluated top to bottom; the first matching rule wins.
LINE_RULES: Sequence[LineRule] = (
    LineRule(NodeKind.TASK_LIST_ITEM.value, TASK_RE, _build_task),
    LineRule(NodeKind.UNORDERED_LIST_ITEM.value, UNORDERED_RE, _build_unordered),
    LineRule(NodeKind.ORDERED_LIST_ITEM.value, ORDERED_RE, _build_ordered),
    LineRule(NodeKind.HEADING.value, HEADING_RE, _build_heading),
    LineRule("inlineCode", INLINE_CODE_LINE_RE, _build_inline),
    LineRule(NodeKind.TEXT.value, NON_BLANK_RE, _build_text),
    LineRule(NodeKind.LINE_BREAK.value, BLANK_RE, _build_line_break),
)


def parse_line(line: str, inline_mode: str = INLINE_MODE_PARAGRAPH) -> List[MarkdownNode]:
    for rule in LINE_RULES:
        nodes = rule.apply(line, inline_mode)
        if nodes is not None:
            return nodes
    # Unreachable: `text` and `lineBreak` together accept every line
    return [text_node(line)]


# ── Parse ─────────────────────────────────────────────────────────────────

def parse(document: str, inline_mode: str = INLINE_MODE_PARAGRAPH) -> List[MarkdownNode]:
    """
    Parse `document` into an ordered list of nodes.

    Args:
        document: Raw memo text; "\\r\\n" and lone "\\r" line endings are
            read as "\\n".
        inline_mode: "paragraph" (canonical) or "flat".

    Returns:
        The node list; empty for an empty document.

    Raises:
        ValueError: Unknown inline_mode (the only failure; input text never fails).
    """
    if inline_mode not in INLINE_MODES:
        raise ValueError(f"Unknown inline mode '{inline_mode}'. Must be one of: {INLINE_MODES}")
    if not document:
        return []

    lines = document.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    nodes: List[MarkdownNode] = []
    index = 0
    while index < len(lines):
        line = lines[index]
        fence = FENCE_OPEN_RE.match(line)
        if fence is not None:
            language = fence.group(1)
            index += 1
            body: List[str] = []
            while index < len(lines) and not FENCE_CLOSE_RE.match(lines[index]):
                body.append(lines[index])
                index += 1
            # Skip the closing fence when there is one
            index += 1
            nodes.append(code_block_node(language, "\n".join(body)))
            continue

        nodes.extend(parse_line(line, inline_mode))
        index += 1
    return nodes


# ── Restore ───────────────────────────────────────────────────────────────

def restore_inline(children: Sequence[MarkdownNode]) -> str:
    """Flatten inline children back to text, re-wrapping `code` in backticks."""
    parts = []
    for child in children:
        if child.is_kind(NodeKind.CODE):
            parts.append(f"`{child.content or ''}`")
        elif child.kind in INLINE_KINDS or child.content is not None:
            parts.append(child.content or "")
        else:
            parts.append(restore_inline(child.children))
    return "".join(parts)


def _indent(node: MarkdownNode) -> str:
    try:
        level = max(int(node.attributes.get("indent", 0)), 0)
    except (TypeError, ValueError):
        level = 0
    return " " * (INDENT_WIDTH * level)


def restore_node(node: MarkdownNode) -> str:
    """Render one node as one (possibly multi-line, for codeBlock) chunk of text."""
    kind = node.kind
    if kind == NodeKind.TASK_LIST_ITEM.value:
        marker = "x" if node.attributes.get("complete") else " "
        text = restore_inline(node.children)
        line = f"{_indent(node)}- [{marker}]"
        return f"{line} {text}" if text else line
    if kind == NodeKind.UNORDERED_LIST_ITEM.value:
        return f"{_indent(node)}- {restore_inline(node.children)}"
    if kind == NodeKind.ORDERED_LIST_ITEM.value:
        number = str(node.attributes.get("number", "1"))
        return f"{_indent(node)}{number}. {restore_inline(node.children)}"
    if kind == NodeKind.HEADING.value:
        try:
            level = min(max(int(node.attributes.get("level", 1)), 1), 6)
        except (TypeError, ValueError):
            level = 1
        return f"{'#' * level} {restore_inline(node.children)}"
    if kind == NodeKind.CODE_BLOCK.value:
        language = node.attributes.get("language") or ""
        lines = [f"```{language}"]
        if node.content:
            lines.append(node.content)
        lines.append("```")
        return "\n".join(lines)
    if kind == NodeKind.PARAGRAPH.value:
        return restore_inline(node.children)
    if kind == NodeKind.TEXT.value:
        return node.content or ""
    if kind == NodeKind.CODE.value:
        return f"`{node.content or ''}`"
    if kind == NodeKind.LINE_BREAK.value:
        return ""

    logger.debug("Restoring unknown node kind '%s' from its literal content", kind)
    return node.content or ""


def restore(nodes: Sequence[MarkdownNode]) -> str:
    """Restore text from `nodes`, one line per node, joined with newlines."""
    return "\n".join(restore_node(node) for node in nodes)
