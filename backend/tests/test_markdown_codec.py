"""
Memos Backend - Markdown Codec Tests
=====================================

What:  Tests for parse() / restore() over the line rule table.

Test Strategy:
    ✅ Each line rule produces the documented node and attributes
    ✅ Rule precedence (task before unordered, heading needs a space)
    ✅ Fenced code blocks, closed and unclosed
    ✅ Paragraph vs flat inline modes
    ✅ Restore normalization and idempotence of restore∘parse
    ✅ Unknown node kinds degrade instead of failing
"""

import itertools

import pytest

from memos.markdown.codec import LINE_RULES, parse, restore, split_inline
from memos.markdown.nodes import MarkdownNode, NodeKind


def kinds(nodes):
    return [node.kind for node in nodes]


def inline(node):
    return [(child.kind, child.content) for child in node.children]


class TestLineRules:

    def test_rule_order(self):
        assert [rule.name for rule in LINE_RULES] == [
            "taskListItem",
            "unorderedListItem",
            "orderedListItem",
            "heading",
            "inlineCode",
            "text",
            "lineBreak",
        ]

    def test_rule_apply_returns_none_when_not_matching(self):
        heading_rule = LINE_RULES[3]
        assert heading_rule.apply("no heading here") is None


class TestParse:

    def test_empty_document(self):
        assert parse("") == []

    def test_heading(self):
        (node,) = parse("### Weekly review")
        assert node.kind == NodeKind.HEADING.value
        assert node.attributes == {"level": 3}
        assert inline(node) == [("text", "Weekly review")]

    def test_heading_requires_space_and_at_most_six_marks(self):
        assert kinds(parse("#notaheading")) == ["paragraph"]
        assert kinds(parse("####### seven")) == ["paragraph"]

    def test_task_items(self):
        done, todo, upper = parse("- [x] ship it\n- [ ] test it\n- [X] Shout")
        assert done.kind == NodeKind.TASK_LIST_ITEM.value
        assert done.attributes == {"indent": 0, "complete": True}
        assert inline(done) == [("text", "ship it")]
        assert todo.attributes["complete"] is False
        assert upper.attributes["complete"] is True

    def test_task_without_text(self):
        (node,) = parse("- [ ]")
        assert node.kind == NodeKind.TASK_LIST_ITEM.value
        assert node.children == []

    def test_unordered_item_with_indent(self):
        top, nested = parse("- fruit\n    - apple")
        assert top.kind == NodeKind.UNORDERED_LIST_ITEM.value
        assert top.attributes == {"indent": 0}
        assert nested.attributes == {"indent": 2}
        assert inline(nested) == [("text", "apple")]

    def test_ordered_item_keeps_number_text(self):
        (node,) = parse("12. twelfth")
        assert node.kind == NodeKind.ORDERED_LIST_ITEM.value
        assert node.attributes == {"indent": 0, "number": "12"}

    def test_decimal_number_is_not_a_list(self):
        assert kinds(parse("1.5 kg of flour")) == ["paragraph"]

    def test_inline_code_line(self):
        (node,) = parse("run `make test` before pushing")
        assert node.kind == NodeKind.PARAGRAPH.value
        assert inline(node) == [
            ("text", "run "),
            ("code", "make test"),
            ("text", " before pushing"),
        ]

    def test_list_item_children_split_inline_code(self):
        (node,) = parse("- use `uv`")
        assert inline(node) == [("text", "use "), ("code", "uv")]

    def test_plain_text_and_blank_lines(self):
        nodes = parse("first\n\nsecond")
        assert kinds(nodes) == ["paragraph", "lineBreak", "paragraph"]
        assert inline(nodes[2]) == [("text", "second")]

    def test_whitespace_only_line_is_line_break(self):
        assert kinds(parse("   ")) == ["lineBreak"]

    def test_crlf_line_endings(self):
        assert kinds(parse("# a\r\n- b")) == ["heading", "unorderedListItem"]

    def test_fenced_code_block(self):
        nodes = parse("before\n```python\nprint('hi')\n\nx = 1\n```\nafter")
        assert kinds(nodes) == ["paragraph", "codeBlock", "paragraph"]
        block = nodes[1]
        assert block.attributes == {"language": "python"}
        assert block.content == "print('hi')\n\nx = 1"

    def test_fence_contents_are_not_parsed(self):
        (block,) = parse("```\n# not a heading\n- not a list\n```")
        assert block.kind == NodeKind.CODE_BLOCK.value
        assert block.attributes == {"language": ""}
        assert block.content == "# not a heading\n- not a list"

    def test_unclosed_fence_runs_to_end(self):
        (block,) = parse("```sh\necho 1\necho 2")
        assert block.content == "echo 1\necho 2"

    def test_flat_mode_returns_inline_nodes(self):
        nodes = parse("see `docs` here\nplain", inline_mode="flat")
        assert [(n.kind, n.content) for n in nodes] == [
            ("text", "see "),
            ("code", "docs"),
            ("text", " here"),
            ("text", "plain"),
        ]

    def test_flat_mode_leaves_blocks_alone(self):
        assert kinds(parse("# h\n- i", inline_mode="flat")) == ["heading", "unorderedListItem"]

    def test_unknown_inline_mode(self):
        with pytest.raises(ValueError):
            parse("text", inline_mode="nested")


class TestSplitInline:

    def test_no_code(self):
        assert [(n.kind, n.content) for n in split_inline("just text")] == [("text", "just text")]

    def test_adjacent_spans(self):
        assert [(n.kind, n.content) for n in split_inline("`a``b`")] == [("code", "a"), ("code", "b")]

    def test_unbalanced_backtick_stays_text(self):
        assert [(n.kind, n.content) for n in split_inline("it`s fine")] == [("text", "it`s fine")]


class TestRestore:

    def test_restore_normalizes(self):
        source = "- [X] Done\n    - nested\n1. one\n# H\n```py\nc\n```\n\ntext `code`"
        assert restore(parse(source)) == (
            "- [x] Done\n    - nested\n1. one\n# H\n```py\nc\n```\n\ntext `code`"
        )

    def test_odd_indent_rounds_down(self):
        assert restore(parse("   - three spaces")) == "  - three spaces"

    def test_empty_code_block(self):
        assert restore(parse("```\n```")) == "```\n```"

    def test_unknown_kind_uses_content(self):
        nodes = [MarkdownNode(kind="table", content="| a | b |"), MarkdownNode(kind="mystery")]
        assert restore(nodes) == "| a | b |\n"

    def test_bad_attributes_degrade(self):
        node = MarkdownNode(
            kind="heading",
            attributes={"level": "huge"},
            children=[MarkdownNode(kind="text", content="x")],
        )
        assert restore([node]) == "# x"

    @pytest.mark.parametrize(
        "document",
        [
            "# Title\n\nSome `code` and text\n- [ ] task\n  1. step",
            "```\nunclosed fence",
            "   - odd indent\n\n\n#tag line",
            "- [x]\n- \n1. \n",
        ],
    )
    def test_restore_parse_is_idempotent(self, document):
        once = restore(parse(document))
        assert restore(parse(once)) == once


class TestLineEndings:

    def test_lone_carriage_return_ends_a_line(self):
        assert kinds(parse("a\rb")) == ["paragraph", "paragraph"]

    def test_carriage_return_inside_fence_not_kept(self):
        (block,) = parse("```\nx\r")
        assert block.content == "x\n"
        once = restore(parse("```\nx\r"))
        assert "\r" not in once
        assert restore(parse(once)) == once

    def test_mixed_endings_parse_alike(self):
        assert restore(parse("# h\r\n- a\rb\n")) == restore(parse("# h\n- a\nb\n"))


# Fragments chosen to hit every rule, fences, odd whitespace and line endings
FRAGMENTS = [
    "",
    " ",
    "\r",
    "\r\n",
    "\n",
    "```",
    "```py",
    "x",
    "#tag",
    "## h",
    "- [x] done",
    "   - item",
    "12. step",
    " `a` b",
]


class TestRoundTrip:

    def test_restore_parse_idempotent_over_fragment_combinations(self):
        failures = []
        for parts in itertools.product(FRAGMENTS, repeat=3):
            for separator in ("", "\n"):
                document = separator.join(parts)
                once = restore(parse(document))
                if restore(parse(once)) != once:
                    failures.append(document)
        assert failures == []

    def test_flat_mode_splits_inline_code_lines(self):
        nodes = parse(" `a`", inline_mode="flat")
        assert [(node.kind, node.content) for node in nodes] == [("text", " "), ("code", "a")]
        assert restore(nodes) == " \n`a`"
        assert restore(parse(" `a`")) == " `a`"
