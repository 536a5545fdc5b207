"""Tests for the memo view adapter (record → rich client view)."""

from datetime import datetime, timezone

from memos.schemas.memo import MemoRecord
from memos.schemas.resource import ResourceRecord
from memos.services.memo_view import SNIPPET_LENGTH, to_memo_view


def _record(**overrides) -> MemoRecord:
    fields = dict(
        id=7,
        uid="memo-uid",
        creator_id=2,
        content="# Plan\n- [ ] write tests #work",
        visibility="PUBLIC",
        row_status="NORMAL",
        created_ts=1_700_000_000,
        updated_ts=1_700_000_600,
        resource_id_list=[3],
        tags=["work"],
    )
    fields.update(overrides)
    return MemoRecord(**fields)


class TestMemoView:

    def test_names_and_times(self):
        view = to_memo_view(_record())
        assert view.name == "memos/7"
        assert view.creator == "users/2"
        assert view.create_time == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert view.update_time == datetime.fromtimestamp(1_700_000_600, tz=timezone.utc)
        assert view.display_time == view.create_time
        assert view.state == "NORMAL"
        assert view.pinned is False
        assert view.tags == ["work"]

    def test_nodes_are_parsed_from_content(self):
        view = to_memo_view(_record())
        assert [node.kind for node in view.nodes] == ["heading", "taskListItem"]

    def test_flat_inline_mode(self):
        view = to_memo_view(_record(content="a `b`"), inline_mode="flat")
        assert [node.kind for node in view.nodes] == ["text", "code"]

    def test_snippet_is_truncated(self):
        view = to_memo_view(_record(content="x" * 250))
        assert view.snippet == "x" * SNIPPET_LENGTH

    def test_archived_state(self):
        assert to_memo_view(_record(row_status="ARCHIVED")).state == "ARCHIVED"

    def test_resources_passed_through(self):
        resource = ResourceRecord(
            id=3,
            uid="res-uid",
            creator_id=2,
            filename="a.png",
            mime_type="image/png",
            size=10,
            external_uri="local://res-uid/a.png",
            created_ts=1_700_000_000,
        )
        view = to_memo_view(_record(), [resource])
        assert view.resources == [resource]

    def test_serializes_camel_case(self):
        payload = to_memo_view(_record()).model_dump(by_alias=True, mode="json")
        assert {"createTime", "updateTime", "displayTime", "snippet", "nodes"} <= set(payload)
        assert payload["nodes"][0]["kind"] == "heading"
