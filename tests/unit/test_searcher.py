"""Tests for the search engine."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from conftest import SESSION_A, SESSION_B, assistant_record, user_record

from cc_history import searcher
from cc_history.errors import SessionNotFoundError
from cc_history.models import (
    AssistantMessage,
    FileBackup,
    FileHistorySnapshotMessage,
    FileSnapshot,
    SummaryMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)
from cc_history.searcher import (
    extract_context,
    extract_message_text,
    find_occurrences,
    search_in_session,
    search_sessions,
)

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_extract_user_text():
    assert extract_message_text(UserMessage("u", None, NOW, "hello")) == ["hello"]
    results = [ToolResultBlock("t1", "first"), ToolResultBlock("t2", "second")]
    assert extract_message_text(UserMessage("u", None, NOW, results)) == ["first", "second"]


def test_extract_assistant_text():
    message = AssistantMessage(
        "a",
        None,
        NOW,
        content=[
            TextBlock("answer"),
            ThinkingBlock("pondering"),
            ToolUseBlock("t1", "Edit", {"file_path": "/x.py"}),
        ],
    )
    assert extract_message_text(message) == [
        "answer",
        "pondering",
        "Tool: Edit",
        '{"file_path": "/x.py"}',
    ]


def test_extract_summary_and_snapshot():
    assert extract_message_text(SummaryMessage("s", None, NOW, "Title")) == ["Title"]
    snapshot = FileSnapshot("m", NOW, {"/a": FileBackup("b", 1, NOW)})
    assert extract_message_text(FileHistorySnapshotMessage("f", None, NOW, "m", snapshot)) == []


def test_find_occurrences_case_insensitive():
    assert find_occurrences("Needle and NEEDLE and needle", "needle") == [0, 11, 22]


def test_find_occurrences_overlapping():
    assert find_occurrences("aaaa", "aa") == [0, 1, 2]


def test_find_occurrences_empty_query():
    assert find_occurrences("text", "") == []


def test_extract_context_middle():
    text = "Line1\nLine2\nneedle here\nLine4\nLine5"
    context, line_number = extract_context(text, text.index("needle"), 1)
    assert context == ["Line2", "needle here", "Line4"]
    assert line_number == 3


def test_extract_context_clamped_at_edges():
    text = "needle\nb\nc"
    assert extract_context(text, 0, 5) == (["needle", "b", "c"], 1)
    assert extract_context(text, len(text) - 1, 1) == (["b", "c"], 3)


def test_extract_context_zero_lines():
    assert extract_context("a\nb\nc", 2, 0) == (["b"], 2)


@pytest.mark.parametrize("k", [0, 1, 2, 3])
@pytest.mark.parametrize("m", [1, 2, 4, 7])
def test_extract_context_length(k, m):
    lines = [f"line {i}" for i in range(1, 8)]
    text = "\n".join(lines)
    offset = text.index(f"line {m}")

    context, line_number = extract_context(text, offset, k)

    assert line_number == m
    assert len(context) == min(k, m - 1) + 1 + min(k, len(lines) - m)


def test_search_single_match_with_context(config, write_session):
    write_session(
        "/test/project",
        SESSION_A,
        [user_record("u1", "Line1\nLine2\nneedle here\nLine4\nLine5")],
    )

    page = search_sessions("needle", replace(config, context=1))

    assert page.pagination.total == 1
    match = page.data[0]
    assert match.context == ["Line2", "needle here", "Line4"]
    assert match.line_number == 3
    assert match.session_id == SESSION_A
    assert match.message_uuid == "u1"
    assert match.message_type == "user"
    assert match.project_path == "/test/project"


def test_search_preserves_original_casing(config, populated_root):
    lower = search_sessions("jwt", config)
    upper = search_sessions("JWT", config)

    assert lower.pagination.total == upper.pagination.total > 0
    assert {m.match for m in lower.data} == {"JWT"}


def test_search_covers_tool_input_and_results(config, populated_root):
    tool_name = search_sessions("Tool: Read", config)
    assert tool_name.pagination.total == 1

    file_path = search_sessions("auth.py", config)
    assert file_path.pagination.total == 1
    assert file_path.data[0].message_type == "assistant"

    result = search_sessions("def login", config)
    assert result.pagination.total == 1
    assert result.data[0].message_uuid == "msg-003"


def test_search_includes_summary(config, populated_root):
    page = search_sessions("implement jwt", config)
    assert [m.message_type for m in page.data] == ["summary"]
    assert page.data[0].session_summary == "Implement JWT authentication"


def test_search_skips_agent_sessions(config, populated_root):
    assert search_sessions("codebase", config).pagination.total == 0


def test_search_empty_query(config, populated_root):
    for query in ("", "   "):
        page = search_sessions(query, config)
        assert page.data == []
        assert page.pagination.total == 0
        assert page.pagination.has_more is False


def test_search_pagination_total_is_invariant(config, write_session):
    write_session(
        "/test/project",
        SESSION_A,
        [user_record(f"u{i}", f"match number {i}") for i in range(5)],
    )

    full = search_sessions("match", replace(config, limit=100))
    page = search_sessions("match", replace(config, limit=2, offset=1))

    assert full.pagination.total == page.pagination.total == 5
    assert [m.message_uuid for m in page.data] == ["u1", "u2"]
    assert page.pagination.has_more is True


def test_search_results_follow_listing_and_message_order(config, write_session):
    write_session("/w", SESSION_A, [user_record("a1", "token one")], mtime=1_000)
    write_session(
        "/w",
        SESSION_B,
        [
            user_record("b1", "token two"),
            assistant_record("b2", [{"type": "text", "text": "token"}]),
        ],
        mtime=2_000,
    )

    page = search_sessions("token", config)

    assert [m.message_uuid for m in page.data] == ["b1", "b2", "a1"]


def test_search_skips_broken_session(config, populated_root, data_root):
    broken = data_root / "projects" / "-test-project" / f"{SESSION_B}.jsonl"
    broken.unlink()
    broken.mkdir()

    page = search_sessions("jwt", config)

    assert page.pagination.total > 0


def test_search_in_session(config, populated_root):
    matches = search_in_session(SESSION_A, "authentication", config)
    assert len(matches) == 4
    assert all(m.session_id == SESSION_A for m in matches)
    assert search_in_session(SESSION_B, "authentication", config) == []


def test_search_in_session_unknown(config, populated_root):
    with pytest.raises(SessionNotFoundError):
        search_in_session("ffff", "x", config)


def test_search_ignores_non_string_summary(config, write_session):
    write_session(
        "/w",
        SESSION_A,
        [{"type": "summary", "summary": {"title": "x"}}, user_record("a1", "nothing here")],
        mtime=2_000,
    )
    write_session("/w", SESSION_B, [user_record("b1", "a needle")], mtime=1_000)

    page = search_sessions("needle", config)

    assert [m.message_uuid for m in page.data] == ["b1"]


def test_search_skips_session_that_fails_matching(config, write_session, monkeypatch):
    write_session("/w", SESSION_A, [user_record("a1", "needle")], mtime=2_000)
    write_session("/w", SESSION_B, [user_record("b1", "needle")], mtime=1_000)

    original = searcher.search_session_messages

    def failing(session, query, context_lines):
        if session.id == SESSION_A:
            raise TypeError("unexpected content")
        return original(session, query, context_lines)

    monkeypatch.setattr(searcher, "search_session_messages", failing)

    page = search_sessions("needle", config)

    assert [m.session_id for m in page.data] == [SESSION_B]
