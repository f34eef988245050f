"""Pytest fixtures for cc-history tests."""

import json
import os
import tempfile
from pathlib import Path

import pytest

from cc_history.config import LibraryConfig
from cc_history.paths import encode_project_path

SESSION_A = "11111111-1111-4111-8111-111111111111"
SESSION_B = "22222222-2222-4222-8222-222222222222"
SESSION_C = "33333333-3333-4333-8333-333333333333"


def user_record(uuid: str, content, timestamp: str = "2024-01-15T10:00:00Z", **extra) -> dict:
    record = {
        "type": "user",
        "uuid": uuid,
        "parentUuid": None,
        "timestamp": timestamp,
        "message": {"role": "user", "content": content},
    }
    record.update(extra)
    return record


def assistant_record(
    uuid: str, blocks: list, timestamp: str = "2024-01-15T10:00:05Z", **extra
) -> dict:
    record = {
        "type": "assistant",
        "uuid": uuid,
        "parentUuid": None,
        "timestamp": timestamp,
        "message": {
            "role": "assistant",
            "model": "claude-sonnet-4-5",
            "content": blocks,
            "stop_reason": "end_turn",
            "usage": {
                "input_tokens": 10,
                "output_tokens": 20,
                "cache_creation_input_tokens": 0,
                "cache_read_input_tokens": 5,
            },
        },
    }
    record.update(extra)
    return record


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def data_root(temp_dir):
    """An empty Claude Code data directory with a projects/ folder."""
    root = temp_dir / ".claude"
    (root / "projects").mkdir(parents=True)
    return root


@pytest.fixture
def config(data_root):
    return LibraryConfig(data_path=data_root)


@pytest.fixture
def write_session(data_root):
    """Write a session file; returns its path.

    `mtime` sets the file modification time, which drives listing order.
    """

    def _write(workspace: str, session_id: str, records: list, mtime: float | None = None,
               raw_lines: list[str] | None = None) -> Path:
        project_dir = data_root / "projects" / encode_project_path(workspace)
        project_dir.mkdir(parents=True, exist_ok=True)
        path = project_dir / f"{session_id}.jsonl"

        lines = [json.dumps(record) for record in records]
        if raw_lines:
            lines.extend(raw_lines)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")

        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _write


@pytest.fixture
def sample_records():
    """A short conversation with a summary, tool use and a file snapshot."""
    return [
        {"type": "summary", "summary": "Implement JWT authentication", "leafUuid": "msg-004"},
        user_record(
            "msg-001",
            "How do I implement authentication?",
            cwd="/test/project",
            gitBranch="main",
            version="1.0.30",
            sessionId=SESSION_A,
        ),
        assistant_record(
            "msg-002",
            [
                {"type": "thinking", "thinking": "The user wants auth."},
                {"type": "text", "text": "For authentication, you can use JWT tokens."},
                {
                    "type": "tool_use",
                    "id": "toolu_01",
                    "name": "Read",
                    "input": {"file_path": "/test/project/auth.py"},
                },
            ],
        ),
        user_record(
            "msg-003",
            [{"type": "tool_result", "tool_use_id": "toolu_01", "content": "def login(): pass"}],
            timestamp="2024-01-15T10:00:10Z",
        ),
        {
            "type": "file-history-snapshot",
            "messageId": "msg-003",
            "snapshot": {
                "messageId": "msg-003",
                "timestamp": "2024-01-15T10:00:10Z",
                "trackedFileBackups": {
                    "/test/project/auth.py": {
                        "backupFileName": "abc@v1",
                        "version": 1,
                        "backupTime": "2024-01-15T10:00:10Z",
                    }
                },
            },
        },
        assistant_record(
            "msg-004",
            [{"type": "text", "text": "Here is an example of JWT authentication."}],
            timestamp="2024-01-15T10:01:00Z",
        ),
    ]


@pytest.fixture
def populated_root(write_session, sample_records):
    """Three sessions in two workspaces plus one agent session.

    Listing order (most recent first): SESSION_C, SESSION_B, SESSION_A.
    """
    write_session("/test/project", SESSION_A, sample_records, mtime=1_700_000_000)
    write_session(
        "/test/project",
        SESSION_B,
        [user_record("b-001", "Refactor the database layer", timestamp="2024-02-01T09:00:00Z")],
        mtime=1_700_000_100,
    )
    write_session(
        "/other/repo",
        SESSION_C,
        [user_record("c-001", "Fix the flaky test", timestamp="2024-03-01T09:00:00Z")],
        mtime=1_700_000_200,
    )
    write_session(
        "/test/project",
        "agent-abc1234",
        [user_record("agent-001", "Search the codebase", agentId="abc1234")],
        mtime=1_700_000_300,
    )
