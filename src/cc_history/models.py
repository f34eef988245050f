"""Data models for cc-history."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Generic, Literal, TypeVar, Union

T = TypeVar("T")

# One decoded JSONL line, before it is mapped to a Message
RawEntry = dict[str, Any]


def _iso(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


# Content blocks


@dataclass
class TextBlock:
    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass
class ToolUseBlock:
    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)
    type: Literal["tool_use"] = "tool_use"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id, "name": self.name, "input": self.input}


@dataclass
class ThinkingBlock:
    thinking: str
    type: Literal["thinking"] = "thinking"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "thinking": self.thinking}


@dataclass
class ToolResultBlock:
    tool_use_id: str
    content: str
    is_error: bool = False
    type: Literal["tool_result"] = "tool_result"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error:
            data["is_error"] = True
        return data


AssistantContent = Union[TextBlock, ToolUseBlock, ThinkingBlock]


# Supporting types


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "inputTokens": self.input_tokens,
            "outputTokens": self.output_tokens,
            "cacheCreationInputTokens": self.cache_creation_input_tokens,
            "cacheReadInputTokens": self.cache_read_input_tokens,
        }


@dataclass
class FileBackup:
    """Backup descriptor for one tracked file."""

    backup_file_name: str | None
    version: int
    backup_time: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "backupFileName": self.backup_file_name,
            "version": self.version,
            "backupTime": _iso(self.backup_time),
        }


@dataclass
class FileSnapshot:
    message_id: str
    timestamp: datetime | None
    tracked_file_backups: dict[str, FileBackup] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "messageId": self.message_id,
            "timestamp": _iso(self.timestamp),
            "trackedFileBackups": {
                path: backup.to_dict() for path, backup in self.tracked_file_backups.items()
            },
        }


# Messages (discriminated by `type`)


@dataclass
class UserMessage:
    """A chat turn from the user, or a batch of tool results."""

    uuid: str
    parent_uuid: str | None
    timestamp: datetime
    content: str | list[ToolResultBlock]
    cwd: str = ""
    git_branch: str | None = None
    is_sidechain: bool = False
    type: Literal["user"] = "user"
    role: Literal["user"] = "user"

    def to_dict(self) -> dict[str, Any]:
        content: Any = self.content
        if not isinstance(content, str):
            content = [block.to_dict() for block in content]
        return {
            "type": self.type,
            "uuid": self.uuid,
            "parentUuid": self.parent_uuid,
            "timestamp": self.timestamp.isoformat(),
            "role": self.role,
            "content": content,
            "cwd": self.cwd,
            "gitBranch": self.git_branch,
            "isSidechain": self.is_sidechain,
        }


@dataclass
class AssistantMessage:
    """A model response made of text, tool use and thinking blocks."""

    uuid: str
    parent_uuid: str | None
    timestamp: datetime
    content: list[AssistantContent] = field(default_factory=list)
    model: str = ""
    stop_reason: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    type: Literal["assistant"] = "assistant"
    role: Literal["assistant"] = "assistant"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "uuid": self.uuid,
            "parentUuid": self.parent_uuid,
            "timestamp": self.timestamp.isoformat(),
            "role": self.role,
            "model": self.model,
            "content": [block.to_dict() for block in self.content],
            "stopReason": self.stop_reason,
            "usage": self.usage.to_dict(),
        }


@dataclass
class SummaryMessage:
    uuid: str
    parent_uuid: str | None
    timestamp: datetime
    summary: str
    leaf_uuid: str = ""
    type: Literal["summary"] = "summary"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "uuid": self.uuid,
            "parentUuid": self.parent_uuid,
            "timestamp": self.timestamp.isoformat(),
            "summary": self.summary,
            "leafUuid": self.leaf_uuid,
        }


@dataclass
class FileHistorySnapshotMessage:
    uuid: str
    parent_uuid: str | None
    timestamp: datetime
    message_id: str
    snapshot: FileSnapshot
    type: Literal["file-history-snapshot"] = "file-history-snapshot"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "uuid": self.uuid,
            "parentUuid": self.parent_uuid,
            "timestamp": self.timestamp.isoformat(),
            "messageId": self.message_id,
            "snapshot": self.snapshot.to_dict(),
        }


Message = Union[UserMessage, AssistantMessage, SummaryMessage, FileHistorySnapshotMessage]

# Message types counted towards a session's message count
CONVERSATION_TYPES = ("user", "assistant")


# Parsing


@dataclass
class ParseWarning:
    """A JSONL line that could not be decoded."""

    line: int
    error: str
    content: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"line": self.line, "error": self.error}
        if self.content is not None:
            data["content"] = self.content
        return data


@dataclass
class ParseResult(Generic[T]):
    data: T
    warnings: list[ParseWarning] = field(default_factory=list)


@dataclass
class SessionMetadata:
    """Fields gathered by the metadata-only pass over a session file."""

    summary: str | None = None
    version: str = ""
    git_branch: str | None = None
    session_id: str | None = None
    agent_id: str | None = None
    first_timestamp: datetime | None = None
    last_timestamp: datetime | None = None
    message_count: int = 0


# Sessions


@dataclass
class SessionInfo:
    """A session file found during discovery."""

    id: str
    file_path: Path
    project_path: str
    encoded_path: str
    is_agent: bool
    agent_id: str | None
    modified_time: datetime


@dataclass
class SessionSummary:
    """Lightweight session metadata for listing."""

    id: str
    project_path: str
    summary: str | None
    timestamp: datetime
    last_activity_at: datetime
    message_count: int
    agent_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "projectPath": self.project_path,
            "summary": self.summary,
            "timestamp": self.timestamp.isoformat(),
            "lastActivityAt": self.last_activity_at.isoformat(),
            "messageCount": self.message_count,
            "agentIds": list(self.agent_ids),
        }


@dataclass
class Session(SessionSummary):
    """A fully parsed session with all of its messages."""

    encoded_path: str = ""
    version: str = ""
    git_branch: str | None = None
    messages: list[Message] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "encodedPath": self.encoded_path,
                "version": self.version,
                "gitBranch": self.git_branch,
                "messages": [message.to_dict() for message in self.messages],
            }
        )
        return data


# Pagination


@dataclass
class Pagination:
    total: int
    limit: int
    offset: int
    has_more: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }


@dataclass
class Page(Generic[T]):
    """One page of results plus pagination metadata."""

    data: list[T]
    pagination: Pagination


# Search


@dataclass
class SearchMatch:
    """A single occurrence of the query inside a message."""

    session_id: str
    session_summary: str | None
    project_path: str
    message_uuid: str
    message_type: str  # "user" | "assistant" | "summary"
    match: str
    context: list[str]
    line_number: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "sessionSummary": self.session_summary,
            "projectPath": self.project_path,
            "messageUuid": self.message_uuid,
            "messageType": self.message_type,
            "match": self.match,
            "context": list(self.context),
            "lineNumber": self.line_number,
        }


# Migration


@dataclass
class MigrateError:
    session_id: str
    error: str

    def to_dict(self) -> dict[str, str]:
        return {"sessionId": self.session_id, "error": self.error}


@dataclass
class MigrateResult:
    """Outcome of a batch migration; per-session failures live in `errors`."""

    success_count: int = 0
    errors: list[MigrateError] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "successCount": self.success_count,
            "failedCount": self.failed_count,
            "errors": [error.to_dict() for error in self.errors],
        }
