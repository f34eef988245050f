"""JSONL session file parser.

Session files are read line by line. A line that is not valid JSON is
recorded as a ParseWarning and skipped; it never aborts the rest of the
file. Decoded entries are then mapped onto the typed Message model.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cc_history.models import (
    CONVERSATION_TYPES,
    AssistantContent,
    AssistantMessage,
    FileBackup,
    FileHistorySnapshotMessage,
    FileSnapshot,
    Message,
    ParseResult,
    ParseWarning,
    RawEntry,
    SessionMetadata,
    SummaryMessage,
    TextBlock,
    ThinkingBlock,
    TokenUsage,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)

logger = logging.getLogger(__name__)

# Maximum characters of an offending line kept in a warning
WARNING_CONTENT_CHARS = 100


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into a UTC-aware datetime."""
    if not isinstance(value, str) or not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _truncate(text: str) -> str:
    if len(text) > WARNING_CONTENT_CHARS:
        return text[:WARNING_CONTENT_CHARS] + "..."
    return text


def parse_json_line(line: str, line_number: int) -> tuple[RawEntry | None, ParseWarning | None]:
    """Decode one JSONL line.

    Returns (entry, None) on success, (None, warning) for an invalid line
    and (None, None) for a blank line.
    """
    stripped = line.strip()
    if not stripped:
        return None, None

    try:
        entry = json.loads(stripped)
    except json.JSONDecodeError as e:
        return None, ParseWarning(
            line=line_number, error=f"Invalid JSON: {e}", content=_truncate(stripped)
        )

    if not isinstance(entry, dict):
        return None, ParseWarning(
            line=line_number,
            error=f"Invalid entry: expected a JSON object, got {type(entry).__name__}",
            content=_truncate(stripped),
        )

    return entry, None


def parse_jsonl_file(path: str | Path) -> ParseResult[list[RawEntry]]:
    """Read every entry of a JSONL file, collecting warnings for bad lines."""
    entries: list[RawEntry] = []
    warnings: list[ParseWarning] = []

    with open(path, encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(f, 1):
            entry, warning = parse_json_line(line, line_number)
            if entry is not None:
                entries.append(entry)
            elif warning is not None:
                logger.debug("%s:%d: %s", path, warning.line, warning.error)
                warnings.append(warning)

    return ParseResult(data=entries, warnings=warnings)


# Message transformation


def _int(value: Any) -> int:
    return value if isinstance(value, int) else 0


def transform_token_usage(raw: Any) -> TokenUsage:
    if not isinstance(raw, dict):
        return TokenUsage()
    return TokenUsage(
        input_tokens=_int(raw.get("input_tokens")),
        output_tokens=_int(raw.get("output_tokens")),
        cache_creation_input_tokens=_int(raw.get("cache_creation_input_tokens")),
        cache_read_input_tokens=_int(raw.get("cache_read_input_tokens")),
    )


def transform_file_snapshot(raw: dict[str, Any]) -> FileSnapshot:
    backups: dict[str, FileBackup] = {}
    tracked = raw.get("trackedFileBackups")
    if isinstance(tracked, dict):
        for file_path, backup in tracked.items():
            if not isinstance(backup, dict):
                continue
            backups[file_path] = FileBackup(
                backup_file_name=backup.get("backupFileName"),
                version=_int(backup.get("version")),
                backup_time=parse_timestamp(backup.get("backupTime")),
            )

    return FileSnapshot(
        message_id=str(raw.get("messageId") or ""),
        timestamp=parse_timestamp(raw.get("timestamp")),
        tracked_file_backups=backups,
    )


def _tool_result_text(content: Any) -> str:
    # Tool results hold either a string or a list of text blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            str(block.get("text", ""))
            for block in content
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return "\n".join(parts)
    if content is None:
        return ""
    return str(content)


def parse_user_content(raw_content: Any) -> str | list[ToolResultBlock]:
    """Plain string for a chat turn, tool result blocks otherwise."""
    if isinstance(raw_content, str):
        return raw_content

    if isinstance(raw_content, list):
        results: list[ToolResultBlock] = []
        for item in raw_content:
            if not isinstance(item, dict) or item.get("type") != "tool_result":
                continue
            results.append(
                ToolResultBlock(
                    tool_use_id=str(item.get("tool_use_id") or ""),
                    content=_tool_result_text(item.get("content")),
                    is_error=item.get("is_error") is True,
                )
            )
        return results

    return ""


def parse_assistant_content(raw_content: Any) -> list[AssistantContent]:
    if isinstance(raw_content, str):
        return [TextBlock(text=raw_content)]
    if not isinstance(raw_content, list):
        return []

    blocks: list[AssistantContent] = []
    for item in raw_content:
        if not isinstance(item, dict):
            continue

        block_type = item.get("type")
        if block_type == "text":
            blocks.append(TextBlock(text=str(item.get("text") or "")))
        elif block_type == "tool_use":
            tool_input = item.get("input")
            blocks.append(
                ToolUseBlock(
                    id=str(item.get("id") or ""),
                    name=str(item.get("name") or ""),
                    input=tool_input if isinstance(tool_input, dict) else {},
                )
            )
        elif block_type == "thinking":
            blocks.append(ThinkingBlock(thinking=str(item.get("thinking") or "")))

    return blocks


def _string_field(entry: RawEntry, key: str) -> str:
    # Non-string values are dropped
    value = entry.get(key)
    return value if isinstance(value, str) else ""


def transform_entry(entry: RawEntry) -> Message | None:
    """Map a raw entry to a Message, or None for entries that are not messages."""
    timestamp = parse_timestamp(entry.get("timestamp")) or datetime.now(tz=timezone.utc)
    uuid = entry.get("uuid") or ""
    parent_uuid = entry.get("parentUuid")
    entry_type = entry.get("type")

    message = entry.get("message")
    if not isinstance(message, dict):
        message = {}

    if entry_type == "user":
        return UserMessage(
            uuid=uuid,
            parent_uuid=parent_uuid,
            timestamp=timestamp,
            content=parse_user_content(message.get("content")),
            cwd=entry.get("cwd") or "",
            git_branch=entry.get("gitBranch") or None,
            is_sidechain=entry.get("isSidechain") is True,
        )

    if entry_type == "assistant":
        return AssistantMessage(
            uuid=uuid,
            parent_uuid=parent_uuid,
            timestamp=timestamp,
            content=parse_assistant_content(message.get("content")),
            model=message.get("model") or "",
            stop_reason=message.get("stop_reason"),
            usage=transform_token_usage(message.get("usage")),
        )

    if entry_type == "summary":
        return SummaryMessage(
            uuid=uuid,
            parent_uuid=parent_uuid,
            timestamp=timestamp,
            summary=_string_field(entry, "summary"),
            leaf_uuid=entry.get("leafUuid") or "",
        )

    if entry_type == "file-history-snapshot":
        snapshot = entry.get("snapshot")
        if not isinstance(snapshot, dict):
            return None
        return FileHistorySnapshotMessage(
            uuid=uuid,
            parent_uuid=parent_uuid,
            timestamp=timestamp,
            message_id=entry.get("messageId") or "",
            snapshot=transform_file_snapshot(snapshot),
        )

    return None


def transform_entries(entries: list[RawEntry]) -> list[Message]:
    messages: list[Message] = []
    for entry in entries:
        message = transform_entry(entry)
        if message is not None:
            messages.append(message)
    return messages


def parse_session_file(path: str | Path) -> ParseResult[list[Message]]:
    """Parse a session file into typed messages, in file order."""
    result = parse_jsonl_file(path)
    return ParseResult(data=transform_entries(result.data), warnings=result.warnings)


# Metadata-only extraction


def extract_metadata(entries: list[RawEntry]) -> SessionMetadata:
    """Collect listing metadata in a single pass over raw entries.

    Timestamps and the message count only consider user/assistant entries.
    """
    metadata = SessionMetadata()

    for entry in entries:
        entry_type = entry.get("type")

        if entry_type == "summary" and metadata.summary is None:
            metadata.summary = _string_field(entry, "summary") or None

        if not metadata.version:
            metadata.version = _string_field(entry, "version")
        if metadata.git_branch is None:
            metadata.git_branch = _string_field(entry, "gitBranch") or None
        if metadata.session_id is None and entry.get("sessionId"):
            metadata.session_id = entry["sessionId"]
        if metadata.agent_id is None and entry.get("agentId"):
            metadata.agent_id = entry["agentId"]

        if entry_type not in CONVERSATION_TYPES:
            continue

        metadata.message_count += 1
        ts = parse_timestamp(entry.get("timestamp"))
        if ts is None:
            continue
        if metadata.first_timestamp is None or ts < metadata.first_timestamp:
            metadata.first_timestamp = ts
        if metadata.last_timestamp is None or ts > metadata.last_timestamp:
            metadata.last_timestamp = ts

    return metadata


def parse_session_metadata(path: str | Path) -> ParseResult[SessionMetadata]:
    """Fast path for listings: metadata without building Message objects."""
    result = parse_jsonl_file(path)
    return ParseResult(data=extract_metadata(result.data), warnings=result.warnings)
