"""Export sessions to JSON and Markdown."""

import json
from enum import Enum

from cc_history.config import LibraryConfig
from cc_history.errors import ConfigError
from cc_history.models import (
    AssistantContent,
    AssistantMessage,
    FileHistorySnapshotMessage,
    Message,
    Session,
    SummaryMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)
from cc_history.sessions import SessionRef, get_session, iter_sessions

SESSION_SEPARATOR = "\n\n---\n\n"


class ExportFormat(str, Enum):
    JSON = "json"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, value: "str | ExportFormat") -> "ExportFormat":
        if isinstance(value, str) and value.lower() == "md":
            return cls.MARKDOWN
        try:
            return cls(value.lower() if isinstance(value, str) else value)
        except ValueError:
            raise ConfigError(f"Invalid format: {value}. Use 'json' or 'markdown'.") from None


# JSON


def export_session_to_json(identifier: int | str | SessionRef, config: LibraryConfig) -> str:
    session = get_session(identifier, config)
    return json.dumps(session.to_dict(), indent=2, ensure_ascii=False)


def export_all_sessions_to_json(config: LibraryConfig) -> str:
    sessions = [session.to_dict() for session in iter_sessions(config)]
    return json.dumps(sessions, indent=2, ensure_ascii=False)


# Markdown


def format_user_content(content: str | list[ToolResultBlock]) -> str:
    if isinstance(content, str):
        return content

    parts = [
        f"<details>\n<summary>Tool Result ({result.tool_use_id})</summary>\n\n"
        f"```\n{result.content}\n```\n\n</details>"
        for result in content
    ]
    return "\n\n".join(parts)


def format_assistant_content(content: list[AssistantContent]) -> str:
    parts: list[str] = []

    for block in content:
        if isinstance(block, TextBlock):
            parts.append(block.text)
        elif isinstance(block, ThinkingBlock):
            parts.append(
                f"<details>\n<summary>Thinking</summary>\n\n{block.thinking}\n\n</details>"
            )
        elif isinstance(block, ToolUseBlock):
            input_json = json.dumps(block.input, indent=2, ensure_ascii=False)
            parts.append(
                f"<details>\n<summary>Tool: {block.name}</summary>\n\n"
                f"**Input:**\n```json\n{input_json}\n```\n\n</details>"
            )

    return "\n\n".join(parts)


def format_message_markdown(message: Message) -> str | None:
    """Markdown section for a message; summaries and snapshots are skipped."""
    if isinstance(message, UserMessage):
        return f"## User\n\n{format_user_content(message.content)}"

    if isinstance(message, AssistantMessage):
        model = f" ({message.model})" if message.model else ""
        return f"## Assistant{model}\n\n{format_assistant_content(message.content)}"

    if isinstance(message, (SummaryMessage, FileHistorySnapshotMessage)):
        return None

    raise TypeError(f"Unknown message type: {message!r}")


def format_session_header(session: Session) -> str:
    lines = [
        f"# {session.summary or 'Untitled Session'}",
        "",
        "| Property | Value |",
        "|----------|-------|",
        f"| Session ID | `{session.id}` |",
        f"| Project | `{session.project_path}` |",
        f"| Started | {session.timestamp.isoformat()} |",
        f"| Last Activity | {session.last_activity_at.isoformat()} |",
        f"| Messages | {session.message_count} |",
    ]

    if session.git_branch:
        lines.append(f"| Git Branch | `{session.git_branch}` |")
    if session.version:
        lines.append(f"| Claude Code Version | {session.version} |")
    if session.agent_ids:
        lines.append(f"| Agent Sessions | {', '.join(session.agent_ids)} |")

    lines.extend(["", "---", ""])
    return "\n".join(lines)


def session_to_markdown(session: Session) -> str:
    parts = [format_session_header(session)]
    for message in session.messages:
        formatted = format_message_markdown(message)
        if formatted:
            parts.append(formatted)
    return "\n\n".join(parts)


def export_session_to_markdown(identifier: int | str | SessionRef, config: LibraryConfig) -> str:
    return session_to_markdown(get_session(identifier, config))


def export_all_sessions_to_markdown(config: LibraryConfig) -> str:
    return SESSION_SEPARATOR.join(session_to_markdown(s) for s in iter_sessions(config))


def export_session(
    identifier: int | str | SessionRef,
    export_format: ExportFormat | str,
    config: LibraryConfig,
) -> str:
    """Export one session in the requested format."""
    if ExportFormat.parse(export_format) is ExportFormat.JSON:
        return export_session_to_json(identifier, config)
    return export_session_to_markdown(identifier, config)


def export_all_sessions(export_format: ExportFormat | str, config: LibraryConfig) -> str:
    """Export every session (agent sessions excluded) in the requested format."""
    if ExportFormat.parse(export_format) is ExportFormat.JSON:
        return export_all_sessions_to_json(config)
    return export_all_sessions_to_markdown(config)
