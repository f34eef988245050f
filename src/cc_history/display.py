"""Rich rendering for the command line."""

import json
import re
from datetime import datetime, timezone
from typing import Any

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cc_history.models import (
    AssistantMessage,
    FileHistorySnapshotMessage,
    Message,
    MigrateResult,
    Page,
    Pagination,
    SearchMatch,
    Session,
    SessionSummary,
    SummaryMessage,
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
    UserMessage,
)

# Characters of a tool result shown before truncating
MAX_TOOL_RESULT_CHARS = 500


def format_age(timestamp: datetime) -> str:
    """Relative time such as '3 days ago'."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    age = datetime.now(tz=timezone.utc) - timestamp
    if age.days > 0:
        return f"{age.days} days ago"
    if age.seconds >= 3600:
        return f"{age.seconds // 3600} hours ago"
    return f"{age.seconds // 60} minutes ago"


def truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def highlight_matches(text: str, query: str) -> Text:
    """Text with every case-insensitive occurrence of query highlighted."""
    rendered = Text(text)
    if query:
        rendered.highlight_regex(re.compile(re.escape(query), re.IGNORECASE), "bold yellow")
    return rendered


def format_pagination_hint(pagination: Pagination, noun: str) -> str:
    if pagination.total == 0:
        return ""
    start = pagination.offset + 1
    end = min(pagination.offset + pagination.limit, pagination.total)
    if start > end:
        return f"No {noun} at offset {pagination.offset} (total {pagination.total})"
    hint = f"Showing {noun} {start}-{end} of {pagination.total}"
    if pagination.has_more:
        hint += f" (use --offset {end} for more)"
    return hint


def json_result(data: Any, pagination: Pagination | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"success": True, "data": data}
    if pagination is not None:
        result["pagination"] = pagination.to_dict()
    return result


# Sessions


def session_table(page: Page[SessionSummary]) -> Table:
    table = Table(show_lines=False, header_style="bold")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("ID", style="dim")
    table.add_column("Project", style="green")
    table.add_column("Summary")
    table.add_column("Msgs", justify="right")
    table.add_column("Last activity", style="dim")

    for i, session in enumerate(page.data, page.pagination.offset):
        table.add_row(
            str(i),
            session.id[:8],
            session.project_path,
            Text(truncate(session.summary or "(no summary)", 60)),
            str(session.message_count),
            format_age(session.last_activity_at),
        )
    return table


def print_session_list(console: Console, page: Page[SessionSummary], workspace: str | None) -> None:
    if not page.data:
        if workspace:
            console.print(f"[yellow]No sessions found for workspace: {workspace}[/yellow]")
        else:
            console.print("[yellow]No sessions found.[/yellow]")
        return

    console.print(session_table(page))
    hint = format_pagination_hint(page.pagination, "sessions")
    if hint:
        console.print(hint, style="dim")


def session_header(session: Session) -> Panel:
    header = Table.grid(padding=(0, 2))
    header.add_column(style="bold")
    header.add_column()
    header.add_row("Session", session.id)
    header.add_row("Project", session.project_path)
    header.add_row("Started", session.timestamp.isoformat())
    last_activity = session.last_activity_at
    header.add_row("Last activity", f"{last_activity.isoformat()} ({format_age(last_activity)})")
    header.add_row("Messages", str(session.message_count))
    if session.git_branch:
        header.add_row("Git branch", session.git_branch)
    if session.version:
        header.add_row("Version", session.version)
    if session.agent_ids:
        header.add_row("Agent sessions", ", ".join(session.agent_ids))

    return Panel(header, title=Text(session.summary or "Untitled Session", style="bold"))


def message_panel(message: Message) -> Panel | None:
    """Panel for a user or assistant message; other types are not shown."""
    if isinstance(message, UserMessage):
        if isinstance(message.content, str):
            return Panel(Text(message.content), title="[cyan]You[/cyan]", title_align="left")
        parts: list[RenderableType] = []
        for result in message.content:
            style = "red" if result.is_error else "dim"
            body = result.content
            if len(body) > MAX_TOOL_RESULT_CHARS:
                hidden = len(body) - MAX_TOOL_RESULT_CHARS
                body = body[:MAX_TOOL_RESULT_CHARS] + f"\n[truncated - {hidden} more chars]"
            parts.append(Text(f"Tool result ({result.tool_use_id})", style="bold " + style))
            parts.append(Text(body, style=style))
        return Panel(Group(*parts), title="[cyan]Tool results[/cyan]", title_align="left")

    if isinstance(message, AssistantMessage):
        parts = []
        for block in message.content:
            if isinstance(block, TextBlock):
                parts.append(Text(block.text))
            elif isinstance(block, ThinkingBlock):
                parts.append(Text(block.thinking, style="italic dim"))
            elif isinstance(block, ToolUseBlock):
                parts.append(Text(f"Tool: {block.name}", style="magenta"))
                input_json = json.dumps(block.input, indent=2, ensure_ascii=False)
                parts.append(Text(input_json, style="dim"))
        title = "[green]Claude[/green]"
        if message.model:
            title += f" [dim]({message.model})[/dim]"
        return Panel(Group(*parts), title=title, title_align="left")

    if isinstance(message, (SummaryMessage, FileHistorySnapshotMessage)):
        return None

    raise TypeError(f"Unknown message type: {message!r}")


def print_session(console: Console, session: Session) -> None:
    console.print(session_header(session))
    for message in session.messages:
        panel = message_panel(message)
        if panel is not None:
            console.print(panel)


# Search


def match_panel(match: SearchMatch, index: int, query: str) -> Panel:
    header = Text()
    header.append(f"[{index}] ", style="bold cyan")
    header.append(f"Project: {match.project_path}", style="green")
    header.append(f" | {match.message_type}", style="dim")
    header.append(f" | line {match.line_number}", style="dim")

    body = highlight_matches("\n".join(match.context), query)
    subtitle = f"→ cc-history view {match.session_id[:8]}"
    if match.session_summary:
        subtitle += f"  {truncate(match.session_summary, 50)}"

    return Panel(body, title=header, subtitle=Text(subtitle), subtitle_align="left")


def print_search_results(console: Console, page: Page[SearchMatch], query: str) -> None:
    if not page.data:
        console.print(f"[yellow]No matches found for: {query}[/yellow]")
        return

    for i, match in enumerate(page.data, page.pagination.offset + 1):
        console.print(match_panel(match, i, query))

    console.print("─" * 50)
    console.print(format_pagination_hint(page.pagination, "matches"), style="dim")


# Migration


def print_migrate_result(console: Console, result: MigrateResult, mode: str) -> None:
    action = "Copied" if mode == "copy" else "Moved"

    if result.success_count > 0:
        plural = "s" if result.success_count != 1 else ""
        console.print(
            f"[green]{action} {result.success_count} session{plural} successfully.[/green]"
        )

    if result.failed_count > 0:
        plural = "s" if result.failed_count != 1 else ""
        console.print(f"[red]Failed to migrate {result.failed_count} session{plural}:[/red]")
        for error in result.errors:
            console.print(Text(f"  - {error.session_id}: {error.error}"))

    if result.success_count == 0 and result.failed_count == 0:
        console.print("[yellow]No sessions to migrate.[/yellow]")
