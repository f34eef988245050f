"""Case-insensitive substring search over session messages."""

import json
import logging

from cc_history.config import LibraryConfig, create_pagination, paginate
from cc_history.models import (
    AssistantMessage,
    FileHistorySnapshotMessage,
    Message,
    Page,
    SearchMatch,
    Session,
    SummaryMessage,
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
    UserMessage,
)
from cc_history.sessions import SessionRef, get_session, iter_sessions

logger = logging.getLogger(__name__)


def extract_message_text(message: Message) -> list[str]:
    """Return the searchable text blocks of a message."""
    if isinstance(message, UserMessage):
        if isinstance(message.content, str):
            return [message.content]
        return [result.content for result in message.content]

    if isinstance(message, AssistantMessage):
        texts: list[str] = []
        for block in message.content:
            if isinstance(block, TextBlock):
                texts.append(block.text)
            elif isinstance(block, ThinkingBlock):
                texts.append(block.thinking)
            elif isinstance(block, ToolUseBlock):
                # Tool arguments are searchable through their JSON form
                texts.append(f"Tool: {block.name}")
                texts.append(json.dumps(block.input))
        return texts

    if isinstance(message, SummaryMessage):
        return [message.summary]

    if isinstance(message, FileHistorySnapshotMessage):
        return []

    raise TypeError(f"Unknown message type: {message!r}")


def find_occurrences(text: str, query: str) -> list[int]:
    """Start offsets of every case-insensitive occurrence of query in text.

    Scanning resumes one character after each match start, so overlapping
    occurrences ("aa" in "aaa") are all reported.
    """
    lower_text = text.lower()
    lower_query = query.lower()
    if not lower_query:
        return []

    offsets: list[int] = []
    start = lower_text.find(lower_query)
    while start != -1:
        offsets.append(start)
        start = lower_text.find(lower_query, start + 1)
    return offsets


def extract_context(text: str, match_index: int, context_lines: int) -> tuple[list[str], int]:
    """Lines around the character offset match_index.

    Returns the context lines (clamped to the text) and the 1-based line
    number of the line containing the match.
    """
    lines = text.split("\n")
    char_count = 0
    match_line = 0

    for i, line in enumerate(lines):
        line_length = len(line) + 1  # newline
        if char_count + line_length > match_index:
            match_line = i
            break
        char_count += line_length

    start = max(0, match_line - context_lines)
    end = min(len(lines) - 1, match_line + context_lines)

    return lines[start : end + 1], match_line + 1


def search_in_message(
    message: Message,
    query: str,
    session: Session,
    context_lines: int,
) -> list[SearchMatch]:
    """All matches of query inside a single message."""
    matches: list[SearchMatch] = []

    for text in extract_message_text(message):
        for offset in find_occurrences(text, query):
            context, line_number = extract_context(text, offset, context_lines)
            matches.append(
                SearchMatch(
                    session_id=session.id,
                    session_summary=session.summary,
                    project_path=session.project_path,
                    message_uuid=message.uuid,
                    message_type=message.type,
                    match=text[offset : offset + len(query)],
                    context=context,
                    line_number=line_number,
                )
            )

    return matches


def search_session_messages(session: Session, query: str, context_lines: int) -> list[SearchMatch]:
    matches: list[SearchMatch] = []
    for message in session.messages:
        matches.extend(search_in_message(message, query, session, context_lines))
    return matches


def search_sessions(query: str, config: LibraryConfig) -> Page[SearchMatch]:
    """Search every session for query and paginate the matches.

    The total in the returned pagination is the number of matches across
    all sessions, independent of limit and offset.
    """
    if not query or not query.strip():
        return Page(data=[], pagination=create_pagination(0, config))

    all_matches: list[SearchMatch] = []

    for session in iter_sessions(config):
        try:
            all_matches.extend(search_session_messages(session, query, config.context))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning("Skipping session %s during search: %s", session.id, e)

    logger.debug("Query %r matched %d time(s)", query, len(all_matches))

    return Page(
        data=paginate(all_matches, config),
        pagination=create_pagination(len(all_matches), config),
    )


def search_in_session(
    identifier: int | str | SessionRef,
    query: str,
    config: LibraryConfig,
) -> list[SearchMatch]:
    """Search a single session; results are not paginated."""
    if not query or not query.strip():
        return []

    session = get_session(identifier, config)
    return search_session_messages(session, query, config.context)
