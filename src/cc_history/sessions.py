"""Session discovery and retrieval.

Nothing is cached: every call walks the data root again and re-reads the
session files it needs.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from cc_history.config import LibraryConfig, create_pagination, paginate
from cc_history.errors import DataNotFoundError, SessionNotFoundError
from cc_history.models import (
    CONVERSATION_TYPES,
    Message,
    Page,
    Session,
    SessionInfo,
    SessionSummary,
    SummaryMessage,
)
from cc_history.parser import (
    extract_metadata,
    parse_jsonl_file,
    parse_session_metadata,
    transform_entries,
)
from cc_history.paths import (
    AGENT_PREFIX,
    classify_session_file,
    decode_project_path,
    get_projects_path,
    is_uuid,
    normalize_agent_id,
)

logger = logging.getLogger(__name__)


# Session identifiers


@dataclass(frozen=True)
class IndexRef:
    """Zero-based position in the listing order."""

    index: int


@dataclass(frozen=True)
class UuidRef:
    uuid: str


@dataclass(frozen=True)
class AgentRef:
    """Full 'agent-<id>' session id."""

    session_id: str


@dataclass(frozen=True)
class PrefixRef:
    prefix: str


SessionRef = Union[IndexRef, UuidRef, AgentRef, PrefixRef]


def parse_session_ref(identifier: int | str | SessionRef) -> SessionRef:
    """Classify a caller-supplied identifier before it is resolved."""
    if isinstance(identifier, (IndexRef, UuidRef, AgentRef, PrefixRef)):
        return identifier
    if isinstance(identifier, int):
        return IndexRef(identifier)
    if is_uuid(identifier):
        return UuidRef(identifier)
    if identifier.startswith(AGENT_PREFIX):
        return AgentRef(identifier)
    return PrefixRef(identifier)


def _describe(identifier: int | str | SessionRef) -> int | str:
    if isinstance(identifier, IndexRef):
        return identifier.index
    if isinstance(identifier, UuidRef):
        return identifier.uuid
    if isinstance(identifier, AgentRef):
        return identifier.session_id
    if isinstance(identifier, PrefixRef):
        return identifier.prefix
    return identifier


# Discovery


def validate_data_path(data_path: Path) -> None:
    """Raise DataNotFoundError unless the data root is an existing directory."""
    if not data_path.is_dir():
        raise DataNotFoundError(str(data_path))


def discover_sessions(config: LibraryConfig) -> list[SessionInfo]:
    """Find every session file under <data_path>/projects.

    Returns an empty list when the projects directory does not exist.
    """
    projects_path = get_projects_path(config.data_path)
    if not projects_path.is_dir():
        return []

    sessions: list[SessionInfo] = []

    for project_dir in sorted(projects_path.iterdir()):
        if not project_dir.is_dir():
            continue

        encoded_path = project_dir.name
        project_path = decode_project_path(encoded_path)

        if config.workspace and project_path != config.workspace:
            continue

        for file_path in sorted(project_dir.iterdir()):
            classified = classify_session_file(file_path.name)
            if classified is None:
                continue

            try:
                mtime = file_path.stat().st_mtime
            except OSError:
                logger.debug("Cannot stat %s, skipping", file_path)
                continue

            sessions.append(
                SessionInfo(
                    id=classified.session_id,
                    file_path=file_path,
                    project_path=project_path,
                    encoded_path=encoded_path,
                    is_agent=classified.is_agent,
                    agent_id=classified.agent_id,
                    modified_time=datetime.fromtimestamp(mtime, tz=timezone.utc),
                )
            )

    return sessions


def sort_main_sessions(sessions: list[SessionInfo]) -> list[SessionInfo]:
    """Non-agent sessions, most recently modified first."""
    main_sessions = [s for s in sessions if not s.is_agent]
    return sorted(main_sessions, key=lambda s: (-s.modified_time.timestamp(), s.id))


def find_linked_agent_ids(info: SessionInfo, all_sessions: list[SessionInfo]) -> list[str]:
    """Agent ids linked to a main session.

    Approximation: every agent session in the same workspace directory is
    reported, not only the ones spawned by this session.
    """
    if info.is_agent:
        return []
    return [
        s.agent_id
        for s in all_sessions
        if s.is_agent and s.agent_id is not None and s.encoded_path == info.encoded_path
    ]


# Listing


def build_session_summary(info: SessionInfo, all_sessions: list[SessionInfo]) -> SessionSummary:
    metadata = parse_session_metadata(info.file_path).data

    return SessionSummary(
        id=info.id,
        project_path=info.project_path,
        summary=metadata.summary,
        timestamp=metadata.first_timestamp or info.modified_time,
        last_activity_at=metadata.last_timestamp or info.modified_time,
        message_count=metadata.message_count,
        agent_ids=find_linked_agent_ids(info, all_sessions),
    )


def list_sessions(config: LibraryConfig) -> Page[SessionSummary]:
    """List sessions, most recent first, excluding agent sessions.

    Only the sessions on the requested page are read, and only their
    metadata is extracted.
    """
    validate_data_path(config.data_path)

    all_sessions = discover_sessions(config)
    main_sessions = sort_main_sessions(all_sessions)

    summaries = [
        build_session_summary(info, all_sessions) for info in paginate(main_sessions, config)
    ]

    return Page(data=summaries, pagination=create_pagination(len(main_sessions), config))


# Retrieval


def resolve_session_info(
    ref: SessionRef,
    main_sessions: list[SessionInfo],
    all_sessions: list[SessionInfo],
) -> SessionInfo | None:
    if isinstance(ref, IndexRef):
        if 0 <= ref.index < len(main_sessions):
            return main_sessions[ref.index]
        return None
    if isinstance(ref, UuidRef):
        return next((s for s in main_sessions if s.id == ref.uuid), None)
    if isinstance(ref, AgentRef):
        return next((s for s in all_sessions if s.id == ref.session_id), None)
    if isinstance(ref, PrefixRef):
        if not ref.prefix:
            return None
        return next((s for s in main_sessions if s.id.startswith(ref.prefix)), None)
    raise TypeError(f"Unknown session reference: {ref!r}")


def _summarize_messages(
    messages: list[Message],
) -> tuple[str | None, datetime | None, datetime | None]:
    summary: str | None = None
    first: datetime | None = None
    last: datetime | None = None

    for message in messages:
        if isinstance(message, SummaryMessage):
            if summary is None and message.summary:
                summary = message.summary
            continue
        if message.type not in CONVERSATION_TYPES:
            continue
        if first is None or message.timestamp < first:
            first = message.timestamp
        if last is None or message.timestamp > last:
            last = message.timestamp

    return summary, first, last


def load_session(info: SessionInfo, all_sessions: list[SessionInfo]) -> Session:
    """Fully parse a discovered session file."""
    raw = parse_jsonl_file(info.file_path)
    messages = transform_entries(raw.data)
    metadata = extract_metadata(raw.data)
    summary, first, last = _summarize_messages(messages)

    if raw.warnings:
        logger.debug("Session %s: skipped %d invalid line(s)", info.id, len(raw.warnings))

    return Session(
        id=info.id,
        project_path=info.project_path,
        summary=summary,
        timestamp=first or info.modified_time,
        last_activity_at=last or info.modified_time,
        message_count=sum(1 for m in messages if m.type in CONVERSATION_TYPES),
        agent_ids=find_linked_agent_ids(info, all_sessions),
        encoded_path=info.encoded_path,
        version=metadata.version,
        git_branch=metadata.git_branch,
        messages=messages,
    )


def find_session(
    identifier: int | str | SessionRef, config: LibraryConfig
) -> tuple[SessionInfo, list[SessionInfo]]:
    """Resolve an identifier to its SessionInfo without parsing the file."""
    validate_data_path(config.data_path)

    all_sessions = discover_sessions(config)
    main_sessions = sort_main_sessions(all_sessions)

    info = resolve_session_info(parse_session_ref(identifier), main_sessions, all_sessions)
    if info is None:
        raise SessionNotFoundError(_describe(identifier))
    return info, all_sessions


def get_session(identifier: int | str | SessionRef, config: LibraryConfig) -> Session:
    """Get a session by index, UUID, UUID prefix or agent session id.

    Integers index into the listing order (most recent first). Raises
    SessionNotFoundError when nothing matches.
    """
    info, all_sessions = find_session(identifier, config)
    return load_session(info, all_sessions)


def get_agent_session(agent_id: str, config: LibraryConfig) -> Session:
    """Get an agent session by 'abc1234' or 'agent-abc1234'."""
    validate_data_path(config.data_path)

    session_id = normalize_agent_id(agent_id)
    all_sessions = discover_sessions(config)
    info = next((s for s in all_sessions if s.id == session_id), None)
    if info is None:
        raise SessionNotFoundError(agent_id)
    return load_session(info, all_sessions)


def iter_sessions(config: LibraryConfig) -> Iterator[Session]:
    """Yield every non-agent session in listing order.

    Sessions that fail to load are logged and skipped.
    """
    validate_data_path(config.data_path)

    all_sessions = discover_sessions(config)
    for info in sort_main_sessions(all_sessions):
        try:
            session = load_session(info, all_sessions)
        except (OSError, ValueError) as e:
            logger.warning("Skipping session %s: %s", info.id, e)
            continue
        yield session
