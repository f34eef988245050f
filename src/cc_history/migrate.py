"""Copy or move sessions between workspaces.

Session records embed absolute paths (the working directory, tool
arguments, tracked file backups). Migration rewrites the ones that live
under the source workspace so they point at the destination workspace,
then writes the rewritten file into the destination's project directory.

Move mode deletes the source only after the destination has been written.
It is not atomic: an interruption between the two steps leaves both copies.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from cc_history.config import LibraryConfig
from cc_history.errors import ConfigError, HistoryError, WorkspaceNotFoundError
from cc_history.models import MigrateError, MigrateResult, RawEntry
from cc_history.paths import (
    SESSION_SUFFIX,
    classify_session_file,
    encode_project_path,
    get_projects_path,
)
from cc_history.sessions import SessionRef, find_session

logger = logging.getLogger(__name__)

# Keys inside tool_use inputs whose string values are treated as paths
PATH_KEYS = frozenset({"file_path", "path"})


class MigrateMode(str, Enum):
    COPY = "copy"
    MOVE = "move"

    @classmethod
    def parse(cls, value: "str | MigrateMode") -> "MigrateMode":
        try:
            return cls(value.lower() if isinstance(value, str) else value)
        except ValueError:
            raise ConfigError(f"Invalid mode: {value}. Use 'copy' or 'move'.") from None


@dataclass
class MigrateConfig:
    """Migrate specific sessions (index or UUID, one or many)."""

    sessions: "int | str | SessionRef | list[int | str | SessionRef]"
    destination: str
    mode: MigrateMode = MigrateMode.COPY


@dataclass
class MigrateWorkspaceConfig:
    """Migrate every session of a workspace."""

    source: str
    destination: str
    mode: MigrateMode = MigrateMode.COPY


# Path rewriting


def rewrite_path(path: str, source_workspace: str, dest_workspace: str) -> str:
    """Replace the source workspace prefix of path with the destination.

    Paths outside the source workspace are returned unchanged.
    """
    source = source_workspace.rstrip("/")
    dest = dest_workspace.rstrip("/")
    if path.startswith(source):
        return dest + path[len(source) :]
    return path


def rewrite_tool_input(tool_input: dict[str, Any], source: str, dest: str) -> dict[str, Any]:
    """Rewrite `file_path`/`path` values, descending into nested objects.

    Lists are left as they are.
    """
    result: dict[str, Any] = {}
    for key, value in tool_input.items():
        if key in PATH_KEYS and isinstance(value, str):
            result[key] = rewrite_path(value, source, dest)
        elif isinstance(value, dict):
            result[key] = rewrite_tool_input(value, source, dest)
        else:
            result[key] = value
    return result


def rewrite_message_content(content: Any, source: str, dest: str) -> Any:
    if not isinstance(content, list):
        return content

    blocks: list[Any] = []
    for block in content:
        if (
            isinstance(block, dict)
            and block.get("type") == "tool_use"
            and isinstance(block.get("input"), dict)
        ):
            block = {**block, "input": rewrite_tool_input(block["input"], source, dest)}
        blocks.append(block)
    return blocks


def rewrite_tracked_file_backups(
    backups: dict[str, Any], source: str, dest: str
) -> dict[str, Any]:
    """Rewrite the file path keys; backup descriptors are kept as-is."""
    return {rewrite_path(path, source, dest): backup for path, backup in backups.items()}


def rewrite_entry_paths(entry: RawEntry, source: str, dest: str) -> RawEntry:
    """Return a copy of entry with workspace paths rewritten.

    Only `cwd`, tool_use inputs in `message.content` and the keys of a
    snapshot's `trackedFileBackups` are touched.
    """
    result = dict(entry)

    if isinstance(result.get("cwd"), str) and result["cwd"]:
        result["cwd"] = rewrite_path(result["cwd"], source, dest)

    message = result.get("message")
    if isinstance(message, dict) and "content" in message:
        result["message"] = {
            **message,
            "content": rewrite_message_content(message["content"], source, dest),
        }

    snapshot = result.get("snapshot")
    if (
        result.get("type") == "file-history-snapshot"
        and isinstance(snapshot, dict)
        and isinstance(snapshot.get("trackedFileBackups"), dict)
    ):
        result["snapshot"] = {
            **snapshot,
            "trackedFileBackups": rewrite_tracked_file_backups(
                snapshot["trackedFileBackups"], source, dest
            ),
        }

    return result


def rewrite_session_lines(file_path: Path, source: str, dest: str) -> str:
    """Read a whole session file and rewrite every line independently.

    Lines that do not decode to a JSON object are kept byte-identical.
    Blank lines are dropped.
    """
    with open(file_path, encoding="utf-8", newline="") as f:
        content = f.read()
    rewritten: list[str] = []

    for line in content.split("\n"):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            rewritten.append(line)
            continue
        if not isinstance(entry, dict):
            rewritten.append(line)
            continue
        rewritten_entry = rewrite_entry_paths(entry, source, dest)
        rewritten.append(json.dumps(rewritten_entry, ensure_ascii=False, separators=(",", ":")))

    return "\n".join(rewritten) + "\n"


# Migration


def migrate_session_file(
    session_id: str,
    source_file: Path,
    source_workspace: str,
    dest_workspace: str,
    data_path: Path,
    mode: MigrateMode,
) -> Path:
    """Write a rewritten copy of one session file into the destination workspace.

    Returns the destination file path.
    """
    dest_dir = get_projects_path(data_path) / encode_project_path(dest_workspace)
    dest_file = dest_dir / f"{session_id}{SESSION_SUFFIX}"

    if dest_file.exists() and dest_file.resolve() == source_file.resolve():
        raise HistoryError(f"Source and destination are the same: {source_file}")

    content = rewrite_session_lines(source_file, source_workspace, dest_workspace)

    dest_dir.mkdir(parents=True, exist_ok=True)
    with open(dest_file, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    if mode is MigrateMode.MOVE:
        source_file.unlink()

    action = "Moved" if mode is MigrateMode.MOVE else "Copied"
    logger.info("%s %s -> %s", action, source_file, dest_file)
    return dest_file


def _record_failure(result: MigrateResult, session_id: str, error: Exception) -> None:
    logger.warning("Failed to migrate %s: %s", session_id, error)
    result.errors.append(MigrateError(session_id=session_id, error=str(error)))


def migrate_session(migrate_config: MigrateConfig, config: LibraryConfig) -> MigrateResult:
    """Copy or move one or more sessions to the destination workspace.

    Each identifier is handled independently; failures are collected in
    the result instead of being raised.
    """
    mode = MigrateMode.parse(migrate_config.mode)
    identifiers = migrate_config.sessions
    if not isinstance(identifiers, list):
        identifiers = [identifiers]

    result = MigrateResult()

    for identifier in identifiers:
        try:
            info, _ = find_session(identifier, config)
            migrate_session_file(
                info.id,
                info.file_path,
                info.project_path,
                migrate_config.destination,
                config.data_path,
                mode,
            )
        except (HistoryError, OSError, ValueError) as e:
            _record_failure(result, str(identifier), e)
        else:
            result.success_count += 1

    return result


def migrate_workspace(
    migrate_config: MigrateWorkspaceConfig, config: LibraryConfig
) -> MigrateResult:
    """Copy or move every session, agent sessions included, of a workspace.

    Raises WorkspaceNotFoundError when the source workspace has no
    directory under the data root.
    """
    mode = MigrateMode.parse(migrate_config.mode)
    source_dir = get_projects_path(config.data_path) / encode_project_path(migrate_config.source)
    if not source_dir.is_dir():
        raise WorkspaceNotFoundError(migrate_config.source)

    regular: list[str] = []
    agents: list[str] = []
    for file_path in sorted(source_dir.iterdir()):
        classified = classify_session_file(file_path.name)
        if classified is None:
            continue
        (agents if classified.is_agent else regular).append(classified.session_id)

    result = MigrateResult()

    for session_id in regular + agents:
        try:
            migrate_session_file(
                session_id,
                source_dir / f"{session_id}{SESSION_SUFFIX}",
                migrate_config.source,
                migrate_config.destination,
                config.data_path,
                mode,
            )
        except (HistoryError, OSError, ValueError) as e:
            _record_failure(result, session_id, e)
        else:
            result.success_count += 1

    return result
