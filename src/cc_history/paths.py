"""Path encoding and session file naming.

Claude Code stores each workspace's sessions in a directory whose name is
the workspace path with every ``/`` replaced by ``-``:

    /Users/name/project  ->  ~/.claude/projects/-Users-name-project/

Decoding reverses the substitution literally, so a workspace path that
itself contains a hyphen does not round-trip. The scheme is kept as-is to
stay compatible with directories already on disk.
"""

import re
from dataclasses import dataclass
from pathlib import Path

SESSION_SUFFIX = ".jsonl"
AGENT_PREFIX = "agent-"

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


@dataclass(frozen=True)
class SessionFile:
    """Classification of a file name inside a workspace directory."""

    session_id: str
    is_agent: bool
    agent_id: str | None = None


def get_default_data_path() -> Path:
    """Default Claude Code data directory (~/.claude)."""
    return Path.home() / ".claude"


def get_projects_path(data_path: str | Path) -> Path:
    return Path(data_path) / "projects"


def encode_project_path(project_path: str) -> str:
    """Encode a workspace path into its directory name.

    >>> encode_project_path("/Users/name/project/")
    '-Users-name-project'
    """
    return project_path.rstrip("/").replace("/", "-")


def decode_project_path(encoded_path: str) -> str:
    """Decode a directory name back to a workspace path (lossy for hyphens)."""
    return encoded_path.replace("-", "/")


def is_uuid(value: str) -> bool:
    return bool(UUID_RE.fullmatch(value))


def classify_session_file(filename: str) -> SessionFile | None:
    """Classify a file name as a session file, or return None to skip it."""
    if not filename.endswith(SESSION_SUFFIX):
        return None

    base_name = filename[: -len(SESSION_SUFFIX)]

    if base_name.startswith(AGENT_PREFIX):
        return SessionFile(
            session_id=base_name,
            is_agent=True,
            agent_id=base_name[len(AGENT_PREFIX) :],
        )

    if is_uuid(base_name):
        return SessionFile(session_id=base_name, is_agent=False)

    return None


def extract_session_id(filename: str) -> str | None:
    classified = classify_session_file(filename)
    return classified.session_id if classified else None


def is_agent_session_file(filename: str) -> bool:
    return filename.startswith(AGENT_PREFIX) and filename.endswith(SESSION_SUFFIX)


def extract_agent_id(filename: str) -> str | None:
    """Extract 'abc1234' from 'agent-abc1234.jsonl'."""
    if not is_agent_session_file(filename):
        return None
    return filename[len(AGENT_PREFIX) : -len(SESSION_SUFFIX)]


def normalize_agent_id(agent_id: str) -> str:
    """Return the 'agent-<id>' session id form of an agent id."""
    return agent_id if agent_id.startswith(AGENT_PREFIX) else f"{AGENT_PREFIX}{agent_id}"
