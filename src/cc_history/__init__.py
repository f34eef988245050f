"""Read, search, export and migrate Claude Code session history."""

from cc_history.config import LibraryConfig, resolve_config
from cc_history.errors import (
    ConfigError,
    DataNotFoundError,
    HistoryError,
    OutputError,
    SessionNotFoundError,
    WorkspaceNotFoundError,
)
from cc_history.exporter import ExportFormat, export_all_sessions, export_session
from cc_history.migrate import (
    MigrateConfig,
    MigrateMode,
    MigrateWorkspaceConfig,
    migrate_session,
    migrate_workspace,
)
from cc_history.searcher import search_in_session, search_sessions
from cc_history.sessions import get_agent_session, get_session, list_sessions

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DataNotFoundError",
    "ExportFormat",
    "HistoryError",
    "OutputError",
    "LibraryConfig",
    "MigrateConfig",
    "MigrateMode",
    "MigrateWorkspaceConfig",
    "SessionNotFoundError",
    "WorkspaceNotFoundError",
    "__version__",
    "export_all_sessions",
    "export_session",
    "get_agent_session",
    "get_session",
    "list_sessions",
    "migrate_session",
    "migrate_workspace",
    "resolve_config",
    "search_in_session",
    "search_sessions",
]
