"""Exception hierarchy for cc-history."""


class HistoryError(Exception):
    """Base exception for all cc-history errors."""

    exit_code = 1
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class ConfigError(HistoryError, ValueError):
    """Invalid configuration value (negative limit, unknown mode, ...)."""

    exit_code = 2
    error_code = "USAGE_ERROR"


class NotFoundError(HistoryError):
    """A requested session or workspace does not exist."""

    exit_code = 3
    error_code = "NOT_FOUND"


class SessionNotFoundError(NotFoundError):
    """No session matches an index, UUID, UUID prefix or agent id."""

    def __init__(self, identifier: int | str):
        super().__init__(
            f"Session not found: {identifier}",
            hint="Try 'cc-history list' to see available sessions.",
        )
        self.identifier = identifier


class WorkspaceNotFoundError(NotFoundError):
    """The workspace has no session directory under the data root."""

    def __init__(self, workspace: str):
        super().__init__(
            f"Workspace not found: {workspace}",
            hint="Make sure the source workspace path exists and contains sessions.",
        )
        self.workspace = workspace


class DataNotFoundError(HistoryError):
    """The Claude Code data directory is missing."""

    exit_code = 4
    error_code = "IO_ERROR"

    def __init__(self, data_path: str):
        super().__init__(
            f"Claude Code data directory not found: {data_path}",
            hint="Make sure Claude Code is installed and has been used at least once.",
        )
        self.data_path = data_path


class OutputError(HistoryError):
    """An output file could not be written."""

    exit_code = 4
    error_code = "IO_ERROR"

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot write {path}: {reason}")
        self.path = path
