"""Logging configuration for cc-history.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. The CLI calls :func:`configure_logging`
once at startup.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV = "CCH_LOG_LEVEL"


def configure_logging(verbose: bool = False, level: str | None = None) -> None:
    """Route cc_history log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG (parse warnings, skipped files, ...).
        level: Explicit level name. Defaults to $CCH_LOG_LEVEL or WARNING.
    """
    if verbose:
        level = "DEBUG"
    elif level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = "WARNING"

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=False,
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s | %(message)s"))

    logger = logging.getLogger("cc_history")
    logger.handlers = [handler]
    logger.setLevel(getattr(logging, level))
    logger.propagate = False
