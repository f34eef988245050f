"""Library configuration and pagination helpers."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TypeVar

from cc_history.errors import ConfigError
from cc_history.models import Pagination
from cc_history.paths import get_default_data_path

T = TypeVar("T")

DATA_PATH_ENV = "CCH_DATA_PATH"

DEFAULT_LIMIT = 50
DEFAULT_OFFSET = 0
DEFAULT_CONTEXT = 2


@dataclass(frozen=True)
class LibraryConfig:
    """Resolved configuration threaded through every library call."""

    data_path: Path
    workspace: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET
    context: int = DEFAULT_CONTEXT

    def with_options(self, **changes) -> "LibraryConfig":
        """Copy with some fields replaced, re-validated."""
        return validate_config(replace(self, **changes))


def resolve_data_path(data_path: str | Path | None = None) -> Path:
    """Resolve the data root: explicit value, then $CCH_DATA_PATH, then ~/.claude."""
    if data_path:
        return Path(data_path).expanduser()
    env_path = os.environ.get(DATA_PATH_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return get_default_data_path()


def validate_config(config: LibraryConfig) -> LibraryConfig:
    for name in ("limit", "offset", "context"):
        if getattr(config, name) < 0:
            raise ConfigError(f"{name} must be non-negative")
    return config


def resolve_config(
    data_path: str | Path | None = None,
    workspace: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    context: int | None = None,
) -> LibraryConfig:
    """Merge caller options with defaults and validate them."""
    config = LibraryConfig(
        data_path=resolve_data_path(data_path),
        workspace=workspace,
        limit=DEFAULT_LIMIT if limit is None else limit,
        offset=DEFAULT_OFFSET if offset is None else offset,
        context=DEFAULT_CONTEXT if context is None else context,
    )
    return validate_config(config)


def paginate(items: list[T], config: LibraryConfig) -> list[T]:
    return items[config.offset : config.offset + config.limit]


def create_pagination(total: int, config: LibraryConfig) -> Pagination:
    return Pagination(
        total=total,
        limit=config.limit,
        offset=config.offset,
        has_more=config.offset + config.limit < total,
    )
