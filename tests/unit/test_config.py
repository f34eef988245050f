"""Tests for configuration and errors."""

import pytest

from cc_history.config import (
    DATA_PATH_ENV,
    LibraryConfig,
    create_pagination,
    paginate,
    resolve_config,
)
from cc_history.errors import (
    ConfigError,
    DataNotFoundError,
    HistoryError,
    NotFoundError,
    SessionNotFoundError,
    WorkspaceNotFoundError,
)


def test_resolve_config_defaults(monkeypatch, temp_dir):
    monkeypatch.delenv(DATA_PATH_ENV, raising=False)
    monkeypatch.setenv("HOME", str(temp_dir))

    config = resolve_config()

    assert config.data_path == temp_dir / ".claude"
    assert config.workspace is None
    assert (config.limit, config.offset, config.context) == (50, 0, 2)


def test_resolve_config_env_and_explicit(monkeypatch, temp_dir):
    monkeypatch.setenv(DATA_PATH_ENV, str(temp_dir / "env"))
    assert resolve_config().data_path == temp_dir / "env"
    assert resolve_config(data_path=temp_dir / "cli").data_path == temp_dir / "cli"


@pytest.mark.parametrize("field", ["limit", "offset", "context"])
def test_negative_values_rejected(temp_dir, field):
    with pytest.raises(ConfigError, match=field):
        resolve_config(data_path=temp_dir, **{field: -1})


def test_with_options_validates(temp_dir):
    config = LibraryConfig(data_path=temp_dir)
    assert config.with_options(limit=5).limit == 5
    with pytest.raises(ValueError):
        config.with_options(offset=-2)


def test_paginate_and_pagination(temp_dir):
    config = LibraryConfig(data_path=temp_dir, limit=2, offset=1)
    assert paginate([1, 2, 3, 4], config) == [2, 3]

    pagination = create_pagination(4, config)
    assert pagination.has_more is True
    assert pagination.to_dict() == {"total": 4, "limit": 2, "offset": 1, "hasMore": True}
    assert create_pagination(3, config).has_more is False


def test_error_hierarchy():
    session_error = SessionNotFoundError(4)
    assert isinstance(session_error, NotFoundError)
    assert session_error.identifier == 4
    assert str(session_error) == "Session not found: 4"
    assert session_error.exit_code == 3

    workspace_error = WorkspaceNotFoundError("/w")
    assert workspace_error.workspace == "/w"
    assert isinstance(workspace_error, HistoryError)

    data_error = DataNotFoundError("/d")
    assert data_error.data_path == "/d"
    assert data_error.exit_code == 4
    assert data_error.hint
