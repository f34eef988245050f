"""Tests for path encoding and session file classification."""

import pytest

from cc_history.paths import (
    classify_session_file,
    decode_project_path,
    encode_project_path,
    extract_agent_id,
    extract_session_id,
    get_projects_path,
    is_agent_session_file,
    is_uuid,
    normalize_agent_id,
)

VALID_UUID = "a1b2c3d4-e5f6-4789-abcd-ef0123456789"


def test_encode_project_path():
    assert encode_project_path("/Users/name/project") == "-Users-name-project"


def test_encode_strips_trailing_slashes():
    assert encode_project_path("/Users/name/project///") == "-Users-name-project"


def test_decode_project_path():
    assert decode_project_path("-Users-name-project") == "/Users/name/project"


@pytest.mark.parametrize("path", ["/test/project", "/Users/name/Code/app", "/a", "relative/dir"])
def test_round_trip_without_hyphens(path):
    assert decode_project_path(encode_project_path(path)) == path


def test_hyphenated_path_does_not_round_trip():
    # Original hyphens are indistinguishable from separators
    assert decode_project_path(encode_project_path("/work/my-app")) == "/work/my/app"


def test_is_uuid_accepts_canonical_forms():
    assert is_uuid(VALID_UUID)
    assert is_uuid(VALID_UUID.upper())


@pytest.mark.parametrize(
    "value",
    [
        "",
        "a1b2c3d4",
        "a1b2c3d4e5f64789abcdef0123456789",
        "a1b2c3d4-e5f6-4789-abcd-ef012345678",
        "a1b2c3d4-e5f6-4789-abcd-ef01234567890",
        "g1b2c3d4-e5f6-4789-abcd-ef0123456789",
        "agent-abc1234",
        f" {VALID_UUID}",
        f"{VALID_UUID}\n",
    ],
)
def test_is_uuid_rejects_malformed(value):
    assert not is_uuid(value)


def test_classify_uuid_session():
    classified = classify_session_file(f"{VALID_UUID}.jsonl")
    assert classified is not None
    assert classified.session_id == VALID_UUID
    assert not classified.is_agent
    assert classified.agent_id is None


def test_classify_agent_session():
    classified = classify_session_file("agent-abc1234.jsonl")
    assert classified is not None
    assert classified.session_id == "agent-abc1234"
    assert classified.is_agent
    assert classified.agent_id == "abc1234"


@pytest.mark.parametrize("name", [VALID_UUID, "notes.jsonl", f"{VALID_UUID}.json", "README.md"])
def test_classify_rejects_non_session_files(name):
    assert classify_session_file(name) is None


def test_filename_helpers():
    assert extract_session_id(f"{VALID_UUID}.jsonl") == VALID_UUID
    assert extract_session_id("other.jsonl") is None
    assert is_agent_session_file("agent-x.jsonl")
    assert not is_agent_session_file(f"{VALID_UUID}.jsonl")
    assert extract_agent_id("agent-abc1234.jsonl") == "abc1234"
    assert extract_agent_id(f"{VALID_UUID}.jsonl") is None


def test_normalize_agent_id():
    assert normalize_agent_id("abc1234") == "agent-abc1234"
    assert normalize_agent_id("agent-abc1234") == "agent-abc1234"


def test_get_projects_path(temp_dir):
    assert get_projects_path(temp_dir) == temp_dir / "projects"
