"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from meili_repository.config.settings import DOCUMENTS_LIMIT, PRIMARY_KEY, MeiliSettings

ENV_VARS = [
    "MEILI_URL",
    "MEILI_API_KEY",
    "MEILI_SYNCHRONOUS",
    "MEILI_CHUNK_SIZE",
    "MEILI_TASK_TIMEOUT_MS",
    "MEILI_POLL_INTERVAL_MS",
    "MEILI_REQUEST_TIMEOUT_S",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        # setenv first so values loaded from .env files are undone too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def test_defaults(clean_env):
    settings = MeiliSettings.from_env()

    assert settings.url == "http://localhost:7700"
    assert settings.api_key is None
    assert settings.synchronous is True
    assert settings.chunk_size == 1000
    assert settings.primary_key == PRIMARY_KEY == "id"
    assert settings.task_timeout_ms == 180000
    assert settings.poll_interval_ms == 500
    assert settings.request_timeout_s == 300
    assert settings.documents_limit == DOCUMENTS_LIMIT == 100000


def test_reads_environment(clean_env):
    clean_env.setenv("MEILI_URL", "http://search:7700")
    clean_env.setenv("MEILI_API_KEY", "masterKey")
    clean_env.setenv("MEILI_SYNCHRONOUS", "false")
    clean_env.setenv("MEILI_CHUNK_SIZE", "250")
    clean_env.setenv("MEILI_TASK_TIMEOUT_MS", "1000")
    clean_env.setenv("MEILI_POLL_INTERVAL_MS", "50")
    clean_env.setenv("MEILI_REQUEST_TIMEOUT_S", "2.5")

    settings = MeiliSettings.from_env()

    assert settings.url == "http://search:7700"
    assert settings.api_key == "masterKey"
    assert settings.synchronous is False
    assert settings.chunk_size == 250
    assert settings.task_timeout_ms == 1000
    assert settings.poll_interval_ms == 50
    assert settings.request_timeout_s == 2.5


def test_empty_api_key_means_none(clean_env):
    clean_env.setenv("MEILI_API_KEY", "")

    assert MeiliSettings.from_env().api_key is None


def test_loads_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("MEILI_URL=http://from-file:7700\nMEILI_CHUNK_SIZE=10\n")

    settings = MeiliSettings.from_env(str(env_file))

    assert settings.url == "http://from-file:7700"
    assert settings.chunk_size == 10


def test_rejects_invalid_chunk_size(clean_env):
    clean_env.setenv("MEILI_CHUNK_SIZE", "0")

    with pytest.raises(ValidationError):
        MeiliSettings.from_env()


def test_rejects_malformed_number(clean_env):
    clean_env.setenv("MEILI_TASK_TIMEOUT_MS", "soon")

    with pytest.raises(ValidationError):
        MeiliSettings.from_env()


def test_settings_are_frozen():
    settings = MeiliSettings()

    with pytest.raises(ValidationError):
        settings.chunk_size = 5


@pytest.mark.parametrize("value", ["treu", "ture", "sync", "enabled"])
def test_rejects_unrecognised_synchronous_flag(clean_env, value):
    clean_env.setenv("MEILI_SYNCHRONOUS", value)

    with pytest.raises(ValidationError):
        MeiliSettings.from_env()


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("0", False), ("off", False)])
def test_accepts_boolean_spellings(clean_env, value, expected):
    clean_env.setenv("MEILI_SYNCHRONOUS", value)

    assert MeiliSettings.from_env().synchronous is expected
