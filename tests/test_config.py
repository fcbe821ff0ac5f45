"""Tests for settings resolution."""

from pathlib import Path

from worklog.config import DEFAULT_SUMMARY_MODEL, AppSettings


def test_defaults_from_empty_env():
    settings = AppSettings.from_env({})

    assert settings.api_key is None
    assert settings.assistant_enabled is False
    assert settings.summary_model == DEFAULT_SUMMARY_MODEL
    assert settings.request_timeout == 60.0


def test_env_overrides():
    settings = AppSettings.from_env(
        {
            "WORKLOG_DB": "/tmp/w.sqlite3",
            "GEMINI_API_KEY": "k",
            "WORKLOG_PARSE_MODEL": "other-model",
            "WORKLOG_API_BASE_URL": "https://example.test/v1/",
            "WORKLOG_TIMEOUT": "5",
        }
    )

    assert settings.resolved_db_path() == Path("/tmp/w.sqlite3")
    assert settings.api_key == "k"
    assert settings.parse_model == "other-model"
    assert settings.api_base_url == "https://example.test/v1"
    assert settings.request_timeout == 5.0


def test_worklog_key_preferred():
    settings = AppSettings.from_env({"WORKLOG_API_KEY": "a", "API_KEY": "b"})

    assert settings.api_key == "a"
