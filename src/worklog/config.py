"""Configuration models and helpers for the worklog."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .paths import get_db_path


DEFAULT_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_SUMMARY_MODEL = "gemini-3-flash-preview"
DEFAULT_PARSE_MODEL = "gemini-3-pro-preview"


@dataclass(slots=True)
class AppSettings:
    """Runtime configuration for storage and the assistant service."""

    db_path: Optional[Path] = None
    api_key: Optional[str] = None
    summary_model: str = DEFAULT_SUMMARY_MODEL
    parse_model: str = DEFAULT_PARSE_MODEL
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 60.0

    @property
    def assistant_enabled(self) -> bool:
        return bool(self.api_key)

    def resolved_db_path(self) -> Path:
        return Path(self.db_path) if self.db_path else get_db_path()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppSettings":
        env = os.environ if environ is None else environ
        db_path = env.get("WORKLOG_DB")
        api_key = (
            env.get("WORKLOG_API_KEY") or env.get("GEMINI_API_KEY") or env.get("API_KEY")
        )
        timeout = env.get("WORKLOG_TIMEOUT")
        return cls(
            db_path=Path(db_path) if db_path else None,
            api_key=api_key or None,
            summary_model=env.get("WORKLOG_SUMMARY_MODEL", DEFAULT_SUMMARY_MODEL),
            parse_model=env.get("WORKLOG_PARSE_MODEL", DEFAULT_PARSE_MODEL),
            api_base_url=env.get("WORKLOG_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            request_timeout=float(timeout) if timeout else 60.0,
        )
