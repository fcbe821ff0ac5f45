"""String key/value stores backing the worklog state."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from .db import database_connection, fetch_value, upsert_value


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class SqliteStore:
    """Persist documents in a local SQLite file, one connection per call."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def get(self, key: str) -> Optional[str]:
        with database_connection(self.db_path) as conn:
            return fetch_value(conn, key)

    def set(self, key: str, value: str) -> None:
        with database_connection(self.db_path) as conn:
            upsert_value(conn, key, value)


class MemoryStore:
    """In-process store; nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
