"""Durable key-value settings store."""

import json
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import structlog

from ..errors import PersistenceError

logger = structlog.get_logger(__name__)


class SettingsStore(ABC):
    """Key-value store with get/set/remove that survives restarts."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Stored value, or None when absent or unreadable."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error."""

    def remove_many(self, keys: tuple[str, ...]) -> None:
        for key in keys:
            self.remove(key)


class InMemorySettingsStore(SettingsStore):
    """Process-local store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SQLiteSettingsStore(SettingsStore):
    """SQLite-based settings store. Values are kept as JSON text."""

    def __init__(self, db_path: str = "settings.db"):
        self.db_path = Path(db_path).expanduser()
        self.logger = logger.bind(db_path=str(self.db_path))

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get database connection, converting driver errors to PersistenceError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("database_error", error=str(e))
            raise PersistenceError(str(e), operation="connect", target=str(self.db_path)) from e
        finally:
            if conn:
                conn.close()

    def get(self, key: str) -> Optional[Any]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()

        if row is None:
            return None

        try:
            return json.loads(row["value"])
        except json.JSONDecodeError:
            self.logger.warning("corrupt_setting_ignored", key=key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(
                f"Value for {key} is not serializable: {e}",
                operation="set",
                target=key,
            ) from e

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
            """, (key, encoded, datetime.now(timezone.utc).isoformat()))
            conn.commit()

    def remove(self, key: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            conn.commit()

    def remove_many(self, keys: tuple[str, ...]) -> None:
        if not keys:
            return
        placeholders = ", ".join("?" for _ in keys)
        with self._get_connection() as conn:
            conn.execute(f"DELETE FROM settings WHERE key IN ({placeholders})", keys)
            conn.commit()

    def keys(self) -> list[str]:
        """All stored keys, sorted."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT key FROM settings ORDER BY key").fetchall()
        return [row["key"] for row in rows]
