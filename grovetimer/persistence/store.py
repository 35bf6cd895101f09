"""Durable key-value state for GroveTimer.

The ledger only needs ``get``/``set`` of JSON-compatible values under fixed
logical keys; :class:`SqliteStateStore` is the local implementation.
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, Optional

from grovetimer.core.errors import PersistenceError


class StateStore(ABC):
    """Abstract durable key-value store."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under *key*, or *default*."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*; ``None`` deletes the key."""
        pass


class SqliteStateStore(StateStore):
    """Read/write interface to the local SQLite database.

    Values are stored as JSON text in a single ``kv_state`` table.  Any
    ``sqlite3`` or encoding failure is raised as :class:`PersistenceError`.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_db(self) -> None:
        """Create tables if they don't already exist."""
        try:
            conn = self._get_conn()
            conn.executescript(
                """\
                CREATE TABLE IF NOT EXISTS kv_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
                );
                """
            )
            conn.commit()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to initialise {self.db_path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Key-value operations
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        try:
            row = self._get_conn().execute(
                "SELECT value FROM kv_state WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {key!r}: {exc}") from exc
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt value stored under {key!r}: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        conn = self._get_conn()
        try:
            if value is None:
                conn.execute("DELETE FROM kv_state WHERE key = ?", (key,))
            else:
                conn.execute(
                    """\
                    INSERT OR REPLACE INTO kv_state (key, value, updated_at)
                    VALUES (?, ?, datetime('now'))
                    """,
                    (key, json.dumps(value, ensure_ascii=False)),
                )
            conn.commit()
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Value for {key!r} is not JSON-serialisable: {exc}") from exc
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceError(f"Failed to write {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        try:
            rows = self._get_conn().execute("SELECT key FROM kv_state ORDER BY key").fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to list keys: {exc}") from exc
        return [r["key"] for r in rows]
