"""SQLite-backed key-value store holding JSON values."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from job_hunter.errors import StorageError

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,  -- JSON
    updated_at  TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class KeyValueStore:
    """Durable key-value store. Each write is its own transaction.

    Use ``":memory:"`` as ``db_path`` for a throwaway store.
    """

    def __init__(self, db_path: str = "jobs.db") -> None:
        self.db_path = db_path
        self._lock = threading.RLock()
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._init_schema()
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to open store at {db_path}: {e}") from e

    def _init_schema(self) -> None:
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as e:
                logger.error("Storage failure while %s: %s", action, e)
                raise StorageError(f"Storage failure while {action}") from e

    # -- Reads ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        with self._transaction(f"reading '{key}'") as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored value for '{key}' is not valid JSON") from e

    def keys(self) -> list[str]:
        with self._transaction("listing keys") as conn:
            rows = conn.execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [row[0] for row in rows]

    # -- Writes -----------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        self.set_many({key: value})

    def set_many(self, items: Mapping[str, Any]) -> None:
        """Write several keys atomically."""
        rows = [(key, json.dumps(value)) for key, value in items.items()]
        with self._transaction(f"writing {', '.join(items)}") as conn:
            conn.executemany(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                rows,
            )

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Read-modify-write ``key`` inside one ``BEGIN IMMEDIATE`` transaction.

        ``fn`` receives the current value (``default`` when unset) and returns
        the value to store, or None to leave the key untouched. Exceptions
        raised by ``fn`` roll the transaction back and propagate. Other
        connections to the same file wait on the write lock, so two stores
        cannot interleave their reads and writes.
        """
        with self._transaction(f"updating '{key}'") as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            try:
                current = default if row is None else json.loads(row[0])
            except json.JSONDecodeError as e:
                raise StorageError(f"Stored value for '{key}' is not valid JSON") from e

            new_value = fn(current)
            if new_value is not None:
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, json.dumps(new_value)),
                )
        return new_value

    def delete(self, key: str) -> bool:
        with self._transaction(f"deleting '{key}'") as conn:
            cursor = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def clear(self) -> None:
        with self._transaction("clearing the store") as conn:
            conn.execute("DELETE FROM kv")
