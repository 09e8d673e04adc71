from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from queue import Empty, Queue
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from pathlib import Path


class SqliteConnectionPool:
    """Thread-safe connection pool for SQLite."""

    def __init__(self, db_path: Path, max_connections: int = 5) -> None:
        self._db_path = db_path
        self._max_connections = max_connections
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=max_connections)
        self._schema_lock = threading.Lock()
        self._schema_initialized = False

    def _ensure_initialized(self, conn: sqlite3.Connection) -> None:
        if self._schema_initialized:
            return
        with self._schema_lock:
            if self._schema_initialized:
                return
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                "CREATE TABLE IF NOT EXISTS store ("
                "  key TEXT PRIMARY KEY,"
                "  value TEXT NOT NULL"
                ")"
            )
            conn.commit()
            self._schema_initialized = True

    def _create_connection(self) -> sqlite3.Connection:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA busy_timeout=5000")
        self._ensure_initialized(conn)
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Acquire a connection from the pool, returning it when done."""
        conn: sqlite3.Connection | None = None
        try:
            conn = self._pool.get_nowait()
        except Empty:
            conn = self._create_connection()

        try:
            yield conn
        finally:
            try:
                self._pool.put_nowait(conn)
            except Exception:
                conn.close()


class SqliteKeyValueStore:
    """Flat key/value store with JSON-encoded values.

    Each method is a single statement or a single transaction, so individual
    key operations are atomic. ``items`` is a point-in-time scan and is not
    isolated from writes that happen after it returns.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._pool = SqliteConnectionPool(db_path)

    def _connect(self) -> sqlite3.Connection:
        return self._pool._create_connection()

    def get(self, key: str) -> Any | None:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        with self._pool.connection() as conn:
            for key in keys:
                row = conn.execute("SELECT value FROM store WHERE key = ?", (key,)).fetchone()
                if row is not None:
                    result[key] = json.loads(row[0])
        return result

    def set(self, items: Mapping[str, Any]) -> None:
        rows = [(key, json.dumps(value)) for key, value in items.items()]
        with self._pool.connection() as conn:
            conn.executemany("INSERT OR REPLACE INTO store (key, value) VALUES (?, ?)", rows)
            conn.commit()

    def remove(self, keys: Iterable[str]) -> None:
        with self._pool.connection() as conn:
            conn.executemany("DELETE FROM store WHERE key = ?", [(key,) for key in keys])
            conn.commit()

    def items(self, prefix: str | None = None) -> list[tuple[str, Any]]:
        with self._pool.connection() as conn:
            if prefix is None:
                rows = conn.execute("SELECT key, value FROM store ORDER BY key").fetchall()
            else:
                rows = conn.execute(
                    "SELECT key, value FROM store WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
        return [(key, json.loads(value)) for key, value in rows]

    def keys(self, prefix: str | None = None) -> list[str]:
        with self._pool.connection() as conn:
            if prefix is None:
                rows = conn.execute("SELECT key FROM store ORDER BY key").fetchall()
            else:
                rows = conn.execute(
                    "SELECT key FROM store WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
        return [row[0] for row in rows]
