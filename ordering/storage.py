"""
Key-value storage used by the local fallback gateway.

The gateway only needs three operations (get / set / remove on string keys and
string values), so storage is injected rather than reached for globally:

  MemoryStorage   dict-backed, optional byte quota; used in tests
  SqliteStorage   durable single-file store (output/orders.db by default)

Any failure of the underlying store is raised as StorageError.
"""
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Protocol

from .errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage. quota_bytes mimics a browser-style storage limit."""

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(len(k) + len(v) for k, v in self._data.items() if k != key)
            needed = len(key) + len(value)
            if used + needed > self.quota_bytes:
                raise StorageError(
                    f"Storage quota exceeded ({used + needed} > {self.quota_bytes} bytes)"
                )
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


class SqliteStorage:
    """Thin wrapper around an SQLite file holding one key/value table."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_schema()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open storage at {self.db_path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(str(self.db_path), timeout=30)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Storage schema ready: %s", self.db_path)

    # ------------------------------------------------------------------
    # Key/value operations
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        try:
            with self._conn() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read '{key}': {exc}") from exc
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value) VALUES (:key, :value)
                    ON CONFLICT(key) DO UPDATE SET
                        value      = excluded.value,
                        updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                    """,
                    {"key": key, "value": value},
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write '{key}': {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with self._conn() as conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to remove '{key}': {exc}") from exc
