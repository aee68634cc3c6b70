import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import StoreUnavailable

logger = logging.getLogger(__name__)


class InMemoryKeyValueBackend:
    """Process-local stand-in for the host's persistent key-value API."""

    def __init__(self) -> None:
        self.items: Dict[str, Dict[str, str]] = {}

    def get_item(self, owner_id: str, key: str) -> Optional[str]:
        return self.items.get(owner_id, {}).get(key)

    def set_item(self, owner_id: str, key: str, value: str) -> None:
        self.items.setdefault(owner_id, {})[key] = value

    def remove_item(self, owner_id: str, key: str) -> bool:
        return self.items.get(owner_id, {}).pop(key, None) is not None

    def keys(self, owner_id: str, prefix: str = "") -> List[str]:
        return sorted(k for k in self.items.get(owner_id, {}) if k.startswith(prefix))

    def remove_owner(self, owner_id: str) -> int:
        return len(self.items.pop(owner_id, {}))


class SqliteKeyValueBackend:
    """Key-value items persisted in a single SQLite file.

    The owner id is its own column so clearing or listing one owner can never
    match another owner whose id happens to share a textual prefix.
    """

    def __init__(self, path: str) -> None:
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
        self._write(
            "CREATE TABLE IF NOT EXISTS local_storage ("
            " owner_id TEXT NOT NULL,"
            " storage_key TEXT NOT NULL,"
            " value TEXT NOT NULL,"
            " PRIMARY KEY (owner_id, storage_key))"
        )
        logger.info(f"Local store opened at {self.path}")

    def _read(self, sql: str, params: Sequence[Any] = ()) -> List[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Local store read failed: {str(e)}")
            raise StoreUnavailable(f"Local store unavailable: {str(e)}") from e

    def _write(self, sql: str, params: Sequence[Any] = ()) -> int:
        try:
            with self._lock, self._conn:
                return self._conn.execute(sql, params).rowcount
        except sqlite3.Error as e:
            logger.error(f"Local store write failed: {str(e)}")
            raise StoreUnavailable(f"Local store unavailable: {str(e)}") from e

    def get_item(self, owner_id: str, key: str) -> Optional[str]:
        rows = self._read(
            "SELECT value FROM local_storage WHERE owner_id = ? AND storage_key = ?",
            (owner_id, key),
        )
        return rows[0][0] if rows else None

    def set_item(self, owner_id: str, key: str, value: str) -> None:
        self._write(
            "INSERT OR REPLACE INTO local_storage (owner_id, storage_key, value) VALUES (?, ?, ?)",
            (owner_id, key, value),
        )

    def remove_item(self, owner_id: str, key: str) -> bool:
        return self._write(
            "DELETE FROM local_storage WHERE owner_id = ? AND storage_key = ?",
            (owner_id, key),
        ) > 0

    def keys(self, owner_id: str, prefix: str = "") -> List[str]:
        rows = self._read(
            "SELECT storage_key FROM local_storage WHERE owner_id = ? ORDER BY storage_key",
            (owner_id,),
        )
        return [r[0] for r in rows if r[0].startswith(prefix)]

    def remove_owner(self, owner_id: str) -> int:
        return self._write("DELETE FROM local_storage WHERE owner_id = ?", (owner_id,))

    def close(self) -> None:
        self._conn.close()


def get_kv_backend(path: Optional[str] = None):
    if path:
        return SqliteKeyValueBackend(path)
    logger.info("LOCAL_STORE_PATH not set, local store kept in memory")
    return InMemoryKeyValueBackend()
