from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Generator, List, Optional

from .errors import StorageUnavailable
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "kv_store"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteStorage(KeyValueStorage):
    """
    SQLite key/value storage implementing the KeyValueStorage interface.
    Each key holds one JSON document (a list of records).
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Cannot open local cache at {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StorageUnavailable(f"Local cache error: {e}") from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[List[Dict[str, Any]]]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        try:
            value = json.loads(row[_COLS.value])
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable cache entry key=%s", key)
            return None
        return value if isinstance(value, list) else None

    def set(self, key: str, value: List[Dict[str, Any]]) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                """,
                (key, payload),
            )

    def remove(self, key: str) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))

    def keys(self, prefix: str = "") -> List[str]:
        # Escape LIKE wildcards; owner ids may contain '_'
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT {_COLS.key} FROM {_COLS.table} WHERE {_COLS.key} LIKE ? ESCAPE '\\' "
                f"ORDER BY {_COLS.key}",
                (escaped + "%",),
            ).fetchall()
        return [str(r[_COLS.key]) for r in rows]
