"""SQLite driver.

Entries live in one table of ``(key TEXT PRIMARY KEY, value TEXT)`` with
JSON-encoded values. Upserts keep the original rowid, so ``keys()`` and
``values()`` come back in first-insertion order.

Note: All methods run SQLite synchronously on the event loop thread.
Single-row statements are sub-millisecond on local disks; if that stops
being true, move the connection onto a dedicated thread.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Optional

from .base import Driver
from ..config.drivers import DriverConfig, DriverType
from ..errors import DriverConnectionError, DriverOperationError
from ..interfaces import ConnectionInfo, MISSING

logger = logging.getLogger(__name__)


class SQLiteDriver(Driver[DriverConfig]):
    """Key-value table in a SQLite database file.

    Use ``":memory:"`` as the path for a throwaway database.
    """

    name = "sqlite"

    def __init__(self, config: DriverConfig):
        super().__init__(config)
        if not config.path:
            raise ValueError("SQLiteDriver requires a path")
        if not config.table_name.isidentifier():
            raise ValueError(f"Invalid table name: {config.table_name!r}")
        self.table = config.table_name
        self._conn: Optional[sqlite3.Connection] = None

    @classmethod
    def from_path(cls, path: str | Path, table_name: str = "fuse_data") -> "SQLiteDriver":
        return cls(DriverConfig(type=DriverType.SQLITE, path=str(path), table_name=table_name))

    @property
    def db_path(self) -> str:
        if self.config.path == ":memory:":
            return self.config.path
        return str(Path(self.config.path).expanduser())

    async def connect(self) -> ConnectionInfo:
        if self._conn is not None:
            return ConnectionInfo(driver=self.name, details={"path": self.db_path, "table": self.table})
        try:
            if self.db_path != ":memory:":
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)
            conn.commit()
        except (OSError, sqlite3.Error) as e:
            raise DriverConnectionError(f"Cannot open SQLite database {self.db_path}: {e}") from e

        self._conn = conn
        self._connected = True
        logger.debug(f"Opened SQLite table {self.table} in {self.db_path}")
        return ConnectionInfo(driver=self.name, details={"path": self.db_path, "table": self.table})

    async def disconnect(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        except sqlite3.Error as e:
            raise DriverConnectionError(f"Failed to close {self.db_path}: {e}") from e
        finally:
            self._conn = None
            self._connected = False

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        self._ensure_connected()
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DriverOperationError(f"SQLite error: {e}") from e

    def _write(self, sql: str, rows: list[tuple]) -> None:
        """Run ``sql`` for every row in a single transaction."""
        self._ensure_connected()
        try:
            with self._conn:
                self._conn.executemany(sql, rows)
        except sqlite3.Error as e:
            raise DriverOperationError(f"SQLite error: {e}") from e

    @staticmethod
    def _encode(value: Any) -> str:
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise DriverOperationError(f"Value is not JSON serializable: {e}") from e

    def _upsert_sql(self) -> str:
        return (
            f"INSERT INTO {self.table} (key, value) VALUES (?, ?) "
            f"ON CONFLICT(key) DO UPDATE SET value = excluded.value"
        )

    async def get(self, key: str) -> Any:
        row = self._execute(f"SELECT value FROM {self.table} WHERE key = ?", (key,)).fetchone()
        return json.loads(row[0]) if row else MISSING

    async def set(self, key: str, value: Any) -> None:
        self._write(self._upsert_sql(), [(key, self._encode(value))])

    async def remove(self, key: str) -> None:
        self._write(f"DELETE FROM {self.table} WHERE key = ?", [(key,)])

    async def has(self, key: str) -> bool:
        row = self._execute(f"SELECT 1 FROM {self.table} WHERE key = ?", (key,)).fetchone()
        return row is not None

    async def size(self) -> int:
        return self._execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()[0]

    async def keys(self) -> list[str]:
        rows = self._execute(f"SELECT key FROM {self.table} ORDER BY rowid").fetchall()
        return [row[0] for row in rows]

    async def values(self) -> list[Any]:
        rows = self._execute(f"SELECT value FROM {self.table} ORDER BY rowid").fetchall()
        return [json.loads(row[0]) for row in rows]

    async def clear(self) -> None:
        self._write(f"DELETE FROM {self.table}", [()])

    async def bulk_set(self, entries: dict[str, Any]) -> None:
        rows = [(key, self._encode(value)) for key, value in entries.items()]
        self._write(self._upsert_sql(), rows)

    async def bulk_remove(self, keys: list[str]) -> None:
        self._write(f"DELETE FROM {self.table} WHERE key = ?", [(key,) for key in keys])
