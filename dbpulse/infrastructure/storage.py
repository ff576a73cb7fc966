"""
SQLite storage handle for dbpulse.

Owns the single database connection, applies a fixed tuning profile at open,
and creates the two tables the application needs. The StorageManager keeps
one handle per database file for the whole process and closes them on exit.
"""

from __future__ import annotations

import atexit
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Generator, List, Mapping, Optional, Sequence, Tuple, Union

from dbpulse.config import get_settings
from dbpulse.exceptions import StorageError
from dbpulse.utils.logging import get_logger

log = get_logger(__name__)

_SqlValue = Union[str, bytes, int, float, None]
_SqlParams = Union[Sequence[_SqlValue], Mapping[str, _SqlValue]]

MEMORY_PATH = ":memory:"

# Fixed tuning profile, applied in order on every open.
PRAGMAS: Tuple[Tuple[str, Union[str, int]], ...] = (
    ("journal_mode", "WAL"),
    ("cache_size", -10000),  # ~10MB, negative means KiB
    ("synchronous", "NORMAL"),
    ("temp_store", "MEMORY"),
    ("mmap_size", 1_000_000_000),
    ("busy_timeout", 5000),
    ("foreign_keys", "ON"),
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS test_results_cache (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    result TEXT NOT NULL,
    timestamp INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS records (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    author TEXT NOT NULL,
    content TEXT NOT NULL,
    session_tag TEXT NOT NULL,
    created_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_test_results_cache_timestamp ON test_results_cache(timestamp);
CREATE INDEX IF NOT EXISTS idx_records_created_at ON records(created_at);
"""


class StorageHandle:
    """
    A single SQLite connection shared by the cache and the workload.

    The connection runs in autocommit mode; multi-statement units of work go
    through `transaction()`. Statements are serialized by a re-entrant lock so
    request threads can share the handle.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = str(path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"Storage at {self.path} is not open")
        return self._conn

    def open(self) -> "StorageHandle":
        """
        Open and configure the database. Calling it again reuses the connection.

        Raises
        ------
        StorageError
            If the file cannot be opened, a pragma fails, or the schema cannot
            be created.
        """
        with self._lock:
            if self._conn is not None:
                return self
            conn: Optional[sqlite3.Connection] = None
            try:
                if self.path != MEMORY_PATH:
                    Path(self.path).parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
                conn.row_factory = sqlite3.Row
                for name, value in PRAGMAS:
                    conn.execute(f"PRAGMA {name} = {value}")
                conn.executescript(SCHEMA)
            except (sqlite3.Error, OSError) as exc:
                if conn is not None:
                    conn.close()
                raise StorageError(f"Failed to open database at {self.path}: {exc}") from exc
            self._conn = conn
            log.info("[STORAGE OPEN] %s", self.path, extra={"db_path": self.path})
            return self

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            log.debug("[STORAGE CLOSED] %s", self.path)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Run a block inside BEGIN/COMMIT, rolling back and re-raising on error.

        Example
        -------
            with storage.transaction() as conn:
                conn.execute("DELETE FROM test_results_cache")
                conn.execute("INSERT INTO test_results_cache ...")
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def execute(self, query: str, params: _SqlParams = ()) -> sqlite3.Cursor:
        with self._lock:
            return self.connection.execute(query, params)

    def fetch_one(self, query: str, params: _SqlParams = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self.connection.execute(query, params).fetchone()

    def fetch_all(self, query: str, params: _SqlParams = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self.connection.execute(query, params).fetchall()

    def pragma(self, name: str) -> Union[str, int, None]:
        row = self.fetch_one(f"PRAGMA {name}")
        return row[0] if row is not None else None

    def size_bytes(self) -> int:
        """Size of the database as SQLite reports it (page_count * page_size)."""
        page_count = self.pragma("page_count") or 0
        page_size = self.pragma("page_size") or 0
        return int(page_count) * int(page_size)


class StorageManager:
    """
    Thread-safe singleton that hands out one StorageHandle per database path.

    Handles are closed automatically at interpreter exit.
    """

    _instance: Optional["StorageManager"] = None
    _lock = threading.Lock()
    _handles: Dict[str, StorageHandle]

    def __new__(cls) -> "StorageManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._handles = {}
                atexit.register(instance.close_all)
                cls._instance = instance
            return cls._instance

    def get_handle(self, path: Union[str, Path]) -> StorageHandle:
        key = str(path) if str(path) == MEMORY_PATH else str(Path(path).resolve())
        with self._lock:
            handle = self._handles.get(key)
            if handle is None:
                handle = StorageHandle(path)
                self._handles[key] = handle
            return handle

    def close_all(self) -> None:
        with self._lock:
            for handle in self._handles.values():
                handle.close()
            self._handles.clear()


def get_storage(path: Union[str, Path, None] = None) -> StorageHandle:
    """
    Get the opened process-wide handle for `path` (defaults to settings.db_path).
    """
    db_path = path if path is not None else get_settings().db_path
    return StorageManager().get_handle(db_path).open()


__all__ = [
    "PRAGMAS",
    "StorageHandle",
    "StorageManager",
    "get_storage",
]
