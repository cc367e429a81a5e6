"""
Chocolate Registry Storage

Key-value substrate the registry components persist into. Keys are strings,
values are JSON-compatible Python values.

Every public registry operation runs inside storage.transaction(): on
success all writes commit together. On any exception, including
KeyboardInterrupt and other BaseExceptions, none of them do.
Transactions nest; inner blocks join the outermost one.
"""

import copy
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from .encoding import canonicalize, decanonicalize

logger = logging.getLogger(__name__)


class Storage(ABC):
    """Abstract key-value store with all-or-nothing transactions."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    def insert(self, key: str, value: Any) -> None:
        """Insert or overwrite a value."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
        pass

    @abstractmethod
    def contains(self, key: str) -> bool:
        pass

    @abstractmethod
    def transaction(self):
        """Context manager committing on success, rolling back on failure."""
        pass

    def close(self) -> None:
        """Release backend resources."""
        pass


class MemoryStorage(Storage):
    """
    In-memory store for development and testing.

    Not persistent across restarts. Values are deep-copied in and out so
    callers can never mutate committed state by reference.
    """

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._depth = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value)

    def insert(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    @contextmanager
    def transaction(self) -> Iterator["MemoryStorage"]:
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = copy.deepcopy(self._data)
            self._depth = 1
            committed = False
            try:
                yield self
                committed = True
            finally:
                self._depth = 0
                if not committed:
                    self._data = snapshot
                    logger.debug("Rolled back in-memory transaction")


class SqliteStorage(Storage):
    """
    SQLite-backed store.

    Values are stored as canonical JSON in a single kv table. The connection
    runs in autocommit mode; transaction() issues BEGIN/COMMIT/ROLLBACK.
    """

    def __init__(self, path: Union[str, Path] = "data/chocolate.db"):
        self._path = str(path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._depth = 0
        self._conn = sqlite3.connect(self._path, check_same_thread=False, isolation_level=None)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Safe to call multiple times (uses IF NOT EXISTS)."""
        self._conn.execute("""
        CREATE TABLE IF NOT EXISTS kv (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );""")

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            cur = self._conn.execute("SELECT value FROM kv WHERE key=?", (key,))
            row = cur.fetchone()
            return decanonicalize(row["value"]) if row else None

    def insert(self, key: str, value: Any) -> None:
        payload = canonicalize(value).decode('utf-8')
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO kv(key, value) VALUES(?,?)",
                (key, payload)
            )

    def remove(self, key: str) -> None:
        with self._lock:
            self._conn.execute("DELETE FROM kv WHERE key=?", (key,))

    def contains(self, key: str) -> bool:
        with self._lock:
            cur = self._conn.execute("SELECT 1 FROM kv WHERE key=?", (key,))
            return cur.fetchone() is not None

    @contextmanager
    def transaction(self) -> Iterator["SqliteStorage"]:
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._conn.execute("BEGIN IMMEDIATE")
            self._depth = 1
            committed = False
            try:
                yield self
                self._conn.execute("COMMIT")
                committed = True
            finally:
                self._depth = 0
                if not committed and self._conn.in_transaction:
                    self._conn.execute("ROLLBACK")
                    logger.debug("Rolled back sqlite transaction")

    def close(self) -> None:
        with self._lock:
            self._conn.close()
