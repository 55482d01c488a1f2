"""
Record store backends and a simple migration system.

A record store is a key-value persistence substrate: it knows nothing
about students beyond "a JSON-representable mapping stored under a
string key".  Two backends are provided:

* ``SQLiteRecordStore`` keeps one row per record in the ``students``
  table.  Every operation opens its own connection and runs inside a
  single transaction, so a partially written record is never visible
  to another reader.  The schema is created by ``init`` from the
  ordered ``MIGRATIONS`` list; applied versions are stored in the
  ``migrations`` table.
* ``MemoryRecordStore`` keeps records in a dict guarded by a lock.  It
  does not survive a restart and exists for tests and throwaway runs.

Both return copies from every read, so callers can never mutate stored
state through a returned object.
"""

import copy
import json
import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .config import Settings, settings
from .errors import NotFoundError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Append new migrations with an incremented version number.  Statements
# run one by one inside the init transaction.
MIGRATIONS: list[tuple[int, list[str]]] = [
    (
        1,
        [
            """
            CREATE TABLE IF NOT EXISTS students (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            """,
        ],
    ),
]


def get_database_path(db_url: Optional[str] = None) -> str:
    """Compute the path to the SQLite database file.

    Absolute paths are used as is.  Relative paths are resolved
    against the current working directory.
    """
    db_url = db_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    return str((Path.cwd() / db_url).resolve())


class RecordStore(ABC):
    """Durable key-value persistence of records keyed by primary key."""

    def init(self) -> None:
        """Prepare the backing storage.  Safe to call more than once."""

    @abstractmethod
    def put(self, key: str, record: Record) -> None:
        """Insert or replace the record stored under ``key``."""

    @abstractmethod
    def get(self, key: str) -> Record:
        """Return a copy of the record under ``key`` or raise ``NotFoundError``."""

    @abstractmethod
    def delete(self, key: str) -> Record:
        """Remove the record under ``key`` and return it.

        Raises ``NotFoundError`` if nothing is stored under ``key``.
        """

    @abstractmethod
    def list_all(self) -> List[Record]:
        """Return a snapshot of every stored record."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""


class SQLiteRecordStore(RecordStore):
    """Record store backed by one SQLite row per record."""

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout

    def get_connection(self) -> sqlite3.Connection:
        """Create and return a new SQLite connection.

        Transactions are controlled explicitly (``isolation_level=None``)
        so that each store operation maps to exactly one ``BEGIN`` /
        ``COMMIT`` pair.  ``timeout`` bounds how long a writer waits for
        a competing writer to release the database lock.
        """
        conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def transaction(self, immediate: bool = False) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor inside a transaction and close the connection on exit.

        ``immediate`` takes the write lock up front, which is needed when
        a write depends on a preceding read (e.g. delete-and-return).
        Any exception rolls the transaction back and propagates.
        """
        conn = self.get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield cursor
            except BaseException:
                cursor.execute("ROLLBACK")
                raise
            cursor.execute("COMMIT")
        finally:
            conn.close()

    def init(self) -> None:
        """Create the database file if needed and apply pending migrations."""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with self.transaction(immediate=True) as cursor:
            cursor.execute(
                "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
            )
            cursor.execute("SELECT MAX(version) AS version FROM migrations")
            row = cursor.fetchone()
            current_version = row["version"] if row and row["version"] is not None else 0

            for version, statements in MIGRATIONS:
                if version > current_version:
                    for statement in statements:
                        cursor.execute(statement)
                    cursor.execute(
                        "INSERT INTO migrations (version) VALUES (?)", (version,)
                    )
                    logger.info("Applied migration %s to %s", version, self.path)
                    current_version = version

    def put(self, key: str, record: Record) -> None:
        payload = json.dumps(record)
        with self.transaction(immediate=True) as cursor:
            # ON CONFLICT keeps the existing rowid, so an upsert does not
            # move the record in storage order.
            cursor.execute(
                """
                INSERT INTO students (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE
                SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
                """,
                (key, payload),
            )
        logger.debug("Stored record %s", key)

    def get(self, key: str) -> Record:
        with self.transaction() as cursor:
            row = cursor.execute(
                "SELECT value FROM students WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Record {key} not found")
        return json.loads(row["value"])

    def delete(self, key: str) -> Record:
        with self.transaction(immediate=True) as cursor:
            row = cursor.execute(
                "SELECT value FROM students WHERE key = ?", (key,)
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Record {key} not found")
            cursor.execute("DELETE FROM students WHERE key = ?", (key,))
        logger.debug("Deleted record %s", key)
        return json.loads(row["value"])

    def list_all(self) -> List[Record]:
        with self.transaction() as cursor:
            rows = cursor.execute(
                "SELECT value FROM students ORDER BY rowid"
            ).fetchall()
        return [json.loads(row["value"]) for row in rows]

    def count(self) -> int:
        with self.transaction() as cursor:
            row = cursor.execute("SELECT COUNT(*) AS total FROM students").fetchone()
        return int(row["total"])


class MemoryRecordStore(RecordStore):
    """Non-durable record store kept in process memory."""

    def __init__(self) -> None:
        self._records: Dict[str, Record] = {}
        self._lock = threading.Lock()

    def put(self, key: str, record: Record) -> None:
        with self._lock:
            self._records[key] = copy.deepcopy(record)

    def get(self, key: str) -> Record:
        with self._lock:
            if key not in self._records:
                raise NotFoundError(f"Record {key} not found")
            return copy.deepcopy(self._records[key])

    def delete(self, key: str) -> Record:
        with self._lock:
            if key not in self._records:
                raise NotFoundError(f"Record {key} not found")
            return self._records.pop(key)

    def list_all(self) -> List[Record]:
        with self._lock:
            return copy.deepcopy(list(self._records.values()))

    def count(self) -> int:
        with self._lock:
            return len(self._records)


def get_record_store(app_settings: Optional[Settings] = None) -> RecordStore:
    """Build the record store selected by ``store_backend``.

    The returned store is not initialised; call ``init`` before use.
    """
    app_settings = app_settings or settings
    backend = app_settings.store_backend
    if backend == "memory":
        return MemoryRecordStore()
    if backend == "sqlite":
        return SQLiteRecordStore(
            get_database_path(app_settings.database_url),
            timeout=app_settings.db_timeout,
        )
    raise ValueError(f"Unknown store backend: {backend!r}")
