"""SQLite-backed persistence for the activity summary."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol

from pydantic import NonNegativeInt, TypeAdapter, ValidationError

from .config import DEFAULT_STORAGE_KEY
from .models import ActivitySummary

logger = logging.getLogger(__name__)

DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

_SUMMARY_ADAPTER = TypeAdapter(Dict[str, NonNegativeInt])


class StorageError(RuntimeError):
    """Raised when the summary record cannot be read or written."""


class SummaryStore(Protocol):
    def load(self) -> ActivitySummary: ...

    def save(self, summary: ActivitySummary) -> None: ...


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS records (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )


def read_record(conn: sqlite3.Connection, key: str) -> Optional[str]:
    row = conn.execute("SELECT value FROM records WHERE key = ?", (key,)).fetchone()
    return row["value"] if row is not None else None


def write_record(conn: sqlite3.Connection, key: str, value: str) -> None:
    conn.execute(
        """
        INSERT INTO records (key, value, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET
            value = excluded.value,
            updated_at = excluded.updated_at
        """,
        (key, value, datetime.now().strftime(DATETIME_FMT)),
    )


def encode_summary(summary: ActivitySummary) -> str:
    return json.dumps(summary, sort_keys=True)


def decode_summary(raw: str) -> ActivitySummary:
    """Parse and validate a stored summary record."""
    try:
        return dict(_SUMMARY_ADAPTER.validate_json(raw))
    except ValidationError as exc:
        raise StorageError(f"Malformed activity record: {exc}") from exc


class SqliteSummaryStore:
    """Keeps the activity summary as a single JSON record in SQLite."""

    def __init__(self, db_path: Path, *, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.db_path = Path(db_path)
        self.key = key

    def load(self) -> ActivitySummary:
        try:
            with database_connection(self.db_path) as conn:
                raw = read_record(conn, self.key)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot read record {self.key!r}: {exc}") from exc
        if raw is None:
            logger.debug("No stored record under %r; starting empty.", self.key)
            return {}
        return decode_summary(raw)

    def save(self, summary: ActivitySummary) -> None:
        try:
            with database_connection(self.db_path) as conn:
                write_record(conn, self.key, encode_summary(summary))
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot write record {self.key!r}: {exc}") from exc
