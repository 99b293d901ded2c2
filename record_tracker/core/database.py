"""
SQLite store handle for the album catalog and play history
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from record_tracker.config import DATABASE_PATH, DATABASE_TIMEOUT
from record_tracker.core.errors import StorageUnavailable

logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS albums (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        artist TEXT NOT NULL,
        cover_reference TEXT DEFAULT 'default-cover.jpg',
        barcode TEXT UNIQUE,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS play_sessions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        album_id INTEGER NOT NULL,
        started_at TEXT NOT NULL,
        finished_at TEXT DEFAULT NULL,
        FOREIGN KEY (album_id) REFERENCES albums (id) ON DELETE CASCADE
    )
    """,
    # At most one open session per album, enforced by the store itself
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_play_sessions_one_open
    ON play_sessions (album_id) WHERE finished_at IS NULL
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_play_sessions_started_at
    ON play_sessions (started_at)
    """,
)


class Database:
    """Explicit handle to the SQLite file; one connection per operation.

    Created once at startup and passed to every store function. Holds no
    connection between calls, so it is safe to share across request handlers.
    """

    def __init__(self, path: Union[str, Path] = DATABASE_PATH, timeout: float = DATABASE_TIMEOUT) -> None:
        self.path = Path(path)
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"Database(path={str(self.path)!r})"

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield an autocommit connection with foreign keys enforced."""
        try:
            conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            logger.error("Cannot open database %s: %s", self.path, e)
            raise StorageUnavailable(f"Cannot open database: {e}") from e
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            logger.error("Database error on %s: %s", self.path, e)
            raise StorageUnavailable(str(e)) from e
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside BEGIN IMMEDIATE; commit on success, roll back on error.

        IMMEDIATE takes the write lock up front so check-then-write sequences
        cannot interleave with another writer.
        """
        with self.connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def init_schema(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            for statement in SCHEMA:
                conn.execute(statement)
        logger.info("Database schema ready at %s", self.path)
