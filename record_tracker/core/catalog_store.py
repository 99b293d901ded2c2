"""Persist and look up albums (SQLite)."""
import logging
import sqlite3
from typing import List, Optional

from record_tracker.config import DEFAULT_COVER
from record_tracker.core.database import Database
from record_tracker.core.errors import ConstraintViolation
from record_tracker.core.timestamps import utc_now
from record_tracker.models.album import Album

logger = logging.getLogger(__name__)

_ALBUM_COLUMNS = "id, title, artist, cover_reference, barcode, created_at"


def _row_to_album(row: sqlite3.Row) -> Album:
    return Album(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        cover_reference=row["cover_reference"] or DEFAULT_COVER,
        barcode=row["barcode"],
        created_at=row["created_at"],
    )


def _required(field: str, value: str) -> str:
    if value is None or not value.strip():
        raise ConstraintViolation(f"{field} must not be empty")
    return value.strip()


def add_album(
    db: Database,
    title: str,
    artist: str,
    cover_reference: Optional[str] = None,
    barcode: Optional[str] = None,
) -> Album:
    """Insert a new album and return it. Raises ConstraintViolation on a duplicate barcode."""
    title = _required("title", title)
    artist = _required("artist", artist)
    cover = cover_reference or DEFAULT_COVER
    code = barcode.strip() if barcode and barcode.strip() else None
    created_at = utc_now()
    try:
        with db.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO albums (title, artist, cover_reference, barcode, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (title, artist, cover, code, created_at),
            )
            album_id = cursor.lastrowid
    except sqlite3.IntegrityError as e:
        logger.info("Rejected album %r: %s", title, e)
        raise ConstraintViolation(f"Barcode already in use: {code}") from e
    logger.info("Added album %d: %s by %s", album_id, title, artist)
    return Album(
        id=album_id,
        title=title,
        artist=artist,
        cover_reference=cover,
        barcode=code,
        created_at=created_at,
    )


def list_albums(db: Database) -> List[Album]:
    """All albums in creation order."""
    with db.connect() as conn:
        rows = conn.execute(f"SELECT {_ALBUM_COLUMNS} FROM albums ORDER BY id").fetchall()
    return [_row_to_album(r) for r in rows]


def get_album(db: Database, album_id: int) -> Optional[Album]:
    """Return album by id or None."""
    with db.connect() as conn:
        row = conn.execute(
            f"SELECT {_ALBUM_COLUMNS} FROM albums WHERE id = ?", (album_id,)
        ).fetchone()
    return _row_to_album(row) if row else None


def find_album_by_barcode(db: Database, code: str) -> Optional[Album]:
    """Return album with this barcode or None."""
    if not code or not code.strip():
        return None
    with db.connect() as conn:
        row = conn.execute(
            f"SELECT {_ALBUM_COLUMNS} FROM albums WHERE barcode = ?", (code.strip(),)
        ).fetchone()
    return _row_to_album(row) if row else None


def delete_album(db: Database, album_id: int) -> bool:
    """Delete album and, by cascade, its sessions. Returns True if it existed.

    Deleting a missing album is not an error.
    """
    with db.transaction() as conn:
        cursor = conn.execute("DELETE FROM albums WHERE id = ?", (album_id,))
        deleted = cursor.rowcount > 0
    if deleted:
        logger.info("Deleted album %d and its play sessions", album_id)
    return deleted
