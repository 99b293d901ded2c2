"""Play sessions: open/finish state machine per album and history with durations.

An album is either in NoOpenSession or OpenSession, backed by whether one of
its sessions has finished_at NULL. Only the named transitions below change it.
"""
import logging
import sqlite3
from typing import List, Optional

from record_tracker.config import DEFAULT_COVER
from record_tracker.core.database import Database
from record_tracker.core.errors import ConflictAlreadyPlaying, NoOpenSession, NotFound
from record_tracker.core.timestamps import duration_label, normalize_timestamp
from record_tracker.models.session import HistoryEntry, PlaySession, SessionState

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = "id, album_id, started_at, finished_at"


def _row_to_session(row: sqlite3.Row) -> PlaySession:
    return PlaySession(
        id=row["id"],
        album_id=row["album_id"],
        started_at=row["started_at"],
        finished_at=row["finished_at"],
    )


def _require_album(conn: sqlite3.Connection, album_id: int) -> None:
    row = conn.execute("SELECT 1 FROM albums WHERE id = ?", (album_id,)).fetchone()
    if row is None:
        raise NotFound(f"Album {album_id} not found")


def _open_session(conn: sqlite3.Connection, album_id: int) -> Optional[PlaySession]:
    row = conn.execute(
        f"""
        SELECT {_SESSION_COLUMNS} FROM play_sessions
        WHERE album_id = ? AND finished_at IS NULL
        ORDER BY started_at DESC, id DESC
        LIMIT 1
        """,
        (album_id,),
    ).fetchone()
    return _row_to_session(row) if row else None


def get_session_state(db: Database, album_id: int) -> SessionState:
    """Current state of an album. Raises NotFound for a missing album."""
    with db.connect() as conn:
        _require_album(conn, album_id)
        return SessionState(album_id=album_id, session=_open_session(conn, album_id))


def start_session(db: Database, album_id: int, started_at: Optional[str] = None) -> PlaySession:
    """NoOpenSession -> OpenSession. started_at defaults to now.

    Raises NotFound, ConflictAlreadyPlaying or MalformedTimestamp.
    """
    started = normalize_timestamp(started_at)
    try:
        with db.transaction() as conn:
            _require_album(conn, album_id)
            current = _open_session(conn, album_id)
            if current is not None:
                raise ConflictAlreadyPlaying(
                    f"Album {album_id} is already playing (session {current.id} since {current.started_at})"
                )
            cursor = conn.execute(
                "INSERT INTO play_sessions (album_id, started_at) VALUES (?, ?)",
                (album_id, started),
            )
            session_id = cursor.lastrowid
    except sqlite3.IntegrityError as e:
        # Partial unique index on open sessions; only reachable if another
        # writer bypassed the transaction above
        raise ConflictAlreadyPlaying(f"Album {album_id} is already playing") from e
    logger.info("Album %d now playing (session %d, started %s)", album_id, session_id, started)
    return PlaySession(id=session_id, album_id=album_id, started_at=started, finished_at=None)


def finish_session(db: Database, album_id: int, finished_at: Optional[str] = None) -> PlaySession:
    """OpenSession -> NoOpenSession on the most recent open session. finished_at defaults to now.

    A finish time earlier than the start is stored as given; it shows up as an
    invalid duration in the history. Raises NotFound, NoOpenSession or
    MalformedTimestamp, leaving stored state unchanged.
    """
    finished = normalize_timestamp(finished_at)
    with db.transaction() as conn:
        _require_album(conn, album_id)
        current = _open_session(conn, album_id)
        if current is None:
            raise NoOpenSession(f"Album {album_id} has no open session")
        conn.execute(
            "UPDATE play_sessions SET finished_at = ? WHERE id = ? AND finished_at IS NULL",
            (finished, current.id),
        )
    logger.info("Album %d finished (session %d, finished %s)", album_id, current.id, finished)
    current.finished_at = finished
    return current


def log_completed_session(db: Database, album_id: int, started_at: str, finished_at: str) -> PlaySession:
    """Insert an already finished session, bypassing the open/finish protocol.

    Used to backfill plays whose start and end are both known. Does not touch
    an open session the album may have.
    """
    started = normalize_timestamp(started_at)
    finished = normalize_timestamp(finished_at)
    with db.transaction() as conn:
        _require_album(conn, album_id)
        cursor = conn.execute(
            "INSERT INTO play_sessions (album_id, started_at, finished_at) VALUES (?, ?, ?)",
            (album_id, started, finished),
        )
        session_id = cursor.lastrowid
    logger.info("Logged completed session %d for album %d", session_id, album_id)
    return PlaySession(id=session_id, album_id=album_id, started_at=started, finished_at=finished)


def log_play(
    db: Database,
    album_id: int,
    played_on: Optional[str] = None,
    finished_on: Optional[str] = None,
) -> PlaySession:
    """Single entry point for play logging clients.

    finished_on alone finishes the open session, both timestamps log a completed
    session, anything else starts a new one.
    """
    if finished_on is not None and played_on is not None:
        return log_completed_session(db, album_id, played_on, finished_on)
    if finished_on is not None:
        return finish_session(db, album_id, finished_on)
    return start_session(db, album_id, played_on)


def list_history(db: Database, album_id: Optional[int] = None) -> List[HistoryEntry]:
    """Sessions joined with their album, newest start first, optionally for one album.

    Durations are computed here; a malformed stored timestamp only affects its
    own row.
    """
    query = """
        SELECT ps.id, ps.album_id, ps.started_at, ps.finished_at,
               a.title, a.artist, a.cover_reference
        FROM play_sessions ps
        JOIN albums a ON ps.album_id = a.id
    """
    params: tuple = ()
    if album_id is not None:
        query += " WHERE ps.album_id = ?"
        params = (album_id,)
    query += " ORDER BY ps.started_at DESC, ps.id DESC"

    with db.connect() as conn:
        rows = conn.execute(query, params).fetchall()

    return [
        HistoryEntry(
            session=_row_to_session(row),
            title=row["title"],
            artist=row["artist"],
            cover_reference=row["cover_reference"] or DEFAULT_COVER,
            duration=duration_label(row["started_at"], row["finished_at"]),
        )
        for row in rows
    ]
