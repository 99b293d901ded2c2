"""Tests for the play session state machine and history listing."""

import sqlite3
import threading

import pytest

from record_tracker.core.catalog_store import add_album
from record_tracker.core.database import Database
from record_tracker.core.errors import (
    ConflictAlreadyPlaying,
    MalformedTimestamp,
    NoOpenSession,
    NotFound,
)
from record_tracker.core.session_tracker import (
    finish_session,
    get_session_state,
    list_history,
    log_completed_session,
    log_play,
    start_session,
)


def _all_sessions(db):
    with db.connect() as conn:
        rows = conn.execute(
            "SELECT id, album_id, started_at, finished_at FROM play_sessions ORDER BY id"
        ).fetchall()
    return [tuple(r) for r in rows]


class TestStartSession:

    def test_start_opens_session(self, db, album):
        session = start_session(db, album.id, "2024-01-01T00:00:00Z")
        assert session.is_open
        assert session.started_at == "2024-01-01T00:00:00+00:00"

        state = get_session_state(db, album.id)
        assert state.name == "OpenSession"
        assert state.session.id == session.id

    def test_start_defaults_to_now(self, db, album):
        session = start_session(db, album.id)
        assert session.started_at.endswith("+00:00")

    def test_start_twice_conflicts(self, db, album):
        start_session(db, album.id)
        with pytest.raises(ConflictAlreadyPlaying):
            start_session(db, album.id)
        assert len(_all_sessions(db)) == 1

    def test_finish_then_start_again(self, db, album):
        start_session(db, album.id, "2024-01-01T00:00:00Z")
        finish_session(db, album.id, "2024-01-01T00:45:00Z")
        second = start_session(db, album.id, "2024-01-01T01:00:00Z")
        assert second.is_open
        assert len(_all_sessions(db)) == 2

    def test_other_albums_may_play_at_the_same_time(self, db, album):
        other = add_album(db, "Other", "Someone")
        start_session(db, album.id)
        start_session(db, other.id)
        assert get_session_state(db, other.id).name == "OpenSession"

    def test_missing_album(self, db):
        with pytest.raises(NotFound):
            start_session(db, 42)
        assert _all_sessions(db) == []

    def test_malformed_start(self, db, album):
        with pytest.raises(MalformedTimestamp):
            start_session(db, album.id, "half past nine")
        assert _all_sessions(db) == []

    def test_out_of_range_start(self, db, album):
        with pytest.raises(MalformedTimestamp):
            start_session(db, album.id, "0001-01-01T00:00:00+01:00")
        assert _all_sessions(db) == []

    def test_concurrent_starts_open_one_session(self, db, album):
        """Two handlers starting the same album at once: exactly one wins."""
        barrier = threading.Barrier(2)
        outcomes = []
        lock = threading.Lock()

        def worker():
            handle = Database(db.path, timeout=10.0)
            barrier.wait()
            try:
                start_session(handle, album.id)
                result = "started"
            except ConflictAlreadyPlaying:
                result = "conflict"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert sorted(outcomes) == ["conflict", "started"]
        assert len(_all_sessions(db)) == 1

    def test_store_rejects_second_open_session(self, db, album):
        """The partial unique index holds even when the tracker is bypassed."""
        start_session(db, album.id)
        with pytest.raises(sqlite3.IntegrityError):
            with db.transaction() as conn:
                conn.execute(
                    "INSERT INTO play_sessions (album_id, started_at) VALUES (?, ?)",
                    (album.id, "2024-01-01T00:00:00+00:00"),
                )


class TestFinishSession:

    def test_finish_closes_open_session(self, db, album):
        started = start_session(db, album.id, "2024-01-01T00:00:00Z")
        finished = finish_session(db, album.id, "2024-01-01T01:02:03Z")

        assert finished.id == started.id
        assert finished.finished_at == "2024-01-01T01:02:03+00:00"
        assert get_session_state(db, album.id).name == "NoOpenSession"
        assert list_history(db)[0].duration == "1hr, 2min, 3sec"

    def test_finish_defaults_to_now(self, db, album):
        start_session(db, album.id, "2024-01-01T00:00:00Z")
        finished = finish_session(db, album.id)
        assert finished.finished_at is not None

    def test_finish_without_open_session(self, db, album):
        log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T00:30:00Z")
        before = _all_sessions(db)
        with pytest.raises(NoOpenSession):
            finish_session(db, album.id, "2024-01-01T01:00:00Z")
        assert _all_sessions(db) == before

    def test_finish_missing_album(self, db):
        with pytest.raises(NotFound):
            finish_session(db, 42)

    def test_finish_before_start_is_stored(self, db, album):
        start_session(db, album.id, "2024-01-01T01:00:00Z")
        finish_session(db, album.id, "2024-01-01T00:00:00Z")
        assert list_history(db)[0].duration == "Invalid duration"

    def test_malformed_finish_leaves_session_open(self, db, album):
        start_session(db, album.id)
        with pytest.raises(MalformedTimestamp):
            finish_session(db, album.id, "soon")
        assert get_session_state(db, album.id).name == "OpenSession"


class TestLogCompletedSession:

    def test_inserts_finished_session(self, db, album):
        session = log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T00:42:00Z")
        assert not session.is_open
        assert get_session_state(db, album.id).name == "NoOpenSession"

    def test_does_not_touch_open_session(self, db, album):
        open_session = start_session(db, album.id, "2024-01-02T00:00:00Z")
        log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T00:42:00Z")
        assert get_session_state(db, album.id).session.id == open_session.id

    def test_missing_album(self, db):
        with pytest.raises(NotFound):
            log_completed_session(db, 7, "2024-01-01T00:00:00Z", "2024-01-01T00:42:00Z")


class TestLogPlay:

    def test_without_timestamps_starts(self, db, album):
        session = log_play(db, album.id)
        assert session.is_open

    def test_finished_on_alone_finishes(self, db, album):
        started = log_play(db, album.id, played_on="2024-01-01T00:00:00Z")
        finished = log_play(db, album.id, finished_on="2024-01-01T00:10:00Z")
        assert finished.id == started.id
        assert finished.finished_at == "2024-01-01T00:10:00+00:00"

    def test_both_timestamps_log_completed(self, db, album):
        session = log_play(
            db, album.id, played_on="2024-01-01T00:00:00Z", finished_on="2024-01-01T00:10:00Z"
        )
        assert not session.is_open


class TestListHistory:

    def test_ordered_newest_first_and_joined(self, db, album):
        other = add_album(db, "Other", "Someone", cover_reference="other.jpg")
        log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T00:30:00Z")
        log_completed_session(db, other.id, "2024-01-03T00:00:00Z", "2024-01-03T00:30:00Z")
        start_session(db, album.id, "2024-01-05T00:00:00Z")

        history = list_history(db)

        assert [e.session.started_at[:10] for e in history] == ["2024-01-05", "2024-01-03", "2024-01-01"]
        assert history[0].title == "Kind of Blue"
        assert history[0].cover_reference == "default-cover.jpg"
        assert history[0].duration == "PRESENT"
        assert history[1].artist == "Someone"
        assert history[1].cover_reference == "other.jpg"
        assert history[1].duration == "0hr, 30min, 0sec"

    def test_filter_by_album(self, db, album):
        other = add_album(db, "Other", "Someone")
        log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T00:30:00Z")
        log_completed_session(db, other.id, "2024-01-03T00:00:00Z", "2024-01-03T00:30:00Z")

        history = list_history(db, album_id=other.id)
        assert len(history) == 1
        assert history[0].title == "Other"

    def test_empty(self, db):
        assert list_history(db) == []

    def test_bad_rows_do_not_break_listing(self, db, album):
        log_completed_session(db, album.id, "2024-01-01T00:00:00Z", "2024-01-01T01:02:03Z")
        log_completed_session(db, album.id, "2024-01-02T01:00:00Z", "2024-01-02T00:00:00Z")
        # Legacy rows written before timestamps were validated
        with db.transaction() as conn:
            conn.execute(
                "INSERT INTO play_sessions (album_id, started_at, finished_at) VALUES (?, ?, ?)",
                (album.id, "2023-06-01 20:00:00", "not a date"),
            )

        durations = [e.duration for e in list_history(db)]
        assert durations == ["Invalid duration", "1hr, 2min, 3sec", "Invalid duration"]
