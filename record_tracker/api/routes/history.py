"""Play history: start/finish sessions and list past plays with durations."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from record_tracker.api.errors import to_http
from record_tracker.api.state import AppState, get_state
from record_tracker.core.errors import RecordTrackerError
from record_tracker.core.session_tracker import (
    finish_session,
    list_history,
    log_completed_session,
    log_play,
    start_session,
)
from record_tracker.models.session import HistoryEntry, PlaySession

router = APIRouter()


class LogPlayBody(BaseModel):
    album_id: int
    played_on: Optional[str] = None
    finished_on: Optional[str] = None


class StartBody(BaseModel):
    album_id: int
    played_on: Optional[str] = None


class FinishBody(BaseModel):
    album_id: int
    finished_on: Optional[str] = None


class CompletedBody(BaseModel):
    album_id: int
    played_on: str
    finished_on: str


def _session_to_dict(s: PlaySession) -> dict:
    return {
        "play_id": s.id,
        "album_id": s.album_id,
        "played_on": s.started_at,
        "finished_on": s.finished_at,
    }


def _entry_to_dict(e: HistoryEntry) -> dict:
    d = _session_to_dict(e.session)
    d.update(
        {
            "title": e.title,
            "artist": e.artist,
            "cover_reference": e.cover_reference,
            "duration": e.duration,
        }
    )
    return d


@router.get("")
def get_play_history(album_id: Optional[int] = None, state: AppState = Depends(get_state)):
    """All plays newest first, joined with album fields; filter with ?album_id=."""
    try:
        entries = list_history(state.db, album_id=album_id)
    except RecordTrackerError as e:
        raise to_http(e)
    return [_entry_to_dict(e) for e in entries]


@router.post("", status_code=201)
def post_play(body: LogPlayBody, state: AppState = Depends(get_state)):
    """Log a play: finished_on alone closes the open session, both timestamps
    log a completed play, otherwise a new session starts."""
    try:
        session = log_play(
            state.db,
            body.album_id,
            played_on=body.played_on,
            finished_on=body.finished_on,
        )
    except RecordTrackerError as e:
        raise to_http(e)
    return _session_to_dict(session)


@router.post("/start", status_code=201)
def post_start(body: StartBody, state: AppState = Depends(get_state)):
    """Start playing an album (409 if it is already playing)."""
    try:
        session = start_session(state.db, body.album_id, started_at=body.played_on)
    except RecordTrackerError as e:
        raise to_http(e)
    return _session_to_dict(session)


@router.post("/finish")
def post_finish(body: FinishBody, state: AppState = Depends(get_state)):
    """Finish the album's open session (409 if nothing is playing)."""
    try:
        session = finish_session(state.db, body.album_id, finished_at=body.finished_on)
    except RecordTrackerError as e:
        raise to_http(e)
    return _session_to_dict(session)


@router.post("/completed", status_code=201)
def post_completed(body: CompletedBody, state: AppState = Depends(get_state)):
    """Backfill a play whose start and finish are both known."""
    try:
        session = log_completed_session(state.db, body.album_id, body.played_on, body.finished_on)
    except RecordTrackerError as e:
        raise to_http(e)
    return _session_to_dict(session)
