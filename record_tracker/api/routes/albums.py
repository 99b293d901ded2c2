"""Album catalog CRUD and barcode lookup (stored in SQLite)."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from record_tracker.api.errors import to_http
from record_tracker.api.state import AppState, get_state
from record_tracker.core.catalog_store import (
    add_album,
    delete_album,
    find_album_by_barcode,
    list_albums,
)
from record_tracker.core.errors import RecordTrackerError
from record_tracker.core.session_tracker import get_session_state
from record_tracker.models.album import Album

router = APIRouter()


class CreateAlbumBody(BaseModel):
    title: str
    artist: str
    cover_reference: Optional[str] = None
    barcode: Optional[str] = None


def _album_to_dict(a: Album) -> dict:
    return {
        "album_id": a.id,
        "title": a.title,
        "artist": a.artist,
        "cover_reference": a.cover_reference,
        "barcode": a.barcode,
        "created_at": a.created_at,
    }


@router.get("")
def get_albums(state: AppState = Depends(get_state)):
    """List all albums in creation order."""
    try:
        albums = list_albums(state.db)
    except RecordTrackerError as e:
        raise to_http(e)
    return [_album_to_dict(a) for a in albums]


@router.post("", status_code=201)
def create_album(body: CreateAlbumBody, state: AppState = Depends(get_state)):
    """Add an album. cover_reference defaults to the placeholder cover; barcode must be unique."""
    try:
        album = add_album(
            state.db,
            body.title,
            body.artist,
            cover_reference=body.cover_reference,
            barcode=body.barcode,
        )
    except RecordTrackerError as e:
        raise to_http(e)
    return _album_to_dict(album)


@router.get("/barcode/{barcode}")
def get_album_by_barcode(barcode: str, state: AppState = Depends(get_state)):
    """Look up an album by barcode."""
    try:
        album = find_album_by_barcode(state.db, barcode)
    except RecordTrackerError as e:
        raise to_http(e)
    if album is None:
        raise HTTPException(status_code=404, detail="No album with that barcode")
    return _album_to_dict(album)


@router.get("/{album_id}/session")
def get_album_session(album_id: int, state: AppState = Depends(get_state)):
    """Whether the album is playing now, and since when."""
    try:
        current = get_session_state(state.db, album_id)
    except RecordTrackerError as e:
        raise to_http(e)
    session = current.session
    return {
        "album_id": album_id,
        "state": current.name,
        "play_id": session.id if session else None,
        "played_on": session.started_at if session else None,
    }


@router.delete("/{album_id}", status_code=204)
def remove_album(album_id: int, state: AppState = Depends(get_state)):
    """Delete an album and its play history. Deleting a missing album succeeds."""
    try:
        delete_album(state.db, album_id)
    except RecordTrackerError as e:
        raise to_http(e)
    return Response(status_code=204)
