"""Play sessions and the per-album open/finished state."""
from dataclasses import dataclass
from typing import Optional


@dataclass
class PlaySession:
    """Stored play session. finished_at is None while the album is playing."""
    id: int
    album_id: int
    started_at: str
    finished_at: Optional[str]

    @property
    def is_open(self) -> bool:
        return self.finished_at is None


@dataclass
class SessionState:
    """Per-album state: NoOpenSession when session is None, else OpenSession."""
    album_id: int
    session: Optional[PlaySession]

    @property
    def name(self) -> str:
        return "OpenSession" if self.session is not None else "NoOpenSession"


@dataclass
class HistoryEntry:
    """Session joined with its album fields and the computed duration label."""
    session: PlaySession
    title: str
    artist: str
    cover_reference: str
    duration: str
