"""Data models for albums and play sessions."""
from record_tracker.models.album import Album
from record_tracker.models.session import HistoryEntry, PlaySession, SessionState

__all__ = [
    "Album",
    "PlaySession",
    "HistoryEntry",
    "SessionState",
]
