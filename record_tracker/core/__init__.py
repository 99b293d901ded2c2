"""Core services: SQLite store handle, album catalog, play session tracking."""
from record_tracker.core.database import Database
from record_tracker.core.errors import (
    ConflictAlreadyPlaying,
    ConstraintViolation,
    MalformedTimestamp,
    NoOpenSession,
    NotFound,
    RecordTrackerError,
    StorageUnavailable,
)

__all__ = [
    "Database",
    "RecordTrackerError",
    "NotFound",
    "ConstraintViolation",
    "ConflictAlreadyPlaying",
    "NoOpenSession",
    "MalformedTimestamp",
    "StorageUnavailable",
]
