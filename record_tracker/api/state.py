"""Shared application state (injected into routes)."""
from record_tracker.config import DATABASE_PATH, DATABASE_TIMEOUT
from record_tracker.core.database import Database


class AppState:
    def __init__(self, db: Database | None = None) -> None:
        self.db = db or Database(DATABASE_PATH, timeout=DATABASE_TIMEOUT)

    def startup(self) -> None:
        self.db.init_schema()


_state = AppState()


def get_state() -> AppState:
    return _state
