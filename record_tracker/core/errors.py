"""Error taxonomy raised by the catalog store and session tracker."""


class RecordTrackerError(Exception):
    """Base class for all core failures."""


class NotFound(RecordTrackerError):
    """Referenced album (or session) does not exist."""


class ConstraintViolation(RecordTrackerError):
    """Unique barcode collision, foreign key violation or invalid field."""


class ConflictAlreadyPlaying(RecordTrackerError):
    """Start requested while the album already has an open session."""


class NoOpenSession(RecordTrackerError):
    """Finish requested but the album has nothing playing."""


class MalformedTimestamp(RecordTrackerError, ValueError):
    """Caller-supplied timestamp could not be parsed as a timezone-aware ISO-8601 value."""


class StorageUnavailable(RecordTrackerError):
    """The database could not be reached or failed mid-operation."""
