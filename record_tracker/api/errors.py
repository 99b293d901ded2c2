"""Map core errors to HTTP responses."""
import logging

from fastapi import HTTPException

from record_tracker.core.errors import (
    ConflictAlreadyPlaying,
    ConstraintViolation,
    MalformedTimestamp,
    NoOpenSession,
    NotFound,
    RecordTrackerError,
    StorageUnavailable,
)

logger = logging.getLogger(__name__)

_STATUS = {
    NotFound: 404,
    ConstraintViolation: 409,
    ConflictAlreadyPlaying: 409,
    NoOpenSession: 409,
    MalformedTimestamp: 400,
    StorageUnavailable: 500,
}


def to_http(e: RecordTrackerError) -> HTTPException:
    """HTTPException for a core error; unknown subclasses are 500."""
    status = _STATUS.get(type(e), 500)
    if status == 500:
        logger.error("Request failed: %s", e)
        return HTTPException(status_code=500, detail="Storage unavailable")
    return HTTPException(status_code=status, detail=str(e))
