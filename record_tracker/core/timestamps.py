"""Timestamp parsing and duration labels.

Everything persisted is an ISO-8601 string with an explicit UTC offset. Caller
input is parsed strictly (naive values are rejected) and errors propagate; stored
values that fail the same parse on the read path become a display label instead.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from record_tracker.core.errors import MalformedTimestamp

logger = logging.getLogger(__name__)

PRESENT = "PRESENT"
INVALID_DURATION = "Invalid duration"


def utc_now() -> str:
    """Current time as a canonical UTC ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def _parse(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no timezone")
    return parsed


def parse_timestamp(value: str) -> datetime:
    """Parse a caller-supplied timestamp; raise MalformedTimestamp if unusable."""
    if not isinstance(value, str) or not value.strip():
        raise MalformedTimestamp(f"Invalid timestamp: {value!r}")
    try:
        return _parse(value)
    except ValueError as e:
        raise MalformedTimestamp(f"Invalid timestamp: {value!r}") from e


def normalize_timestamp(value: Optional[str]) -> str:
    """Validate caller input and return it as a UTC ISO-8601 string (now when None)."""
    if value is None:
        return utc_now()
    parsed = parse_timestamp(value)
    try:
        return parsed.astimezone(timezone.utc).isoformat()
    except OverflowError as e:
        # Offset pushes the instant outside year 1..9999 once converted to UTC
        raise MalformedTimestamp(f"Timestamp out of range: {value!r}") from e


def format_duration(total_seconds: int) -> str:
    """Render whole seconds as "{H}hr, {M}min, {S}sec"."""
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours}hr, {minutes}min, {seconds}sec"


def duration_label(started_at: Optional[str], finished_at: Optional[str]) -> str:
    """Duration of a stored session for display.

    Returns PRESENT for an open session and INVALID_DURATION when either value
    is unparsable or the session finishes before it starts.
    """
    if finished_at is None:
        return PRESENT
    try:
        start = _parse(started_at or "")
        end = _parse(finished_at)
    except ValueError as e:
        logger.warning("Unparsable session timestamps (%r, %r): %s", started_at, finished_at, e)
        return INVALID_DURATION
    if end < start:
        return INVALID_DURATION
    return format_duration(int((end - start).total_seconds()))
