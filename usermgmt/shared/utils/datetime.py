"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system are timezone-aware UTC. Drivers that
do not keep timezone information (SQLite) hand back naive values; those
are normalized with ensure_utc at the repository boundary.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of datetime.now() (naive, local timezone) or
    datetime.utcnow() (naive, deprecated in Python 3.12).
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def utc_in(**delta: float) -> datetime:
    """Return now plus a timedelta built from keyword arguments (e.g. hours=24)."""
    return utc_now() + timedelta(**delta)
