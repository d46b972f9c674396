"""Datetime utilities for common operations."""

from datetime import datetime, timezone
from typing import Optional


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes.

    Some drivers (SQLite) drop the offset on read even for timezone-aware
    columns; every value this service writes is UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def seconds_between(start: datetime, end: datetime) -> int:
    """
    Whole seconds elapsed between two datetimes, never negative.

    Args:
        start: Start datetime
        end: End datetime

    Returns:
        Elapsed seconds
    """
    delta = ensure_utc(end) - ensure_utc(start)
    return max(0, int(delta.total_seconds()))
