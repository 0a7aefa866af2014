"""
Timestamp normalization.

Every timestamp the library stores or compares is a timezone-aware UTC
datetime. Naive datetimes (including values read back from databases that
drop the offset, such as SQLite) are interpreted as UTC; aware datetimes in
other zones are converted.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Args:
        value: Naive (assumed UTC) or aware datetime

    Returns:
        The same instant with tzinfo=UTC
    """
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Normalize a caller-supplied reference time, defaulting to the current time."""
    return utc_now() if now is None else ensure_utc(now)
