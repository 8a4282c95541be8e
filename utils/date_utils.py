"""
RecipeShare Date Utilities
Helper functions for timestamps and reporting windows
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def days_ago(days: int, reference: Optional[datetime] = None) -> datetime:
    """
    Start of a trailing window

    Args:
        days: Window length in days
        reference: End of the window (defaults to now)
    """
    return (reference or utcnow()) - timedelta(days=days)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """
    Render a datetime as ISO-8601 UTC with millisecond precision

    Naive values (SQLite drops tzinfo) are treated as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp() -> str:
    """ISO timestamp stamped on every response body"""
    return to_iso(utcnow())
