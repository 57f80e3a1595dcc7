"""Utility functions for jpreader."""

from datetime import UTC, datetime


def to_utc_iso(dt: datetime | None) -> str | None:
    """
    Convert datetime to UTC ISO format string.

    Args:
        dt: Datetime object to convert, or None

    Returns:
        ISO format string with UTC timezone, or None

    """
    if dt is None:
        return None
    # Naive datetimes are stored as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt_utc = dt.astimezone(UTC)
    return dt_utc.isoformat()


def utc_now() -> datetime:
    """
    Get the current time as a naive UTC datetime.

    SQLite does not keep timezone information, so every datetime written by
    jpreader is naive UTC.

    Returns:
        Naive datetime in UTC

    """
    return datetime.now(UTC).replace(tzinfo=None)


def percent(part: int, whole: int) -> int:
    """
    Integer percentage of ``part`` in ``whole``, rounded to the nearest integer.

    Args:
        part: The numerator
        whole: The denominator

    Returns:
        The percentage, or 0 if ``whole`` is 0

    """
    if whole <= 0:
        return 0
    return round(part / whole * 100)
