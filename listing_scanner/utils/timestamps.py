"""Timestamp helpers.

Everything inside the scanner is handled as timezone-aware UTC. Feed dates
arrive with their own offsets and are converted on the way in.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to aware UTC.

    Naive values are assumed to already be UTC.

    Args:
        dt: Datetime to convert (may be None)

    Returns:
        Aware UTC datetime, or None if dt is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string (as used by RSS 1.0 ``dc:date``) into UTC.

    Accepts full timestamps with a ``Z`` suffix or numeric offset, naive
    timestamps and bare dates.

    Args:
        value: String to parse

    Returns:
        Aware UTC datetime, or None if the value is empty or unparseable

    Example:
        >>> parse_iso_datetime("2020-05-01T12:00:00-06:00").hour
        18
    """
    if not value or not value.strip():
        return None

    cleaned = value.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        pass

    for fmt in ("%Y-%m-%dT%H:%M:%S", "%Y-%m-%d"):
        try:
            return ensure_utc(datetime.strptime(cleaned, fmt))
        except ValueError:
            continue
    return None


def format_timestamp(dt: Optional[datetime]) -> str:
    """Format a datetime as ``YYYY-MM-DDTHH:MM:SSZ`` (empty string for None)."""
    dt_utc = ensure_utc(dt)
    if dt_utc is None:
        return ""
    return dt_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
