"""
UTC timestamp utilities (stdlib-only).

Lock file timestamps are timezone-aware UTC datetimes serialized as RFC 3339.

Tags:
    timestamps, utc, datetime, lockstep, stdlib-only
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_iso8601(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string."""
    if dt is None:
        return None
    return dt.isoformat()
