"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from shiptrack.utils.datetime_utils import utc_now, ensure_utc

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime(timezone=True), default=utc_now)

    # SQLite hands datetimes back without tzinfo; normalize before comparing
    latest = max(utc_now(), ensure_utc(event.timestamp))
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes; convert aware ones to UTC.

    Args:
        value: Datetime to normalize, or None

    Returns:
        Timezone-aware UTC datetime, or None if value is None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime as an ISO 8601 UTC string."""
    value = ensure_utc(value)
    return value.isoformat() if value is not None else None
