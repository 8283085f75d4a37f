"""
Timeline Service - ordered tracking history for packages.

Timeline events are ordered by timestamp ascending, ties broken by
insertion order (primary key). The same ordering feeds both the
first-processing check in status updates and the public tracking view.
"""

from datetime import datetime
from typing import Dict, List, Sequence

from sqlalchemy.orm import Session

from shiptrack.models import TimelineEvent
from shiptrack.utils.datetime_utils import ensure_utc, to_iso, utc_now


def get_ordered_events(session: Session, package_id: int) -> List[TimelineEvent]:
    """
    Load a package's complete timeline in chronological order.

    Args:
        session: Active database session
        package_id: Internal package ID

    Returns:
        List of TimelineEvent, oldest first
    """
    return (
        session.query(TimelineEvent)
        .filter(TimelineEvent.package_id == package_id)
        .order_by(TimelineEvent.timestamp.asc(), TimelineEvent.id.asc())
        .all()
    )


def next_event_timestamp(history: Sequence[TimelineEvent]) -> datetime:
    """
    Timestamp for a new event appended after history.

    Never earlier than the latest existing event, so per-package
    timestamps stay non-decreasing even if the clock steps backwards.
    """
    now = utc_now()
    if not history:
        return now
    latest = ensure_utc(history[-1].timestamp)
    return max(now, latest)


def serialize_event(timeline_event: TimelineEvent) -> Dict[str, str]:
    """Public representation of one timeline event."""
    return {
        "status": timeline_event.status,
        "location": timeline_event.location,
        "description": timeline_event.description,
        "timestamp": to_iso(timeline_event.timestamp),
    }


def build_timeline(events: Sequence[TimelineEvent]) -> List[Dict[str, str]]:
    """Serialize an already ordered sequence of events."""
    return [serialize_event(e) for e in events]
