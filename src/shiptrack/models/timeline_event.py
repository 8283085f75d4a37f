"""
Timeline event model for package tracking history.

This module contains:
- TimelineEvent: One status/location entry in a package's audit trail

Events are append-only. Once flushed, a row is never modified; the
before_update listener below enforces that at the ORM level.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import relationship

from shiptrack.utils.datetime_utils import utc_now

from .base import BaseModel


class TimelineEvent(BaseModel):
    """
    TimelineEvent model representing a single tracking update.

    Attributes:
        package_id: Foreign key to the owning Package
        status: Status label as entered (original casing kept for display)
        location: Location label
        description: Free-text note
        timestamp: When the update happened; non-decreasing per package
    """

    __tablename__ = "timeline_events"

    package_id = Column(
        Integer, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False
    )
    status = Column(String(100), nullable=False)
    location = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    package = relationship("Package", back_populates="events")

    __table_args__ = (
        Index("idx_timeline_event_package_timestamp", "package_id", "timestamp", "id"),
    )

    def __repr__(self) -> str:
        """String representation of timeline event."""
        return (
            f"TimelineEvent(id={self.id}, package_id={self.package_id}, "
            f"status='{self.status}')"
        )


@event.listens_for(TimelineEvent, "before_update")
def _reject_event_update(mapper, connection, target):
    raise ValueError(f"Timeline events are append-only; cannot modify event {target.id}")
