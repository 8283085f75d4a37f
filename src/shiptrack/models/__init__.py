"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .package import Package
from .package_status import StatusCategory, classify_status
from .timeline_event import TimelineEvent

__all__ = [
    "Base",
    "BaseModel",
    "Package",
    "StatusCategory",
    "TimelineEvent",
    "classify_status",
]
