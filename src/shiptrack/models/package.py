"""
Package model for shipments.

This module contains:
- Package: A shipment identified by its public tracking ID
"""

from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String, Text, Index
from sqlalchemy.orm import relationship

from shiptrack.utils.constants import (
    DEFAULT_PACKAGE_DESCRIPTION,
    DEFAULT_PACKAGE_QUANTITY,
    DEFAULT_SENDER_NAME,
    INITIAL_PACKAGE_STATUS,
)

from .base import BaseModel
from .package_status import StatusCategory, classify_status


class Package(BaseModel):
    """
    Package model representing a tracked shipment.

    The tracking ID is assigned once at creation and never changes. The
    current status is stored lower-cased; the full history lives in the
    package's timeline events.

    Attributes:
        tracking_id: Public identifier, e.g. "ESP-0123456789"
        sender_*: Sender contact details (all optional)
        receiver_*: Receiver contact details (name and email required)
        origin, destination: Route endpoints
        package_description, package_quantity, weight, total_charges: Contents
        status: Current status label, lower-cased
        version: Optimistic-lock counter maintained by SQLAlchemy
    """

    __tablename__ = "packages"

    tracking_id = Column(String(32), unique=True, nullable=False, index=True)

    # Sender
    sender_name = Column(String(200), nullable=False, default=DEFAULT_SENDER_NAME)
    sender_email = Column(String(320), nullable=False, default="")
    sender_address = Column(Text, nullable=False, default="")
    sender_phone = Column(String(50), nullable=False, default="")

    # Receiver
    receiver_name = Column(String(200), nullable=False)
    receiver_email = Column(String(320), nullable=False)
    receiver_address = Column(Text, nullable=False, default="")
    receiver_phone = Column(String(50), nullable=False, default="")

    # Route and contents
    origin = Column(String(200), nullable=False)
    destination = Column(String(200), nullable=False)
    package_description = Column(Text, nullable=False, default=DEFAULT_PACKAGE_DESCRIPTION)
    package_quantity = Column(Integer, nullable=False, default=DEFAULT_PACKAGE_QUANTITY)
    weight = Column(Numeric(10, 3), nullable=False, default=Decimal("0"))
    total_charges = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    status = Column(String(100), nullable=False, default=INITIAL_PACKAGE_STATUS)

    version = Column(Integer, nullable=False)

    events = relationship(
        "TimelineEvent",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="TimelineEvent.id",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_package_created_at", "created_at"),
        Index("idx_package_status", "status"),
    )

    @property
    def status_category(self) -> StatusCategory:
        """Closed-set category of the current status."""
        return classify_status(self.status)

    def __repr__(self) -> str:
        """String representation of package."""
        return f"Package(id={self.id}, tracking_id='{self.tracking_id}', status='{self.status}')"

    def to_dict(self) -> dict:
        """Column values plus the derived status category."""
        result = super().to_dict()
        result["status_category"] = self.status_category.value
        return result
