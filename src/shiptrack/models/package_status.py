"""
Status categories for package tracking.

Status labels are free text chosen by staff ("Processing", "In Transit to
Lagos", "Out for delivery"). StatusCategory is the closed set the rest of the
system reasons about; classify_status maps any label onto it while the
label itself is kept for display.
"""

import enum
from typing import Optional, Tuple


class StatusCategory(enum.Enum):
    """
    Package lifecycle category.

    Typical progression:
        CREATED -> PENDING -> PROCESSING -> IN_TRANSIT -> OUT_FOR_DELIVERY -> DELIVERED

    EXCEPTION can occur at any point (held, returned, damaged, ...).
    OTHER covers labels that match no keyword.
    """

    CREATED = "created"
    PENDING = "pending"
    PROCESSING = "processing"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"
    OTHER = "other"


# Checked in order; the first category whose keyword appears in the label wins.
# Exceptions come first so "undelivered" or "delivery failed" are not
# reported as delivered or in transit.
STATUS_KEYWORDS: Tuple[Tuple[StatusCategory, Tuple[str, ...]], ...] = (
    (
        StatusCategory.EXCEPTION,
        ("exception", "failed", "undeliver", "held", "returned", "lost", "damaged", "cancel"),
    ),
    (StatusCategory.DELIVERED, ("delivered",)),
    (StatusCategory.OUT_FOR_DELIVERY, ("out for delivery", "out_for_delivery")),
    (
        StatusCategory.IN_TRANSIT,
        ("transit", "shipping", "shipped", "delivery", "dispatched", "departed", "arrived"),
    ),
    (StatusCategory.PROCESSING, ("processing",)),
    (StatusCategory.PENDING, ("pending", "awaiting")),
    (StatusCategory.CREATED, ("created",)),
)

# Dashboard grouping carried over from the admin panel counters
DASHBOARD_GROUPS = {
    "delivered": (StatusCategory.DELIVERED,),
    "in_transit": (StatusCategory.IN_TRANSIT, StatusCategory.OUT_FOR_DELIVERY),
    "pending": (StatusCategory.CREATED, StatusCategory.PENDING, StatusCategory.PROCESSING),
    "exception": (StatusCategory.EXCEPTION,),
}


def classify_status(label: Optional[str]) -> StatusCategory:
    """
    Map a free-text status label to its StatusCategory.

    Args:
        label: Status label, any case; None or blank counts as pending

    Returns:
        Matching StatusCategory (OTHER when no keyword matches)
    """
    if label is None or not label.strip():
        return StatusCategory.PENDING

    normalized = label.strip().lower()
    for category, keywords in STATUS_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return category
    return StatusCategory.OTHER
