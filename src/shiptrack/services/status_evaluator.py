"""
Status transition evaluation.

Decides, for a requested status update, the canonical status to store,
whether this is the package's first-ever move into "processing", and which
notification set to send. Pure logic: callers load the package's current
status and its complete, chronologically ordered history and pass them in.

First-processing rule: the request must be "processing" (any case), the
stored status must not already be "processing", and no earlier timeline
event may have a status label containing "processing" (case-insensitive
substring). Moving to processing, away, and back again therefore only
counts once.
"""

import enum
from dataclasses import dataclass
from typing import Iterable, Optional

from shiptrack.models.package_status import StatusCategory, classify_status
from shiptrack.services.exceptions import ValidationError
from shiptrack.utils.constants import PROCESSING_STATUS


class NotificationClass(enum.Enum):
    """Which email set a package operation triggers."""

    PACKAGE_CREATED = "package_created"  # sender (if any) + receiver, on creation
    FIRST_PROCESSING = "first_processing"  # sender + receiver
    ROUTINE_UPDATE = "routine_update"  # receiver only


@dataclass(frozen=True)
class TransitionEvaluation:
    """Outcome of evaluate_transition."""

    requested_status: str
    canonical_status: str
    category: StatusCategory
    is_first_processing: bool
    notification_class: NotificationClass


def canonical_status(requested_status: Optional[str]) -> str:
    """
    Normalize a requested status label for storage.

    Surrounding whitespace is dropped and the label lower-cased, so
    " Processing " is treated, and stored, as "processing". The timeline
    event keeps the trimmed label in its original casing.

    Raises:
        ValidationError: If the label is missing or blank
    """
    if requested_status is None or not str(requested_status).strip():
        raise ValidationError(["Status is required"])
    return str(requested_status).strip().lower()


def has_prior_processing(history: Iterable) -> bool:
    """True if any event in history has a status label containing "processing"."""
    for timeline_event in history:
        label = getattr(timeline_event, "status", timeline_event) or ""
        if PROCESSING_STATUS in label.lower():
            return True
    return False


def evaluate_transition(
    current_status: Optional[str],
    history: Iterable,
    requested_status: Optional[str],
) -> TransitionEvaluation:
    """
    Classify a requested status update.

    Args:
        current_status: The package's stored status before this update
        history: All prior timeline events in chronological order (objects
            with a ``status`` attribute, or plain status strings)
        requested_status: Status label requested by the caller

    Returns:
        TransitionEvaluation

    Raises:
        ValidationError: If requested_status is empty

    Example:
        >>> evaluate_transition("pending", ["Package Created"], "Processing").notification_class
        <NotificationClass.FIRST_PROCESSING: 'first_processing'>
    """
    status = canonical_status(requested_status)

    is_first_processing = (
        status == PROCESSING_STATUS
        and (current_status or "").strip().lower() != PROCESSING_STATUS
        and not has_prior_processing(history)
    )

    notification_class = (
        NotificationClass.FIRST_PROCESSING
        if is_first_processing
        else NotificationClass.ROUTINE_UPDATE
    )

    return TransitionEvaluation(
        requested_status=str(requested_status).strip(),
        canonical_status=status,
        category=classify_status(status),
        is_first_processing=is_first_processing,
        notification_class=notification_class,
    )
