"""
Package Service - Business logic for tracked packages.

This service provides:
- Package creation with a generated tracking ID and initial timeline event
- Public tracking lookups (package plus ordered timeline)
- Admin listing, status summary and deletion
- Status/location updates with first-processing classification and
  notification dispatch

Transactions:
- Each operation runs in a single session_scope() transaction.
- update_package_status reads the package and its full history, appends
  the new event and updates the package in one transaction. Package.version
  is an optimistic lock, so a concurrent update that committed first makes
  this one fail with ConcurrentUpdateError and roll back entirely.
- Notifications are sent only after the transaction commits; their failure
  is reported in email_status and never raised.
"""

import logging
from dataclasses import dataclass
from random import Random
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from shiptrack.models import Package, TimelineEvent
from shiptrack.models.package_status import DASHBOARD_GROUPS, StatusCategory, classify_status
from shiptrack.services import timeline_service
from shiptrack.services.database import session_scope
from shiptrack.services.email_client import build_email_client
from shiptrack.services.exceptions import (
    ConcurrentUpdateError,
    DatabaseError,
    PackageNotFound,
    TrackingIdCollision,
    ValidationError,
)
from shiptrack.services.logging_utils import get_service_logger, log_operation
from shiptrack.services.notification_service import NotificationDispatcher
from shiptrack.services.status_evaluator import (
    NotificationClass,
    canonical_status,
    evaluate_transition,
)
from shiptrack.services.tracking_id import generate_tracking_id
from shiptrack.utils.config import get_config
from shiptrack.utils.constants import (
    CREATED_EVENT_DESCRIPTION,
    CREATED_EVENT_STATUS,
    DEFAULT_PACKAGE_DESCRIPTION,
    DEFAULT_SENDER_NAME,
    INITIAL_PACKAGE_STATUS,
    MAX_EMAIL_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_STATUS_LENGTH,
)
from shiptrack.utils.datetime_utils import utc_now
from shiptrack.utils.validators import (
    clean_optional_string,
    parse_numeric_amount,
    parse_quantity,
    validate_email,
    validate_required_string,
    validate_string_length,
)

logger = get_service_logger(__name__)


# ============================================================================
# Result Types
# ============================================================================


@dataclass
class CreatePackageResult:
    """Result of create_package."""

    tracking_id: str
    package: Dict[str, Any]
    email_status: Dict[str, Any]


@dataclass
class StatusUpdateResult:
    """Result of update_package_status."""

    tracking_id: str
    status: str
    notification_class: NotificationClass
    is_first_processing: bool
    event: Dict[str, Any]
    email_status: Dict[str, Any]


def _default_dispatcher() -> NotificationDispatcher:
    config = get_config()
    return NotificationDispatcher.from_config(config, build_email_client(config))


# ============================================================================
# Validation
# ============================================================================


def _validate_package_data(data: Dict[str, Any]) -> None:
    """
    Validate create_package input.

    Raises:
        ValidationError: With every problem found, not just the first
    """
    errors = []

    for field_name, label in (
        ("receiver_name", "Receiver name"),
        ("receiver_email", "Receiver email"),
        ("origin", "Origin"),
        ("destination", "Destination"),
    ):
        is_valid, error = validate_required_string(data.get(field_name), label)
        if not is_valid:
            errors.append(error)

    for field_name, label in (("sender_email", "Sender email"), ("receiver_email", "Receiver email")):
        is_valid, error = validate_email(data.get(field_name), label)
        if not is_valid:
            errors.append(error)

    for field_name, label, max_length in (
        ("sender_name", "Sender name", MAX_NAME_LENGTH),
        ("receiver_name", "Receiver name", MAX_NAME_LENGTH),
        ("sender_email", "Sender email", MAX_EMAIL_LENGTH),
        ("receiver_email", "Receiver email", MAX_EMAIL_LENGTH),
        ("origin", "Origin", MAX_LOCATION_LENGTH),
        ("destination", "Destination", MAX_LOCATION_LENGTH),
    ):
        is_valid, error = validate_string_length(data.get(field_name), max_length, label)
        if not is_valid:
            errors.append(error)

    if errors:
        raise ValidationError(errors)


# ============================================================================
# Package Operations
# ============================================================================


def create_package(
    data: Dict[str, Any],
    dispatcher: Optional[NotificationDispatcher] = None,
    rng: Optional[Random] = None,
) -> CreatePackageResult:
    """
    Create a new package with its initial "Package Created" event.

    Args:
        data: Dictionary with package fields. Required: receiver_name,
            receiver_email, origin, destination. Optional: sender_name,
            sender_email, sender_address, sender_phone, receiver_address,
            receiver_phone, package_description, package_quantity, weight,
            total_charges.
        dispatcher: Notification dispatcher (defaults to one built from config)
        rng: Random source for the tracking ID (tests)

    Returns:
        CreatePackageResult

    Raises:
        ValidationError: If required fields are missing or malformed
        TrackingIdCollision: If the generated tracking ID already exists
        DatabaseError: If database operation fails
    """
    _validate_package_data(data)

    config = get_config()
    tracking_id = generate_tracking_id(config.tracking_prefix, rng)

    try:
        with session_scope() as session:
            package = Package(
                tracking_id=tracking_id,
                sender_name=clean_optional_string(data.get("sender_name")) or DEFAULT_SENDER_NAME,
                sender_email=clean_optional_string(data.get("sender_email")),
                sender_address=clean_optional_string(data.get("sender_address")),
                sender_phone=clean_optional_string(data.get("sender_phone")),
                receiver_name=clean_optional_string(data.get("receiver_name")),
                receiver_email=clean_optional_string(data.get("receiver_email")),
                receiver_address=clean_optional_string(data.get("receiver_address")),
                receiver_phone=clean_optional_string(data.get("receiver_phone")),
                origin=clean_optional_string(data.get("origin")),
                destination=clean_optional_string(data.get("destination")),
                package_description=clean_optional_string(data.get("package_description"))
                or DEFAULT_PACKAGE_DESCRIPTION,
                package_quantity=parse_quantity(data.get("package_quantity")),
                weight=parse_numeric_amount(data.get("weight")),
                total_charges=parse_numeric_amount(data.get("total_charges")),
                status=INITIAL_PACKAGE_STATUS,
            )
            session.add(package)
            session.flush()

            session.add(
                TimelineEvent(
                    package_id=package.id,
                    status=CREATED_EVENT_STATUS,
                    location=config.warehouse_location,
                    description=CREATED_EVENT_DESCRIPTION,
                    timestamp=utc_now(),
                )
            )
            session.flush()

            package_data = package.to_dict()

    except IntegrityError as e:
        if package_exists(tracking_id):
            log_operation(
                logger,
                operation="create_package",
                outcome="tracking_id_collision",
                level=logging.WARNING,
                tracking_id=tracking_id,
            )
            raise TrackingIdCollision(tracking_id, e)
        raise DatabaseError(f"Failed to create package: {str(e)}", e)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to create package: {str(e)}", e)

    log_operation(logger, operation="create_package", outcome="success", tracking_id=tracking_id)

    dispatcher = dispatcher or _default_dispatcher()
    email_result = dispatcher.dispatch_package_created(package_data)

    return CreatePackageResult(
        tracking_id=tracking_id,
        package=package_data,
        email_status=email_result.to_dict(),
    )


def package_exists(tracking_id: str) -> bool:
    """
    Check whether a package with this tracking ID exists.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            return (
                session.query(Package.id).filter(Package.tracking_id == tracking_id).first()
                is not None
            )
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to look up package: {str(e)}", e)


def get_tracking_info(tracking_id: str) -> Dict[str, Any]:
    """
    Get the public tracking view of a package.

    Args:
        tracking_id: Package tracking ID

    Returns:
        Package dict with a "timeline" list, oldest event first

    Raises:
        PackageNotFound: If no package has this tracking ID
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            package = session.query(Package).filter(Package.tracking_id == tracking_id).first()
            if not package:
                raise PackageNotFound(tracking_id)

            events = timeline_service.get_ordered_events(session, package.id)
            result = package.to_dict()
            result["timeline"] = timeline_service.build_timeline(events)
            return result

    except PackageNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get tracking info: {str(e)}", e)


def list_packages() -> List[Dict[str, Any]]:
    """
    Get all packages, newest first.

    Returns:
        List of package dicts

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            packages = (
                session.query(Package)
                .order_by(Package.created_at.desc(), Package.id.desc())
                .all()
            )
            return [p.to_dict() for p in packages]

    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to list packages: {str(e)}", e)


def update_package_status(
    tracking_id: str,
    status: str,
    location: Optional[str] = None,
    description: Optional[str] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> StatusUpdateResult:
    """
    Record a status/location update for a package.

    Appends one timeline event, stores the lower-cased status on the
    package, classifies the transition and sends the matching
    notifications.

    Args:
        tracking_id: Package tracking ID
        status: New status label (any case)
        location: Location label (optional)
        description: Free-text note (optional)
        dispatcher: Notification dispatcher (defaults to one built from config)

    Returns:
        StatusUpdateResult

    Raises:
        ValidationError: If status is empty, or status or location is too long
        PackageNotFound: If no package has this tracking ID
        ConcurrentUpdateError: If another update to this package committed first
        DatabaseError: If database operation fails
    """
    canonical_status(status)
    errors = []
    for value, max_length, label in (
        (str(status).strip(), MAX_STATUS_LENGTH, "Status"),
        (clean_optional_string(location), MAX_LOCATION_LENGTH, "Location"),
    ):
        is_valid, error = validate_string_length(value, max_length, label)
        if not is_valid:
            errors.append(error)
    if errors:
        raise ValidationError(errors)

    try:
        with session_scope() as session:
            package = session.query(Package).filter(Package.tracking_id == tracking_id).first()
            if not package:
                log_operation(
                    logger,
                    operation="update_package_status",
                    outcome="not_found",
                    level=logging.WARNING,
                    tracking_id=tracking_id,
                )
                raise PackageNotFound(tracking_id)

            # History must be read before the new event is added
            history = timeline_service.get_ordered_events(session, package.id)
            evaluation = evaluate_transition(package.status, history, status)

            timeline_event = TimelineEvent(
                package_id=package.id,
                status=evaluation.requested_status,
                location=clean_optional_string(location),
                description=clean_optional_string(description),
                timestamp=timeline_service.next_event_timestamp(history),
            )
            session.add(timeline_event)

            package.status = evaluation.canonical_status
            package.updated_at = utc_now()
            session.flush()

            package_data = package.to_dict()
            event_data = timeline_service.serialize_event(timeline_event)

    except PackageNotFound:
        raise
    except StaleDataError as e:
        log_operation(
            logger,
            operation="update_package_status",
            outcome="concurrent_update",
            level=logging.WARNING,
            tracking_id=tracking_id,
        )
        raise ConcurrentUpdateError(tracking_id, e)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update package status: {str(e)}", e)

    log_operation(
        logger,
        operation="update_package_status",
        outcome="success",
        tracking_id=tracking_id,
        new_status=evaluation.canonical_status,
        notification_class=evaluation.notification_class.value,
    )

    dispatcher = dispatcher or _default_dispatcher()
    email_result = dispatcher.dispatch_status_update(
        evaluation.notification_class, package_data, evaluation.requested_status
    )

    return StatusUpdateResult(
        tracking_id=tracking_id,
        status=evaluation.canonical_status,
        notification_class=evaluation.notification_class,
        is_first_processing=evaluation.is_first_processing,
        event=event_data,
        email_status=email_result.to_dict(),
    )


def delete_package(tracking_id: str) -> bool:
    """
    Delete a package and its timeline.

    Deleting an unknown tracking ID is a no-op.

    Args:
        tracking_id: Package tracking ID

    Returns:
        True if a package was deleted, False if none existed

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            package = session.query(Package).filter(Package.tracking_id == tracking_id).first()
            if not package:
                log_operation(
                    logger,
                    operation="delete_package",
                    outcome="already_absent",
                    tracking_id=tracking_id,
                )
                return False

            session.delete(package)

    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete package: {str(e)}", e)

    log_operation(logger, operation="delete_package", outcome="success", tracking_id=tracking_id)
    return True


def get_status_summary() -> Dict[str, Any]:
    """
    Count packages per status category for the admin dashboard.

    Returns:
        Dict with total, delivered, in_transit, pending, exception and a
        per-category breakdown under "by_category"

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            rows = session.query(Package.status, func.count(Package.id)).group_by(Package.status).all()
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to summarize packages: {str(e)}", e)

    by_category = {category.value: 0 for category in StatusCategory}
    total = 0
    for status, count in rows:
        by_category[classify_status(status).value] += count
        total += count

    summary: Dict[str, Any] = {"total": total}
    for group, categories in DASHBOARD_GROUPS.items():
        summary[group] = sum(by_category[c.value] for c in categories)
    summary["by_category"] = by_category
    return summary
