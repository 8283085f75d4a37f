"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across package, notification and auth
operations.

Usage:
    from shiptrack.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="update_package_status",
        outcome="success",
        tracking_id="ESP-0123456789",
        notification_class="first_processing",
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'shiptrack.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'shiptrack.services.package_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"shiptrack.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter so handlers can emit it
    as structured fields.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_package", "dispatch_status_update")
        outcome: Outcome description (e.g., "success", "not_found", "send_failed")
        level: Log level (default: INFO)
        **context: Additional context fields
            Common fields:
            - tracking_id: Package the operation concerns
            - notification_class: Classification of a status update
            - recipient: Email address for notification records
            - error: Error message if outcome is a failure
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
