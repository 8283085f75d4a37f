"""Service layer exception classes for ShipTrack.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── NotFoundError
    │   └── PackageNotFound
    ├── DatabaseError
    │   ├── TrackingIdCollision
    │   └── ConcurrentUpdateError
    ├── NotificationError
    └── AuthenticationError
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class ValidationError(ServiceError):
    """Raised when input validation fails.

    Args:
        errors: List of human-readable validation messages

    Example:
        >>> raise ValidationError(["Status is required"])
        ValidationError: Validation failed: Status is required
    """

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class NotFoundError(ServiceError):
    """Raised when a requested record does not exist."""

    pass


class PackageNotFound(NotFoundError):
    """Raised when no package matches a tracking ID.

    Args:
        tracking_id: The tracking ID that was not found

    Example:
        >>> raise PackageNotFound("ESP-0000000000")
        PackageNotFound: Package 'ESP-0000000000' not found
    """

    def __init__(self, tracking_id: str):
        self.tracking_id = tracking_id
        super().__init__(f"Package '{tracking_id}' not found")


class DatabaseError(ServiceError):
    """Raised when a backing-store operation fails."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class TrackingIdCollision(DatabaseError):
    """Raised when a generated tracking ID already exists.

    The generator does not check uniqueness; the unique constraint on
    packages.tracking_id does. Callers may retry creation.
    """

    def __init__(self, tracking_id: str, original_error: Optional[Exception] = None):
        self.tracking_id = tracking_id
        super().__init__(f"Tracking ID '{tracking_id}' already exists", original_error)


class ConcurrentUpdateError(DatabaseError):
    """Raised when another writer updated the package first.

    The whole update, including its timeline event, has been rolled back.
    """

    def __init__(self, tracking_id: str, original_error: Optional[Exception] = None):
        self.tracking_id = tracking_id
        super().__init__(
            f"Package '{tracking_id}' was modified concurrently; update not applied",
            original_error,
        )


class NotificationError(ServiceError):
    """Raised by email clients when a message cannot be delivered.

    Never fatal: the notification dispatcher catches it and reports it in
    the operation result.
    """

    def __init__(self, recipient: str, message: str):
        self.recipient = recipient
        super().__init__(f"Failed to send email to {recipient}: {message}")


class AuthenticationError(ServiceError):
    """Raised when admin sign-in fails or a session is missing, expired or revoked."""

    pass
