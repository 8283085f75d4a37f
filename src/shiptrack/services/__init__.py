"""Services package - Business logic layer for ShipTrack.

Architecture:
- Services: Stateless functions organized by domain, plus small classes for
  collaborators with state (notification dispatcher, admin session store)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via the ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- package_service: Package creation, tracking lookups, status updates, deletion
- status_evaluator: First-processing detection and notification classification
- timeline_service: Ordered tracking history
- notification_service: Email dispatch per notification class
- auth_service: Admin sign-in and sessions

Infrastructure:
- database: Session management and database utilities
- exceptions: Custom exception classes for service layer errors
- logging_utils: Structured operation logging
- tracking_id: Tracking ID generation
- email_templates, email_client: Message rendering and delivery
"""

from . import (
    database,
    exceptions,
    package_service,
    status_evaluator,
    timeline_service,
)
