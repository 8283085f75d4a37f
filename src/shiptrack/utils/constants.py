"""
Constants for the ShipTrack application.

This module defines system-wide constants including:
- Application metadata
- Tracking ID format
- Package defaults used when optional fields are omitted
- Notification and session defaults
"""

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "ShipTrack"
APP_VERSION = "0.1.0"
DATABASE_FILENAME = "shiptrack.db"

# ============================================================================
# Tracking IDs
# ============================================================================

DEFAULT_TRACKING_PREFIX = "ESP"
TRACKING_NUMBER_DIGITS = 10

# ============================================================================
# Package Defaults
# ============================================================================

DEFAULT_SENDER_NAME = "Unknown Sender"
DEFAULT_PACKAGE_DESCRIPTION = "Package"
DEFAULT_PACKAGE_QUANTITY = 1
INITIAL_PACKAGE_STATUS = "pending"

CREATED_EVENT_STATUS = "Package Created"
CREATED_EVENT_DESCRIPTION = "Package has been created and is being processed"

PROCESSING_STATUS = "processing"

# ============================================================================
# Company / Notification Defaults
# ============================================================================

DEFAULT_COMPANY_NAME = "Emil Shipping"
DEFAULT_WAREHOUSE_LOCATION = "Emil Shipping Warehouse"
DEFAULT_COMPANY_EMAIL = "noreply@emilshipping.com"
DEFAULT_FRONTEND_URL = "http://localhost:3000"
DEFAULT_RECIPIENT_NAME = "Valued Customer"

RESEND_API_URL = "https://api.resend.com"
DEFAULT_EMAIL_TIMEOUT_SECONDS = 10.0

# ============================================================================
# Admin Sessions
# ============================================================================

DEFAULT_SESSION_TTL_MINUTES = 480

# ============================================================================
# Field Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_EMAIL_LENGTH = 320
MAX_LOCATION_LENGTH = 200
MAX_STATUS_LENGTH = 100

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_EMAIL = "Must be a valid email address"
ERROR_NOT_TEXT = "Must be text"
ERROR_BODY_NOT_OBJECT = "Request body must be a JSON object"
