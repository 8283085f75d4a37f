"""
Input validation functions for the ShipTrack application.

This module provides validation and normalization helpers for package
input:
- Required string and length validation
- Email address format validation
- Lenient numeric parsing for weight and charges ("12.5 kg", "$40")
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Tuple

from .constants import (
    DEFAULT_PACKAGE_QUANTITY,
    ERROR_INVALID_EMAIL,
    ERROR_NOT_TEXT,
    ERROR_REQUIRED_FIELD,
)

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_NON_NUMERIC = re.compile(r"[^\d.]")


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: Optional[str], max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Values that are not strings (numbers, lists from JSON input) are
    rejected; None and empty strings pass.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or value == "":
        return True, ""
    if not isinstance(value, str):
        return False, f"{field_name}: {ERROR_NOT_TEXT}"
    if len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_email(value: Optional[str], field_name: str = "Email") -> Tuple[bool, str]:
    """
    Validate email format. Empty values are accepted; pair with
    validate_required_string when the address is mandatory.
    """
    if value is None or value == "":
        return True, ""
    if not isinstance(value, str) or not _EMAIL_PATTERN.match(value.strip()):
        return False, f"{field_name}: {ERROR_INVALID_EMAIL}"
    return True, ""


def parse_numeric_amount(value: Any) -> Decimal:
    """
    Parse a free-text amount into a Decimal.

    Every character other than digits and '.' is dropped before parsing, so
    "12.5 kg" becomes 12.5 and "$1,200" becomes 1200. Missing or unparsable
    input yields 0.

    Args:
        value: Raw input (str, int, float, Decimal or None)

    Returns:
        Parsed non-negative Decimal
    """
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value >= 0 else Decimal("0")

    cleaned = _NON_NUMERIC.sub("", str(value))
    if not cleaned:
        return Decimal("0")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        # e.g. "1.2.3"
        return Decimal("0")


def parse_quantity(value: Any) -> int:
    """Parse a package quantity, defaulting to 1 for missing or invalid input."""
    if value is None or value == "":
        return DEFAULT_PACKAGE_QUANTITY
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PACKAGE_QUANTITY
    return quantity if quantity > 0 else DEFAULT_PACKAGE_QUANTITY


def clean_optional_string(value: Any) -> str:
    """Strip a value to a string, mapping None to ''."""
    if value is None:
        return ""
    return str(value).strip()
