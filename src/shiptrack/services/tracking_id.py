"""
Tracking ID generation.

IDs look like "ESP-0123456789": a configurable prefix, a dash and ten
digits drawn uniformly from 0000000000-9999999999. The generator does not
check uniqueness; the unique constraint on packages.tracking_id does, and a
collision surfaces from create_package as TrackingIdCollision.
"""

import random
import re
from typing import Optional

from shiptrack.utils.constants import DEFAULT_TRACKING_PREFIX, TRACKING_NUMBER_DIGITS

_system_random = random.SystemRandom()


def generate_tracking_id(
    prefix: str = DEFAULT_TRACKING_PREFIX, rng: Optional[random.Random] = None
) -> str:
    """
    Generate a tracking ID.

    Args:
        prefix: ID prefix (default "ESP")
        rng: Random source; defaults to the OS CSPRNG

    Returns:
        Tracking ID such as "ESP-0123456789"
    """
    rng = rng or _system_random
    number = rng.randrange(10**TRACKING_NUMBER_DIGITS)
    return f"{prefix}-{number:0{TRACKING_NUMBER_DIGITS}d}"


def is_valid_tracking_id(value: str, prefix: str = DEFAULT_TRACKING_PREFIX) -> bool:
    """Check that value has the PREFIX-dddddddddd shape."""
    pattern = rf"{re.escape(prefix)}-\d{{{TRACKING_NUMBER_DIGITS}}}"
    return re.fullmatch(pattern, value or "") is not None
