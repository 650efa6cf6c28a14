"""Shared utilities used across the booking calendar."""

import re
from datetime import datetime, timezone

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("0788 123 456")
        '0788123456'
        >>> normalize_phone("+250 (788) 123-456")
        '+250788123456'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_date_key(value: str) -> bool:
    """Check that a value is a YYYY-MM-DD calendar-day key."""
    try:
        datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError:
        return False
    return len(value.strip()) == 10


def is_time_key(value: str) -> bool:
    """Check that a value is an HH:MM slot time."""
    try:
        datetime.strptime(value.strip(), TIME_FORMAT)
    except ValueError:
        return False
    return len(value.strip()) == 5


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
