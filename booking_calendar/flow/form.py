"""
Booking form fields with per-field validation.

Holds what the visitor has entered so far, validates each value as it is
set, and exports the sanitized payload handed to the booking service.

Usage:
    form = BookingForm()
    ok, msg = form.set_field("client_email", "a@x.com")
    if form.all_required_filled():
        payload = form.to_booking_payload()
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from booking_calendar.schemas.booking_schema import BookingStatus
from booking_calendar.utils import is_date_key, is_time_key, normalize_phone

logger = logging.getLogger(__name__)

# Validation thresholds
MIN_NAME_LENGTH = 2
MIN_PHONE_DIGITS = 7
MAX_PHONE_DIGITS = 15
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

UNKNOWN_SERVICE_ID = "unknown"
UNKNOWN_SERVICE_NAME = "Unknown Service"


class FieldStatus(str, Enum):
    """Lifecycle status of a form field."""

    EMPTY = "empty"
    INVALID = "invalid"
    VALID = "valid"


def _validate_name(value: str) -> bool:
    return len(value.strip()) >= MIN_NAME_LENGTH


def _validate_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value.strip()))


def _validate_phone(value: str) -> bool:
    digits = re.sub(r"[^\d]", "", value)
    return MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS


@dataclass(frozen=True)
class FieldDefinition:
    """Schema for a single form field."""

    name: str
    display_name: str
    required: bool = True
    validator: Optional[Callable[[str], bool]] = None


@dataclass
class FieldValue:
    """Current state of a form field."""

    raw_value: Optional[str] = None
    normalized_value: Optional[str] = None
    status: FieldStatus = FieldStatus.EMPTY
    attempts: int = 0


class BookingForm:
    """The visitor's in-progress booking, one field per form input."""

    FIELD_DEFINITIONS: list[FieldDefinition] = [
        FieldDefinition(name="service_id", display_name="service"),
        FieldDefinition(name="service_name", display_name="service name"),
        FieldDefinition(name="date", display_name="date", validator=is_date_key),
        FieldDefinition(name="time", display_name="time", validator=is_time_key),
        FieldDefinition(name="client_name", display_name="full name", validator=_validate_name),
        FieldDefinition(name="client_email", display_name="email address", validator=_validate_email),
        FieldDefinition(name="client_phone", display_name="phone number", validator=_validate_phone),
        FieldDefinition(name="client_message", display_name="additional notes", required=False),
    ]

    def __init__(self) -> None:
        self.fields: dict[str, FieldValue] = {
            defn.name: FieldValue() for defn in self.FIELD_DEFINITIONS
        }

    def _get_definition(self, name: str) -> FieldDefinition:
        for defn in self.FIELD_DEFINITIONS:
            if defn.name == name:
                return defn
        raise ValueError(f"Unknown field: {name}")

    def _normalize(self, name: str, value: str) -> str:
        """Apply field-specific normalization rules."""
        value = value.strip()
        if name == "client_phone":
            return normalize_phone(value)
        if name == "client_email":
            return value.lower()
        return value

    def set_field(self, name: str, raw_value: Any) -> tuple[bool, str]:
        """
        Set a field value with validation.

        Returns:
            (success, message) - success=True if validation passed.
        """
        defn = self._get_definition(name)
        field_value = self.fields[name]
        raw = "" if raw_value is None else str(raw_value)
        field_value.raw_value = raw
        field_value.attempts += 1

        if not raw.strip():
            if defn.required:
                field_value.status = FieldStatus.INVALID
                field_value.normalized_value = None
                return False, f"Please enter your {defn.display_name}."
            field_value.status = FieldStatus.EMPTY
            field_value.normalized_value = None
            return True, f"No {defn.display_name} given."

        if defn.validator and not defn.validator(raw):
            field_value.status = FieldStatus.INVALID
            field_value.normalized_value = None
            logger.debug("Field '%s' validation failed: '%s'", name, raw)
            return False, f"The {defn.display_name} '{raw}' doesn't look right."

        field_value.normalized_value = self._normalize(name, raw)
        field_value.status = FieldStatus.VALID
        return True, f"Got {defn.display_name}: {field_value.normalized_value}"

    def clear(self, *names: str) -> None:
        """Reset the given fields, or every field when none are named."""
        for name in names or list(self.fields):
            self._get_definition(name)
            self.fields[name] = FieldValue()

    def get_value(self, name: str) -> Optional[str]:
        """Get the normalized value of a field."""
        return self.fields[name].normalized_value

    def get_missing_fields(self, names: Optional[list[str]] = None) -> list[FieldDefinition]:
        """Required fields (optionally restricted to ``names``) without a valid value."""
        return [
            defn
            for defn in self.FIELD_DEFINITIONS
            if defn.required
            and (names is None or defn.name in names)
            and self.fields[defn.name].status != FieldStatus.VALID
        ]

    def all_required_filled(self) -> bool:
        return not self.get_missing_fields()

    def get_summary(self) -> str:
        """Booking summary shown above the contact form."""
        return "\n".join([
            f"Service: {self.get_value('service_name') or 'N/A'}",
            f"Date: {self.get_value('date') or 'N/A'}",
            f"Time: {self.get_value('time') or 'N/A'}",
        ])

    def to_booking_payload(self) -> dict[str, str]:
        """
        Build the sanitized booking payload.

        Every value is coerced to text; a missing service falls back to
        ``unknown`` / ``Unknown Service`` and a missing message to "".
        """
        def text(name: str) -> str:
            return str(self.get_value(name) or "")

        return {
            "serviceId": str(self.get_value("service_id") or UNKNOWN_SERVICE_ID),
            "serviceName": str(self.get_value("service_name") or UNKNOWN_SERVICE_NAME),
            "date": text("date"),
            "time": text("time"),
            "clientName": text("client_name"),
            "clientEmail": text("client_email"),
            "clientPhone": text("client_phone"),
            "clientMessage": text("client_message"),
            "status": BookingStatus.PENDING.value,
        }

    def to_dict(self) -> dict[str, Any]:
        """Export entered field values as a flat dict."""
        return {
            d.name: self.fields[d.name].normalized_value
            for d in self.FIELD_DEFINITIONS
            if self.fields[d.name].normalized_value is not None
        }
