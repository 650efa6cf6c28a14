from booking_calendar.services.availability import (
    AvailabilityService,
    generate_default_slots,
    is_date_available,
    is_past,
)
from booking_calendar.services.booking import BookingService, BookingValidationError
from booking_calendar.services.catalog import get_all_services, get_service_details

__all__ = [
    "AvailabilityService",
    "BookingService",
    "BookingValidationError",
    "generate_default_slots",
    "get_all_services",
    "get_service_details",
    "is_date_available",
    "is_past",
]
