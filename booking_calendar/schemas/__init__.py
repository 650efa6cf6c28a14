from booking_calendar.schemas.availability_schema import AvailabilityDate, TimeSlot
from booking_calendar.schemas.booking_schema import Booking, BookingRequest, BookingStatus

__all__ = [
    "AvailabilityDate",
    "TimeSlot",
    "Booking",
    "BookingRequest",
    "BookingStatus",
]
