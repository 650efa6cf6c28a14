"""
Visitor-facing booking submission flow.

Drives the booking form through its steps and calls the booking service
on submit. Every step returns a FlowResult carrying the notice a UI would
show. Any error raised while creating the booking is reported as "slot may
be taken"; the flow cannot tell a real conflict from any other failure.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from booking_calendar.flow.form import BookingForm
from booking_calendar.flow.state_machine import (
    BookingFlowState,
    BookingFlowStateMachine,
    FlowTrigger,
)
from booking_calendar.logging_context import bind_session
from booking_calendar.schemas.availability_schema import TimeSlot
from booking_calendar.services.availability import AvailabilityService, is_past
from booking_calendar.services.booking import BookingService
from booking_calendar.services.catalog import get_service_details
from booking_calendar.store.base import StoreError

logger = logging.getLogger(__name__)

MISSING_INFO_MESSAGE = "Missing booking information"
SUCCESS_MESSAGE = "Booking created successfully!"
SLOT_TAKEN_MESSAGE = "Failed to create booking. Slot may be taken."
BUSY_MESSAGE = "Your booking is already being submitted."


@dataclass
class FlowResult:
    """Outcome of one flow step."""

    ok: bool
    state: BookingFlowState
    message: str
    booking_id: Optional[str] = None


class BookingSubmissionFlow:
    """One visitor's pass through service, date/time, details and submit."""

    def __init__(
        self,
        booking_service: BookingService,
        availability_service: AvailabilityService,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or f"FLOW-{uuid.uuid4().hex[:8]}"
        self.state_machine = BookingFlowStateMachine()
        self.form = BookingForm()
        self.booking_id: Optional[str] = None
        self._bookings = booking_service
        self._availability = availability_service
        self._is_submitting = False

    @property
    def state(self) -> BookingFlowState:
        return self.state_machine.current_state

    @property
    def is_submitting(self) -> bool:
        """True while the booking is being written; further submits are refused."""
        return self._is_submitting

    @property
    def summary(self) -> str:
        return self.form.get_summary()

    def _result(self, ok: bool, message: str, booking_id: Optional[str] = None) -> FlowResult:
        return FlowResult(ok=ok, state=self.state, message=message, booking_id=booking_id)

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    @bind_session
    def select_service(self, service_id: str) -> FlowResult:
        details = get_service_details(service_id)
        if details is None:
            return self._result(False, f"Unknown service '{service_id}'.")

        self.state_machine.transition(FlowTrigger.SERVICE_SELECTED)
        self.form.set_field("service_id", details["id"])
        self.form.set_field("service_name", details["name"])
        logger.info("Service selected: %s", details["id"])
        return self._result(True, f"Selected {details['name']}.")

    @bind_session
    def available_slots(self, date: str) -> list[TimeSlot]:
        """Slots to offer on the date/time step."""
        return self._availability.get_day_slots(date)

    @bind_session
    def select_date_time(self, date: str, time: str) -> FlowResult:
        """
        Record the date and time after checking the calendar.

        A rejected choice leaves neither field set. The check only reflects
        what the calendar said at this moment; the slot can still be taken
        before the booking is submitted.
        """
        for name, value in (("date", date), ("time", time)):
            ok, message = self.form.set_field(name, value)
            if not ok:
                return self._reject_date_time(message)

        date, time = self.form.get_value("date"), self.form.get_value("time")
        if is_past(date):
            return self._reject_date_time("Please choose a date that is not in the past.")

        try:
            free = self._availability.is_slot_available(date, time)
        except StoreError:
            return self._reject_date_time("Could not check availability. Please try again.")
        if not free:
            logger.info("Slot %s %s shown as taken", date, time)
            return self._reject_date_time(f"{date} at {time} is already booked. Choose another time.")

        self.state_machine.transition(FlowTrigger.DATE_TIME_SELECTED)
        return self._result(True, f"{date} at {time} selected.")

    def _reject_date_time(self, message: str) -> FlowResult:
        self.form.clear("date", "time")
        return self._result(False, message)

    @bind_session
    def submit_details(self, name: str, email: str, phone: str, message: str = "") -> FlowResult:
        """Validate contact details and create the booking."""
        if self._is_submitting:
            return self._result(False, BUSY_MESSAGE)

        if (
            FlowTrigger.DETAILS_SUBMITTED not in self.state_machine.get_valid_triggers()
            or self.form.get_missing_fields(["service_id", "date", "time"])
        ):
            logger.warning("Submit attempted without service, date or time")
            return self._result(False, MISSING_INFO_MESSAGE)

        errors = []
        for field_name, value in (
            ("client_name", name),
            ("client_email", email),
            ("client_phone", phone),
            ("client_message", message),
        ):
            ok, notice = self.form.set_field(field_name, value)
            if not ok:
                errors.append(notice)
        if errors:
            return self._result(False, " ".join(errors))

        self.state_machine.transition(FlowTrigger.DETAILS_SUBMITTED)
        self._is_submitting = True
        try:
            booking_id = self._bookings.create_booking(self.form.to_booking_payload())
        except Exception:
            logger.exception("Error creating booking")
            self.state_machine.transition(FlowTrigger.BOOKING_FAILED)
            return self._result(False, SLOT_TAKEN_MESSAGE)
        finally:
            self._is_submitting = False

        self.booking_id = booking_id
        self.state_machine.transition(FlowTrigger.BOOKING_SUCCESS)
        logger.info("Booking %s confirmed for visitor", booking_id)
        return self._result(True, SUCCESS_MESSAGE, booking_id)

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #

    @bind_session
    def go_back(self) -> FlowResult:
        self.state_machine.transition(FlowTrigger.BACK)
        return self._result(True, f"Back to {self.state.value.replace('_', ' ')}.")

    @bind_session
    def choose_another_time(self) -> FlowResult:
        self.state_machine.transition(FlowTrigger.CHOOSE_ANOTHER_TIME)
        self.form.clear("date", "time")
        return self._result(True, "Choose another time.")

    @bind_session
    def start_over(self) -> FlowResult:
        self.state_machine.transition(FlowTrigger.START_OVER)
        self.form.clear()
        self.booking_id = None
        return self._result(True, "Start a new booking.")
