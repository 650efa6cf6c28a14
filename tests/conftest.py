"""Shared test fixtures and helpers."""

from datetime import date, timedelta
from typing import Any

import pytest

from booking_calendar.config import ScheduleConfig
from booking_calendar.flow.form import BookingForm
from booking_calendar.flow.state_machine import BookingFlowStateMachine
from booking_calendar.flow.submission import BookingSubmissionFlow
from booking_calendar.services.availability import AvailabilityService
from booking_calendar.services.booking import BookingService
from booking_calendar.store.memory import InMemoryDocumentStore

CALENDAR = "calendar"
BOOKINGS = "bookings"

FUTURE_DATE = (date.today() + timedelta(days=7)).isoformat()


@pytest.fixture
def schedule():
    return ScheduleConfig(first_slot_hour=9, last_slot_hour=17, slot_interval_minutes=60)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def availability_service(store, schedule):
    return AvailabilityService(store, collection=CALENDAR, schedule=schedule)


@pytest.fixture
def booking_service(store, availability_service):
    return BookingService(store, availability_service, collection=BOOKINGS)


@pytest.fixture
def flow(booking_service, availability_service):
    return BookingSubmissionFlow(booking_service, availability_service, session_id="FLOW-test")


@pytest.fixture
def state_machine():
    return BookingFlowStateMachine()


@pytest.fixture
def form():
    return BookingForm()


def make_booking_request(**overrides: Any) -> dict[str, Any]:
    """Booking payload keyed by document field names, with sensible defaults."""
    request = {
        "serviceId": "svc1",
        "serviceName": "Cut",
        "date": "2024-06-01",
        "time": "10:00",
        "clientName": "A",
        "clientEmail": "a@x.com",
        "clientPhone": "+1",
        "status": "pending",
    }
    request.update(overrides)
    return request


class Recorder:
    """Callable that records every snapshot it is handed."""

    def __init__(self) -> None:
        self.calls: list[list] = []

    def __call__(self, items: list) -> None:
        self.calls.append(list(items))

    @property
    def last(self) -> list:
        return self.calls[-1]
