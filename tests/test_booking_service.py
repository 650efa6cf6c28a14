"""Tests for the booking service: slot marking, creation, listing and status updates."""

from unittest.mock import patch

import pytest

from booking_calendar.schemas.availability_schema import TimeSlot
from booking_calendar.schemas.booking_schema import BookingRequest, BookingStatus
from booking_calendar.services.booking import BookingValidationError
from booking_calendar.store.base import DocumentNotFoundError, StoreError
from tests.conftest import Recorder, make_booking_request


class TestBookTimeSlot:
    def test_absent_date_creates_one_document_with_one_slot(self, booking_service, store):
        booking_service.book_time_slot("2024-06-01", "10:00", "a@x.com")

        docs = store.query("calendar")
        assert len(docs) == 1
        assert docs[0].id == "2024-06-01"
        assert docs[0].data["isAvailable"] is True
        assert docs[0].data["slots"] == [
            {"time": "10:00", "isAvailable": False, "bookedBy": "a@x.com"}
        ]

    def test_existing_slot_is_replaced(self, booking_service, availability_service):
        availability_service.set_date_availability(
            "2024-06-01", True, [TimeSlot(time="09:00"), TimeSlot(time="10:00")]
        )

        booking_service.book_time_slot("2024-06-01", "10:00", "a@x.com")

        day = availability_service.get_date_availability("2024-06-01")
        assert day.slots == [
            TimeSlot(time="09:00", is_available=True),
            TimeSlot(time="10:00", is_available=False, booked_by="a@x.com"),
        ]

    def test_missing_slot_is_appended(self, booking_service, availability_service):
        availability_service.set_date_availability("2024-06-01", True, [TimeSlot(time="09:00")])

        booking_service.book_time_slot("2024-06-01", "15:00", "a@x.com")

        times = [s.time for s in availability_service.get_date_availability("2024-06-01").slots]
        assert times == ["09:00", "15:00"]

    def test_day_without_slots_gets_first_slot(self, booking_service, availability_service):
        availability_service.set_date_availability("2024-06-01", True)
        booking_service.book_time_slot("2024-06-01", "10:00", "a@x.com")
        assert availability_service.get_date_availability("2024-06-01").find_slot("10:00").booked_by == "a@x.com"

    def test_second_booking_of_same_slot_overwrites_first(self, booking_service, availability_service):
        """No conflict detection: the last writer's binding is what the calendar keeps."""
        booking_service.book_time_slot("2024-06-01", "10:00", "first@x.com")
        booking_service.book_time_slot("2024-06-01", "10:00", "second@x.com")

        day = availability_service.get_date_availability("2024-06-01")
        assert day.slots == [TimeSlot(time="10:00", is_available=False, booked_by="second@x.com")]

    def test_store_error_is_reraised_unchanged(self, booking_service, store):
        error = StoreError("deadline exceeded")
        with patch.object(store, "set", side_effect=error):
            with pytest.raises(StoreError) as exc_info:
                booking_service.book_time_slot("2024-06-01", "10:00", "a@x.com")
        assert exc_info.value is error


class TestCreateBooking:
    def test_example_scenario(self, booking_service, availability_service):
        booking_id = booking_service.create_booking(make_booking_request())

        booking = booking_service.get_booking(booking_id)
        assert booking.status == BookingStatus.PENDING
        assert booking.service_id == "svc1"
        assert booking.client_email == "a@x.com"

        day = availability_service.get_date_availability("2024-06-01")
        assert day.find_slot("10:00") == TimeSlot(time="10:00", is_available=False, booked_by="a@x.com")

    def test_returns_non_empty_id_and_marks_slot(self, booking_service, availability_service):
        booking_id = booking_service.create_booking(make_booking_request(date="2024-06-02", time="14:00"))
        assert booking_id
        assert not availability_service.is_slot_available("2024-06-02", "14:00")

    def test_accepts_request_model(self, booking_service):
        request = BookingRequest.model_validate(make_booking_request())
        assert booking_service.create_booking(request)

    def test_status_is_forced_to_pending(self, booking_service):
        booking_id = booking_service.create_booking(make_booking_request(status="confirmed"))
        assert booking_service.get_booking(booking_id).status == BookingStatus.PENDING

    def test_timestamps_set_on_creation(self, booking_service):
        booking = booking_service.get_booking(booking_service.create_booking(make_booking_request()))
        assert booking.created_at is not None
        assert booking.created_at == booking.updated_at

    def test_message_defaults_to_empty_string(self, booking_service, store):
        booking_id = booking_service.create_booking(make_booking_request())
        assert store.get("bookings", booking_id).data["clientMessage"] == ""

    def test_fields_are_stored_as_text(self, booking_service, store):
        booking_id = booking_service.create_booking(make_booking_request(serviceId=42))
        assert store.get("bookings", booking_id).data["serviceId"] == "42"

    @pytest.mark.parametrize("field", ["serviceId", "date", "time", "clientEmail", "clientPhone"])
    def test_missing_required_field_rejected_before_store_call(self, booking_service, store, field):
        with patch.object(store, "add") as mock_add:
            with pytest.raises(BookingValidationError) as exc_info:
                booking_service.create_booking(make_booking_request(**{field: "  "}))
        assert exc_info.value.missing == [field]
        mock_add.assert_not_called()

    def test_slot_failure_leaves_orphaned_booking(self, booking_service, store, availability_service):
        error = StoreError("permission denied")
        with patch.object(store, "set", side_effect=error):
            with pytest.raises(StoreError) as exc_info:
                booking_service.create_booking(make_booking_request())

        assert exc_info.value is error
        bookings = booking_service.get_all_bookings()
        assert len(bookings) == 1
        assert bookings[0].status == BookingStatus.PENDING
        assert availability_service.get_date_availability("2024-06-01") is None

    def test_two_clients_booking_same_slot_both_succeed(self, booking_service, availability_service):
        first = booking_service.create_booking(make_booking_request(clientEmail="a@x.com"))
        second = booking_service.create_booking(make_booking_request(clientEmail="b@x.com"))

        assert first != second
        assert len(booking_service.get_all_bookings()) == 2
        slot = availability_service.get_date_availability("2024-06-01").find_slot("10:00")
        assert slot.booked_by == "b@x.com"


class TestListing:
    def test_get_all_bookings(self, booking_service):
        ids = {
            booking_service.create_booking(make_booking_request(time="10:00")),
            booking_service.create_booking(make_booking_request(time="11:00")),
        }
        assert {b.id for b in booking_service.get_all_bookings()} == ids

    def test_get_all_bookings_empty(self, booking_service):
        assert booking_service.get_all_bookings() == []

    def test_get_unknown_booking(self, booking_service):
        assert booking_service.get_booking("missing") is None

    def test_subscribe_to_bookings(self, booking_service):
        recorder = Recorder()
        subscription = booking_service.subscribe_to_bookings(recorder)

        booking_id = booking_service.create_booking(make_booking_request())
        booking_service.update_booking_status(booking_id, BookingStatus.CONFIRMED)
        subscription.unsubscribe()
        booking_service.update_booking_status(booking_id, BookingStatus.CANCELLED)

        assert recorder.calls[0] == []
        assert [b.id for b in recorder.calls[1]] == [booking_id]
        assert recorder.last[0].status == BookingStatus.CONFIRMED
        assert len(recorder.calls) == 3


class TestUpdateBookingStatus:
    def test_updates_status_and_timestamp(self, booking_service):
        booking_id = booking_service.create_booking(make_booking_request())
        created = booking_service.get_booking(booking_id)

        booking_service.update_booking_status(booking_id, "confirmed")

        updated = booking_service.get_booking(booking_id)
        assert updated.status == BookingStatus.CONFIRMED
        assert updated.updated_at >= created.updated_at
        assert updated.created_at == created.created_at

    def test_any_transition_is_permitted(self, booking_service):
        booking_id = booking_service.create_booking(make_booking_request())
        booking_service.update_booking_status(booking_id, BookingStatus.CANCELLED)
        booking_service.update_booking_status(booking_id, BookingStatus.CONFIRMED)
        assert booking_service.get_booking(booking_id).status == BookingStatus.CONFIRMED

    def test_unknown_id_fails(self, booking_service):
        with pytest.raises(DocumentNotFoundError):
            booking_service.update_booking_status("does-not-exist", BookingStatus.CONFIRMED)

    def test_unknown_status_rejected(self, booking_service):
        booking_id = booking_service.create_booking(make_booking_request())
        with pytest.raises(ValueError):
            booking_service.update_booking_status(booking_id, "archived")
        assert booking_service.get_booking(booking_id).status == BookingStatus.PENDING
