"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_availability_schema(self):
        from booking_calendar.schemas import AvailabilityDate, TimeSlot
        slot = TimeSlot(time="10:00")
        assert slot.is_available is True
        assert AvailabilityDate(date="2024-06-01").slots is None

    def test_import_booking_schema(self):
        from booking_calendar.schemas import Booking, BookingRequest, BookingStatus
        assert BookingStatus.PENDING == "pending"
        assert issubclass(Booking, BookingRequest)


class TestStoreImports:
    def test_import_store_package(self):
        from booking_calendar.store import (
            DocumentNotFoundError, DocumentStore, InMemoryDocumentStore, StoreError,
        )
        assert issubclass(DocumentNotFoundError, StoreError)
        assert isinstance(InMemoryDocumentStore(), DocumentStore)

    def test_import_firestore_adapter(self):
        from booking_calendar.store.firestore import FirestoreDocumentStore
        assert FirestoreDocumentStore is not None


class TestServiceImports:
    def test_import_services_package(self):
        from booking_calendar.services import (
            AvailabilityService, BookingService, get_all_services,
        )
        assert AvailabilityService is not None
        assert BookingService is not None
        assert len(get_all_services()) > 0

    def test_import_realtime_package(self):
        from booking_calendar.realtime import SnapshotView, Subscription
        assert SnapshotView("x").items == []
        assert Subscription("x", lambda: None).active


class TestFlowImports:
    def test_import_flow_package(self):
        from booking_calendar.flow import BookingFlowState, BookingFlowStateMachine
        assert BookingFlowStateMachine().current_state == BookingFlowState.SERVICE_SELECTION


class TestEntryPointImports:
    def test_import_config(self):
        from booking_calendar.config import settings
        assert settings.store.calendar_collection != settings.store.bookings_collection

    def test_import_admin_cli(self):
        import main
        assert callable(main.main)

    def test_import_console_demo(self):
        import console_demo
        assert "booking" in console_demo.ConsoleSession.SCENARIOS
