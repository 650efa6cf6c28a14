"""
Booking records and calendar slot marking.

A booking is written to the bookings collection first, then its slot is
marked taken on the calendar day. Neither step is transactional: two
visitors booking the same slot at the same moment both succeed and the
last calendar write wins, and a failure while marking the slot leaves the
booking record in place with no compensation.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from booking_calendar.config import settings
from booking_calendar.realtime.subscription import Subscription
from booking_calendar.schemas.availability_schema import TimeSlot
from booking_calendar.schemas.booking_schema import Booking, BookingRequest, BookingStatus
from booking_calendar.services.availability import AvailabilityService
from booking_calendar.store.base import (
    DocumentStore,
    ErrorCallback,
    StoredDocument,
    StoreError,
)
from booking_calendar.utils import utc_now

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "serviceId",
    "serviceName",
    "date",
    "time",
    "clientName",
    "clientEmail",
    "clientPhone",
]

BookingsCallback = Callable[[list[Booking]], None]


class BookingValidationError(ValueError):
    """Raised before any store call when required booking fields are missing."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Cannot create booking - missing required fields: {', '.join(missing)}."
        )
        self.missing = missing


def _missing_fields(payload: Mapping[str, Any]) -> list[str]:
    return [name for name in REQUIRED_FIELDS if not str(payload.get(name) or "").strip()]


class BookingService:
    """Creates, lists and updates bookings and marks their calendar slots."""

    def __init__(
        self,
        store: DocumentStore,
        availability: AvailabilityService,
        collection: str = settings.store.bookings_collection,
    ) -> None:
        self._store = store
        self._availability = availability
        self._collection = collection

    @staticmethod
    def _to_model(doc: StoredDocument) -> Booking:
        return Booking.model_validate({**doc.data, "id": doc.id})

    # ------------------------------------------------------------------ #
    # Calendar slot
    # ------------------------------------------------------------------ #

    def book_time_slot(self, date: str, time: str, client_identifier: str) -> None:
        """
        Mark a slot taken and bind it to the client.

        Read-modify-write with no isolation: a concurrent call for the same
        slot is not detected and the last writer's binding is kept.
        """
        calendar = self._availability.collection
        existing = self._availability.get_date_availability(date)
        booked = TimeSlot(time=time, is_available=False, booked_by=client_identifier)

        try:
            if existing is None:
                self._store.set(
                    calendar,
                    date,
                    {
                        "date": date,
                        "isAvailable": True,
                        "slots": [booked.to_document()],
                        "updatedAt": utc_now(),
                    },
                )
                logger.info("New calendar date created with booked slot: %s %s", date, time)
                return

            slots = existing.slots or []
            if existing.find_slot(time) is not None:
                updated = [booked if slot.time == time else slot for slot in slots]
            else:
                updated = [*slots, booked]

            self._store.update(
                calendar,
                date,
                {"slots": [slot.to_document() for slot in updated], "updatedAt": utc_now()},
            )
        except StoreError:
            logger.exception("Error booking time slot %s %s", date, time)
            raise
        logger.info("Time slot booked: %s %s for %s", date, time, client_identifier)

    # ------------------------------------------------------------------ #
    # Bookings
    # ------------------------------------------------------------------ #

    def create_booking(self, request: Union[BookingRequest, Mapping[str, Any]]) -> str:
        """
        Write a new pending booking and mark its slot taken.

        Args:
            request: The visitor's booking details, as a model or a mapping
                keyed by document field names.

        Returns:
            The store-assigned booking id.

        Raises:
            BookingValidationError: If a required field is missing or blank.
            StoreError: If either store write fails. A failure while marking
                the slot leaves the booking record behind.
        """
        if isinstance(request, BookingRequest):
            payload = request.model_dump(by_alias=True)
        else:
            payload = dict(request)

        missing = _missing_fields(payload)
        if missing:
            raise BookingValidationError(missing)

        if payload.get("status") not in (None, BookingStatus.PENDING):
            logger.debug("Ignoring requested status %r, new bookings start pending", payload["status"])

        now = utc_now()
        record = {name: str(payload[name]) for name in REQUIRED_FIELDS}
        record.update(
            clientMessage=str(payload.get("clientMessage") or ""),
            status=BookingStatus.PENDING.value,
            createdAt=now,
            updatedAt=now,
        )
        logger.info(
            "Creating booking: %s on %s at %s for %s",
            record["serviceName"], record["date"], record["time"], record["clientEmail"],
        )

        try:
            booking_id = self._store.add(self._collection, record)
        except StoreError:
            logger.exception("Failed to create booking")
            raise

        try:
            self.book_time_slot(record["date"], record["time"], record["clientEmail"])
        except StoreError:
            logger.error(
                "Booking %s saved but slot %s %s was not marked",
                booking_id, record["date"], record["time"],
            )
            raise

        logger.info("Booking created with ID: %s", booking_id)
        return booking_id

    def get_all_bookings(self) -> list[Booking]:
        """Fetch every booking in the store's default order."""
        try:
            docs = self._store.query(self._collection)
        except StoreError:
            logger.exception("Error getting bookings")
            raise
        return [self._to_model(doc) for doc in docs]

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Retrieve a booking by id."""
        try:
            doc = self._store.get(self._collection, booking_id)
        except StoreError:
            logger.exception("Error getting booking %s", booking_id)
            raise
        return self._to_model(doc) if doc is not None else None

    def subscribe_to_bookings(
        self,
        callback: BookingsCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Listen to the whole bookings collection; fires with the full set on every change."""

        def _on_change(docs: list[StoredDocument]) -> None:
            bookings = [self._to_model(doc) for doc in docs]
            callback(bookings)
            logger.info("Bookings updated: %d", len(bookings))

        def _on_error(exc: Exception) -> None:
            logger.error("Bookings subscription error: %s", exc)
            if on_error is not None:
                on_error(exc)

        return self._store.watch(self._collection, _on_change, on_error=_on_error)

    def update_booking_status(self, booking_id: str, status: Union[BookingStatus, str]) -> None:
        """
        Set a booking's status. Any transition is allowed.

        Raises:
            ValueError: If ``status`` is not a known booking status.
            DocumentNotFoundError: If no booking has this id.
        """
        status = BookingStatus(status)
        try:
            self._store.update(
                self._collection,
                booking_id,
                {"status": status.value, "updatedAt": utc_now()},
            )
        except StoreError:
            logger.exception("Error updating booking status for %s", booking_id)
            raise
        logger.info("Booking status updated: %s -> %s", booking_id, status.value)
