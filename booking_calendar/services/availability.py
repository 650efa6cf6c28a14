"""
Calendar availability backed by the document store.

One document per calendar day lives in the calendar collection, keyed by
its YYYY-MM-DD date. A day with no document has no explicit record and is
treated as available. Store errors are logged and re-raised unchanged.
"""

import logging
from datetime import date as date_type
from typing import Callable, Optional, Sequence

from booking_calendar.config import ScheduleConfig, settings
from booking_calendar.realtime.subscription import Subscription
from booking_calendar.schemas.availability_schema import AvailabilityDate, TimeSlot
from booking_calendar.store.base import (
    DocumentStore,
    ErrorCallback,
    FieldFilter,
    StoredDocument,
    StoreError,
)
from booking_calendar.utils import DATE_FORMAT, is_date_key, utc_now

logger = logging.getLogger(__name__)

DATE_FIELD = "date"

AvailabilityCallback = Callable[[list[AvailabilityDate]], None]


def generate_default_slots(schedule: ScheduleConfig = settings.schedule) -> list[TimeSlot]:
    """Return one open slot per interval from the first to the last slot hour."""
    slots = []
    minute = schedule.first_slot_hour * 60
    last = schedule.last_slot_hour * 60
    while minute <= last:
        slots.append(TimeSlot(time=f"{minute // 60:02d}:{minute % 60:02d}", is_available=True))
        minute += schedule.slot_interval_minutes
    return slots


def is_date_available(availability: Optional[AvailabilityDate]) -> bool:
    """A day is bookable unless it is switched off or every stored slot is taken."""
    if availability is None:
        return True
    if not availability.is_available:
        return False
    if not availability.slots:
        return True
    return any(slot.is_available for slot in availability.slots)


def is_past(day: str, today: Optional[date_type] = None) -> bool:
    """Check whether a YYYY-MM-DD day lies before today."""
    today = today or date_type.today()
    return day < today.strftime(DATE_FORMAT)


def _require_date_key(value: str) -> None:
    if not is_date_key(value):
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")


class AvailabilityService:
    """Reads and writes calendar day documents."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str = settings.store.calendar_collection,
        schedule: ScheduleConfig = settings.schedule,
    ) -> None:
        self._store = store
        self._collection = collection
        self._schedule = schedule

    @property
    def collection(self) -> str:
        return self._collection

    @staticmethod
    def _to_model(doc: StoredDocument) -> AvailabilityDate:
        return AvailabilityDate.model_validate({DATE_FIELD: doc.id, **doc.data})

    @staticmethod
    def _range_filters(start: str, end: str) -> list[FieldFilter]:
        return [FieldFilter(DATE_FIELD, ">=", start), FieldFilter(DATE_FIELD, "<=", end)]

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get_date_availability(self, date: str) -> Optional[AvailabilityDate]:
        """Fetch a day's document. None means no explicit record (available)."""
        try:
            doc = self._store.get(self._collection, date)
        except StoreError:
            logger.exception("Error getting date availability for %s", date)
            raise
        return self._to_model(doc) if doc is not None else None

    def get_availability_range(self, start: str, end: str) -> list[AvailabilityDate]:
        """Fetch every stored day between start and end inclusive, in date order."""
        try:
            docs = self._store.query(
                self._collection, self._range_filters(start, end), order_by=DATE_FIELD
            )
        except StoreError:
            logger.exception("Error getting availability range %s..%s", start, end)
            raise
        return [self._to_model(doc) for doc in docs]

    def is_slot_available(self, date: str, time: str) -> bool:
        """
        Decide whether a (date, time) slot is free according to the stored calendar.

        This is a plain read; nothing stops another client from booking the
        slot between this check and a later write.
        """
        availability = self.get_date_availability(date)
        if availability is None:
            return True
        if not availability.is_available:
            return False
        slot = availability.find_slot(time)
        return slot.is_available if slot is not None else True

    def get_day_slots(self, date: str) -> list[TimeSlot]:
        """Working-hours slots for a day merged with whatever the calendar has stored."""
        availability = self.get_date_availability(date)
        merged = {slot.time: slot for slot in generate_default_slots(self._schedule)}
        if availability is not None:
            stored: dict[str, TimeSlot] = {}
            for slot in availability.slots or []:
                stored.setdefault(slot.time, slot)
            merged.update(stored)

        slots = sorted(merged.values(), key=lambda s: s.time)
        if availability is not None and not availability.is_available:
            slots = [s.model_copy(update={"is_available": False}) for s in slots]
        return slots

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def set_date_availability(
        self,
        date: str,
        is_available: bool,
        slots: Optional[Sequence[TimeSlot]] = None,
    ) -> None:
        """
        Upsert a day's availability with merge semantics.

        Fields not passed are left untouched: with ``slots=None`` the stored
        slots survive. ``updatedAt`` is stamped on every write.
        """
        _require_date_key(date)
        data = {DATE_FIELD: date, "isAvailable": is_available, "updatedAt": utc_now()}
        if slots is not None:
            data["slots"] = [slot.to_document() for slot in slots]
        try:
            self._store.set(self._collection, date, data, merge=True)
        except StoreError:
            logger.exception("Error setting date availability for %s", date)
            raise
        logger.info("Date availability set: %s (available=%s)", date, is_available)

    def set_batch_availability(self, dates: Sequence[str], is_available: bool) -> None:
        """
        Apply set_date_availability to each date in turn.

        Not atomic: the first failure is raised and dates written before it
        stay written.
        """
        for date in dates:
            try:
                self.set_date_availability(date, is_available)
            except StoreError:
                logger.error("Batch availability stopped at %s", date)
                raise
        logger.info("Batch availability set for %d dates (available=%s)", len(dates), is_available)

    # ------------------------------------------------------------------ #
    # Live listeners
    # ------------------------------------------------------------------ #

    def _watch(
        self,
        callback: AvailabilityCallback,
        filters: list[FieldFilter],
        on_error: Optional[ErrorCallback],
    ) -> Subscription:
        def _on_change(docs: list[StoredDocument]) -> None:
            availability = [self._to_model(doc) for doc in docs]
            callback(availability)
            logger.info("Calendar updated: %d dates", len(availability))

        def _on_error(exc: Exception) -> None:
            logger.error("Calendar subscription error: %s", exc)
            if on_error is not None:
                on_error(exc)

        return self._store.watch(
            self._collection,
            _on_change,
            filters=filters,
            order_by=DATE_FIELD,
            on_error=_on_error,
        )

    def subscribe_to_availability(
        self,
        start: str,
        end: str,
        callback: AvailabilityCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Listen to every day between start and end inclusive.

        ``callback`` receives the full current set on every change. The
        returned handle must be invoked to stop updates.
        """
        return self._watch(callback, self._range_filters(start, end), on_error)

    def subscribe_to_calendar(
        self,
        callback: AvailabilityCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Listen to the whole calendar collection."""
        return self._watch(callback, [], on_error)
