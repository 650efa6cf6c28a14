"""
Administrative entry point for the booking calendar.

Talks to the configured document store (Firestore by default, see
STORE_BACKEND) to list bookings, change their status, open or block days
and watch the calendar and bookings live.

Usage:
    python main.py bookings
    python main.py status <booking_id> confirmed
    python main.py block 2025-06-01 2025-06-02
    python main.py open 2025-06-03
    python main.py day 2025-06-01
    python main.py watch --start 2025-06-01 --end 2025-06-30
"""

import argparse
import logging
import sys
import threading
from datetime import date, timedelta

from booking_calendar.config import settings
from booking_calendar.schemas import AvailabilityDate, Booking, BookingStatus
from booking_calendar.services import AvailabilityService, BookingService
from booking_calendar.store import StoreError, create_store

logger = logging.getLogger(__name__)


def _build_services() -> tuple[AvailabilityService, BookingService]:
    """Build one store client for the process and the services that share it."""
    store = create_store(settings.store)
    availability = AvailabilityService(
        store,
        collection=settings.store.calendar_collection,
        schedule=settings.schedule,
    )
    bookings = BookingService(store, availability, collection=settings.store.bookings_collection)
    return availability, bookings


def _print_bookings(bookings: list[Booking]) -> None:
    if not bookings:
        print("No bookings.")
        return
    for b in bookings:
        print(f"{b.id}  {b.date} {b.time}  {b.status.value:<9}  {b.service_name}  "
              f"{b.client_name} <{b.client_email}> {b.client_phone}")


def _print_calendar(days: list[AvailabilityDate]) -> None:
    for day in days:
        taken = [s.time for s in day.slots or [] if not s.is_available]
        flag = "open" if day.is_available else "blocked"
        print(f"{day.date}  {flag:<7}  booked: {', '.join(taken) or '-'}")


def _watch(availability: AvailabilityService, bookings: BookingService, start: str, end: str) -> None:
    stop = threading.Event()
    calendar_sub = availability.subscribe_to_availability(start, end, _print_calendar)
    bookings_sub = bookings.subscribe_to_bookings(_print_bookings)
    logger.info("Watching %s..%s, Ctrl+C to stop", start, end)
    try:
        while not stop.wait(1.0):
            pass
    except KeyboardInterrupt:
        pass
    finally:
        calendar_sub.unsubscribe()
        bookings_sub.unsubscribe()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=f"{settings.business.name} booking admin")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("bookings", help="List every booking")

    status = commands.add_parser("status", help="Change a booking's status")
    status.add_argument("booking_id")
    status.add_argument("status", choices=[s.value for s in BookingStatus])

    block = commands.add_parser("block", help="Mark whole days unavailable")
    block.add_argument("dates", nargs="+")

    reopen = commands.add_parser("open", help="Mark whole days available")
    reopen.add_argument("dates", nargs="+")

    day = commands.add_parser("day", help="Show the slots of one day")
    day.add_argument("date")

    today = date.today()
    watch = commands.add_parser("watch", help="Print calendar and booking changes live")
    watch.add_argument("--start", default=today.isoformat())
    watch.add_argument("--end", default=(today + timedelta(days=30)).isoformat())

    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = _parse_args(argv)
    availability, bookings = _build_services()

    try:
        if args.command == "bookings":
            _print_bookings(bookings.get_all_bookings())
        elif args.command == "status":
            bookings.update_booking_status(args.booking_id, args.status)
            print(f"Booking {args.booking_id} is now {args.status}.")
        elif args.command in ("block", "open"):
            availability.set_batch_availability(args.dates, args.command == "open")
            print(f"{len(args.dates)} day(s) marked {'open' if args.command == 'open' else 'blocked'}.")
        elif args.command == "day":
            for slot in availability.get_day_slots(args.date):
                state = "free" if slot.is_available else f"taken ({slot.booked_by or 'closed'})"
                print(f"{slot.time}  {state}")
        elif args.command == "watch":
            _watch(availability, bookings, args.start, args.end)
    except (StoreError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
