"""
Offline console demo of the visitor booking flow, no Firestore needed.

Runs the real submission flow, booking and availability services against
the in-memory document store, with a live calendar view printing every
change it receives.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario conflict
"""

import argparse
from datetime import date, timedelta

from booking_calendar.config import settings
from booking_calendar.flow import BookingFlowState, BookingSubmissionFlow, FlowResult
from booking_calendar.realtime import SnapshotView
from booking_calendar.schemas import AvailabilityDate
from booking_calendar.services import AvailabilityService, BookingService, get_all_services
from booking_calendar.store import InMemoryDocumentStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def _demo_date() -> str:
    return (date.today() + timedelta(days=3)).isoformat()


class ConsoleSession:
    """Drives one or more visitors through the booking form in the terminal."""

    def __init__(self) -> None:
        self.store = InMemoryDocumentStore()
        self.availability = AvailabilityService(self.store)
        self.bookings = BookingService(self.store, self.availability)
        self.calendar_view: SnapshotView[AvailabilityDate] = SnapshotView("calendar")
        self.calendar_view.on_update(self._print_calendar)

    def new_flow(self, label: str) -> BookingSubmissionFlow:
        return BookingSubmissionFlow(self.bookings, self.availability, session_id=label)

    def show(self, who: str, result: FlowResult) -> None:
        colour = GREEN if result.ok else RED
        print(f"{colour}{BOLD}[{who}]{RESET} {colour}{result.message}{RESET}")
        print(f"{DIM}  >> state: {result.state.value}{RESET}")

    @staticmethod
    def _print_calendar(days: list[AvailabilityDate]) -> None:
        for day in days:
            taken = [f"{s.time} ({s.booked_by})" for s in day.slots or [] if not s.is_available]
            print(f"{YELLOW}  [calendar] {day.date}: booked {', '.join(taken) or 'none'}{RESET}")

    # ------------------------------------------------------------------ #
    # Scripted scenarios
    # ------------------------------------------------------------------ #

    def _book(self, flow: BookingSubmissionFlow, who: str, service: str, day: str,
              time: str, name: str, email: str, phone: str) -> FlowResult:
        for result in (flow.select_service(service), flow.select_date_time(day, time)):
            self.show(who, result)
            if not result.ok:
                return result
        print(f"{DIM}{flow.summary}{RESET}")
        result = flow.submit_details(name, email, phone)
        self.show(who, result)
        return result

    def scenario_booking(self) -> None:
        day = _demo_date()
        flow = self.new_flow("visitor-1")
        self._book(flow, "Visitor", "haircut", day, "10:00", "Aline Uwase", "aline@example.com", "+250 788 123 456")

    def scenario_conflict(self) -> None:
        day = _demo_date()
        first = self.new_flow("visitor-1")
        second = self.new_flow("visitor-2")

        # Both visitors pass the availability check before either submits.
        for flow, who in ((first, "Visitor 1"), (second, "Visitor 2")):
            self.show(who, flow.select_service("braids"))
            self.show(who, flow.select_date_time(day, "14:00"))

        self.show("Visitor 1", first.submit_details("Aline Uwase", "aline@example.com", "+250788123456"))
        self.show("Visitor 2", second.submit_details("Eric Mugisha", "eric@example.com", "+250722000111"))
        print(f"{DIM}  >> both submissions succeeded; the calendar keeps the last writer{RESET}")

        third = self.new_flow("visitor-3")
        self.show("Visitor 3", third.select_service("braids"))
        self.show("Visitor 3", third.select_date_time(day, "14:00"))

    SCENARIOS = {
        "booking": scenario_booking,
        "conflict": scenario_conflict,
    }

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        play = self.SCENARIOS.get(scenario)
        if play is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        self._banner(f"Scenario: {scenario}")
        with self.availability.subscribe_to_calendar(self.calendar_view):
            play(self)

        print(f"\n{BOLD}Bookings:{RESET}")
        for booking in self.bookings.get_all_bookings():
            print(f"  {booking.id}  {booking.date} {booking.time}  {booking.client_email}  {booking.status.value}")
        print(f"{DIM}  Calendar updates received: {self.calendar_view.update_count}{RESET}")

    # ------------------------------------------------------------------ #
    # Interactive mode
    # ------------------------------------------------------------------ #

    def run(self) -> None:
        self._banner("Console Demo (type 'quit' to exit)")
        with self.availability.subscribe_to_calendar(self.calendar_view):
            flow = self.new_flow("visitor")
            while True:
                prompt = self._prompt_for(flow)
                answer = input(f"\n{BLUE}{prompt} {RESET}").strip()
                if answer.lower() in ("quit", "exit", "q"):
                    print(f"\n{DIM}Session ended.{RESET}")
                    return
                if flow.state == BookingFlowState.CONFIRMED:
                    if answer.lower().startswith("y"):
                        self.show("Form", flow.start_over())
                        continue
                    return
                self._handle(flow, answer)

    def _prompt_for(self, flow: BookingSubmissionFlow) -> str:
        state = flow.state
        if state == BookingFlowState.SERVICE_SELECTION:
            names = ", ".join(f"{s['id']} ({s['name']}, {s['price']})" for s in get_all_services())
            return f"Pick a service [{names}]:"
        if state == BookingFlowState.DATE_TIME_SELECTION:
            return "Date and time, e.g. 2025-06-01 10:00 ('back' to go back):"
        if state in (BookingFlowState.CLIENT_DETAILS, BookingFlowState.SLOT_TAKEN):
            return "Name; email; phone; notes ('back' to go back):"
        return "Book another? (y/n):"

    def _handle(self, flow: BookingSubmissionFlow, answer: str) -> None:
        state = flow.state
        if not answer:
            return
        if answer.lower() == "back" and state != BookingFlowState.SERVICE_SELECTION:
            self.show("Form", flow.go_back())
        elif state == BookingFlowState.SERVICE_SELECTION:
            self.show("Form", flow.select_service(answer))
        elif state == BookingFlowState.DATE_TIME_SELECTION:
            parts = answer.split()
            if len(parts) == 1:
                free = [s.time for s in flow.available_slots(parts[0]) if s.is_available]
                print(f"{DIM}  free on {parts[0]}: {', '.join(free) or 'nothing'}{RESET}")
                return
            self.show("Form", flow.select_date_time(parts[0], parts[-1]))
        else:
            name, email, phone, notes = (answer.split(";") + ["", "", "", ""])[:4]
            self.show("Form", flow.submit_details(name, email, phone, notes))

    @staticmethod
    def _banner(title: str) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING CALENDAR - {title}{RESET}")
        print(f"{BOLD}  Business: {settings.business.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
