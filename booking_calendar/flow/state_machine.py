"""
Finite state machine for the visitor's booking form.

The form moves service -> date/time -> contact details -> submit, with
explicit back steps. A failed submission lands in SLOT_TAKEN, from which
the visitor can pick another time or resubmit.

Usage:
    sm = BookingFlowStateMachine()
    sm.transition(FlowTrigger.SERVICE_SELECTED)
    assert sm.current_state == BookingFlowState.DATE_TIME_SELECTION
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class BookingFlowState(str, Enum):
    """All steps of the booking form."""
    SERVICE_SELECTION = "service_selection"
    DATE_TIME_SELECTION = "date_time_selection"
    CLIENT_DETAILS = "client_details"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    SLOT_TAKEN = "slot_taken"


class FlowTrigger(str, Enum):
    """Events that cause state transitions."""
    SERVICE_SELECTED = "service_selected"
    DATE_TIME_SELECTED = "date_time_selected"
    DETAILS_SUBMITTED = "details_submitted"
    BOOKING_SUCCESS = "booking_success"
    BOOKING_FAILED = "booking_failed"
    BACK = "back"
    CHOOSE_ANOTHER_TIME = "choose_another_time"
    START_OVER = "start_over"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: BookingFlowState
    to_state: BookingFlowState
    trigger: FlowTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: BookingFlowState
    entered_at: datetime
    trigger: Optional[FlowTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class BookingFlowStateMachine:
    """
    Deterministic state machine controlling the booking form.

    Every transition must be explicitly defined; anything else is rejected
    with an error listing the triggers allowed from the current step.
    """

    TRANSITIONS: list[Transition] = [
        # --- Service ---
        Transition(BookingFlowState.SERVICE_SELECTION, BookingFlowState.DATE_TIME_SELECTION,
                   FlowTrigger.SERVICE_SELECTED),

        # --- Date & time ---
        Transition(BookingFlowState.DATE_TIME_SELECTION, BookingFlowState.CLIENT_DETAILS,
                   FlowTrigger.DATE_TIME_SELECTED),
        Transition(BookingFlowState.DATE_TIME_SELECTION, BookingFlowState.SERVICE_SELECTION,
                   FlowTrigger.BACK),

        # --- Contact details ---
        Transition(BookingFlowState.CLIENT_DETAILS, BookingFlowState.SUBMITTING,
                   FlowTrigger.DETAILS_SUBMITTED),
        Transition(BookingFlowState.CLIENT_DETAILS, BookingFlowState.DATE_TIME_SELECTION,
                   FlowTrigger.BACK),

        # --- Submission result ---
        Transition(BookingFlowState.SUBMITTING, BookingFlowState.CONFIRMED,
                   FlowTrigger.BOOKING_SUCCESS),
        Transition(BookingFlowState.SUBMITTING, BookingFlowState.SLOT_TAKEN,
                   FlowTrigger.BOOKING_FAILED),

        # --- Recovery ---
        Transition(BookingFlowState.SLOT_TAKEN, BookingFlowState.DATE_TIME_SELECTION,
                   FlowTrigger.CHOOSE_ANOTHER_TIME),
        Transition(BookingFlowState.SLOT_TAKEN, BookingFlowState.DATE_TIME_SELECTION,
                   FlowTrigger.BACK),
        Transition(BookingFlowState.SLOT_TAKEN, BookingFlowState.SUBMITTING,
                   FlowTrigger.DETAILS_SUBMITTED),

        # --- Done ---
        Transition(BookingFlowState.CONFIRMED, BookingFlowState.SERVICE_SELECTION,
                   FlowTrigger.START_OVER),
    ]

    def __init__(self) -> None:
        self._current_state = BookingFlowState.SERVICE_SELECTION
        self._history: list[StateEntry] = [
            StateEntry(state=BookingFlowState.SERVICE_SELECTION, entered_at=datetime.now(timezone.utc))
        ]
        self._failure_count: int = 0

    @property
    def current_state(self) -> BookingFlowState:
        return self._current_state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def transition(self, trigger: FlowTrigger) -> BookingFlowState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new form state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                if t.to_state == BookingFlowState.SLOT_TAKEN:
                    self._failure_count += 1

                logger.debug(
                    "Flow transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[FlowTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_complete(self) -> bool:
        """Check if the booking has been confirmed."""
        return self._current_state == BookingFlowState.CONFIRMED
