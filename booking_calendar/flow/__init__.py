from booking_calendar.flow.form import BookingForm, FieldStatus
from booking_calendar.flow.state_machine import (
    BookingFlowState,
    BookingFlowStateMachine,
    FlowTrigger,
    InvalidTransitionError,
)
from booking_calendar.flow.submission import BookingSubmissionFlow, FlowResult

__all__ = [
    "BookingForm",
    "FieldStatus",
    "BookingFlowState",
    "BookingFlowStateMachine",
    "FlowTrigger",
    "InvalidTransitionError",
    "BookingSubmissionFlow",
    "FlowResult",
]
