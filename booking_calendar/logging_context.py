"""Per-visitor session tagging for log output.

The session id lives in a context variable. ``SessionIdFilter`` is attached
to the output handlers (not to individual loggers), so every record emitted
while a visitor's flow step runs carries it, including records from the
booking and availability services the step calls into.

Usage:
    install_session_filter()          # done by load_config()

    with session_context("FLOW-abc123"):
        logger.info("Submitting booking")
    # 2024-06-01 10:00:00 [booking_calendar.flow.submission] [FLOW-abc123] INFO: Submitting booking
"""

import functools
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

NO_SESSION = "-"
LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag records with ``session_id`` for the duration of the block."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


def bind_session(method):
    """Run a method inside ``session_context(self.session_id)``."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with session_context(self.session_id):
            return method(self, *args, **kwargs)

    return wrapper


class SessionIdFilter(logging.Filter):
    """Adds ``session_id`` to records that do not carry one yet."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def install_session_filter(logger: Optional[logging.Logger] = None) -> None:
    """Attach a SessionIdFilter to every handler of ``logger`` (root by default)."""
    target = logger or logging.getLogger()
    for handler in target.handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
