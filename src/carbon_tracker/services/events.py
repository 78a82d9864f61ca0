"""Observability hook for accounting events."""

import logging
from dataclasses import dataclass
from typing import Protocol

ENTRY_ACCEPTED = "entry.accepted"
ENTRY_REJECTED = "entry.rejected"
LEDGER_INCREMENT_FAILED = "ledger.increment_failed"
STATS_READ_FAILED = "stats.read_failed"
TARGET_MISCONFIGURED = "target.misconfigured"

_FAILURE_EVENTS = frozenset(
    {ENTRY_REJECTED, LEDGER_INCREMENT_FAILED, STATS_READ_FAILED, TARGET_MISCONFIGURED}
)

_logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Receiver for accounting events."""

    def emit(self, event: str, payload: dict[str, object]) -> None:
        """Handle a single event."""


@dataclass
class LoggingEventSink(EventSink):
    """Event sink that writes events to the application logger."""

    logger: logging.Logger = _logger

    def emit(self, event: str, payload: dict[str, object]) -> None:
        """Log the event, at warning level for failures."""
        level = logging.WARNING if event in _FAILURE_EVENTS else logging.INFO
        self.logger.log(level, "%s %s", event, payload, extra={"event": event})


@dataclass
class NullEventSink(EventSink):
    """Event sink that discards everything."""

    def emit(self, event: str, payload: dict[str, object]) -> None:
        return None


def safe_emit(sink: EventSink, event: str, payload: dict[str, object]) -> None:
    """Emit an event without letting sink failures reach the caller."""
    try:
        sink.emit(event, payload)
    except Exception:
        _logger.exception("Event sink failed", extra={"event": event})
