"""
Synchronous event bus for store and dispatcher events.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from partner_orders.core.events.event_sink import ClosableEventSink, EventSink

if TYPE_CHECKING:
    from partner_orders.core.events.events import DomainEvent

LOGGER = logging.getLogger(__name__)


class EventBus:
    """Dispatches events to registered sinks, in registration order.

    Events are emitted from inside store mutations. A sink that raises is
    logged and skipped so the mutation and the remaining sinks still
    complete. Events emitted after ``close()`` (an operation settling after
    the client shut down) are dropped.
    """

    def __init__(self, sinks: Iterable[EventSink] | None = None) -> None:
        self._sinks: list[EventSink] = list(sinks) if sinks is not None else []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def register(self, sink: EventSink) -> None:
        """Register a new sink."""
        self._sinks.append(sink)

    def emit(self, event: DomainEvent) -> None:
        """Emit an event to all sinks."""
        if self._closed:
            LOGGER.debug("Event emitted after close", extra={"event_type": type(event).__name__})
            return

        for sink in self._sinks:
            try:
                sink.on_event(event)
            except Exception:  # pylint: disable=broad-exception-caught
                LOGGER.exception(
                    "Event sink failed",
                    extra={"sink": type(sink).__name__, "event_type": type(event).__name__},
                )

    def close(self) -> None:
        """Release sinks that hold resources. Idempotent."""
        if self._closed:
            return

        self._closed = True
        for sink in self._sinks:
            if isinstance(sink, ClosableEventSink):
                sink.close()
