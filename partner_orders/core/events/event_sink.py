"""
Event sink interfaces.

A sink receives every domain event the store and the dispatcher emit, in
emission order, synchronously inside the mutation that produced it.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from partner_orders.core.events.events import DomainEvent


class EventSink(Protocol):
    def on_event(self, event: DomainEvent) -> None:
        """Consume a domain event."""


@runtime_checkable
class ClosableEventSink(Protocol):
    """Sink holding a resource (file handle, socket) released by the bus."""

    def on_event(self, event: DomainEvent) -> None: ...

    def close(self) -> None: ...
