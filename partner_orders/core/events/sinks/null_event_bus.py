from __future__ import annotations

from typing import TYPE_CHECKING

from partner_orders.core.events.event_bus import EventBus

if TYPE_CHECKING:
    from partner_orders.core.events.events import DomainEvent


class NullEventBus(EventBus):
    """EventBus without sinks. Only counts what it is given (used for tests)."""

    def __init__(self) -> None:
        super().__init__(sinks=())
        self.emitted = 0

    def emit(self, event: DomainEvent) -> None:
        self.emitted += 1
