"""Shared fixtures for the semantic test suite."""

from __future__ import annotations

from typing import Any

import pytest

from partner_orders.core.domain.store import LifecycleStore
from partner_orders.core.domain.types import Order
from partner_orders.core.events.event_bus import EventBus


class RecordingSink:
    """Keeps every emitted event in order."""

    def __init__(self) -> None:
        self.events: list[Any] = []

    def on_event(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def recorder() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def bus(recorder: RecordingSink) -> EventBus:
    return EventBus(sinks=[recorder])


@pytest.fixture
def store(bus: EventBus) -> LifecycleStore:
    return LifecycleStore(event_bus=bus)


@pytest.fixture
def make_order():
    def _make(order_id: int | str, status: str, **payload: Any) -> Order:
        return Order(id=order_id, status=status, **payload)

    return _make
