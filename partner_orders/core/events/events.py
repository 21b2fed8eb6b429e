"""
Domain event models.

These events represent immutable facts observed while the projections are
kept in sync. They are consumed by loggers, recorders, and metrics sinks.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from partner_orders.core.domain.transition_engine import Membership
from partner_orders.core.domain.types import OperationKind, OrderId


@dataclass(slots=True)
class OrdersReplacedEvent:
    ts_ns: int

    orders: int
    active: int
    completed: int


@dataclass(slots=True)
class OrderUpsertedEvent:
    ts_ns: int
    order_id: OrderId

    status: str
    membership: Membership
    # False when an existing entry was replaced in place.
    appended: bool


@dataclass(slots=True)
class OrderRemovedEvent:
    ts_ns: int
    order_id: OrderId

    found: bool


@dataclass(slots=True)
class OrderInsertedEvent:
    ts_ns: int
    order_id: OrderId

    status: str
    membership: Membership


@dataclass(slots=True)
class OperationSettledEvent:
    ts_ns: int
    kind: OperationKind

    ok: bool
    message: str | None


@dataclass(slots=True)
class TransitionAnomalyEvent:
    ts_ns: int
    order_id: OrderId

    prev_status: str | None
    next_status: str


@dataclass(slots=True)
class DuplicateNotificationEvent:
    ts_ns: int
    order_id: OrderId

    status: str


DomainEvent = Union[
    OrdersReplacedEvent,
    OrderUpsertedEvent,
    OrderRemovedEvent,
    OrderInsertedEvent,
    OperationSettledEvent,
    TransitionAnomalyEvent,
    DuplicateNotificationEvent,
]
