"""Lifecycle store: the client-side projection of a partner's assignments.

This module owns the three assignment containers (all known orders, active
orders and completed orders) together with the per-operation pending and
error slots. It is a cache over the order-assignment service, never the
system of record: every mutation comes from a service response or an
inbound notification, and the most recent one always wins.

All mutation primitives are synchronous. Under a single event loop none of
them can be interleaved with another, so no reader ever observes a
half-applied update.
"""

# pylint: disable=too-many-instance-attributes
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Iterable, Mapping

from partner_orders.core.domain.transition_engine import Membership, classify
from partner_orders.core.domain.types import OperationKind, Order, OrderId, same_order_id
from partner_orders.core.events.events import (
    OrderInsertedEvent,
    OrderRemovedEvent,
    OrdersReplacedEvent,
    OrderUpsertedEvent,
)

if TYPE_CHECKING:
    from partner_orders.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _index_of(container: list[Order], order_id: OrderId) -> int:
    for idx, order in enumerate(container):
        if same_order_id(order.id, order_id):
            return idx
    return -1


def _reconcile(container: list[Order], order: Order, *, belongs: bool, at_front: bool) -> None:
    """Bring one projection in line with the order's membership.

    - entering: insert (front or back)
    - staying: replace in place
    - leaving: remove
    """
    idx = _index_of(container, order.id)
    if belongs:
        if idx == -1:
            if at_front:
                container.insert(0, order)
            else:
                container.append(order)
        else:
            container[idx] = order
    elif idx != -1:
        del container[idx]


@dataclass(frozen=True, slots=True)
class StoreSnapshot:
    """Immutable view of the store at one point in time."""

    orders: tuple[Order, ...]
    active_orders: tuple[Order, ...]
    completed_orders: tuple[Order, ...]

    pending: Mapping[OperationKind, bool]
    errors: Mapping[OperationKind, str | None]
    last_error: str | None
    last_updated: datetime | None

    @property
    def loading(self) -> bool:
        return any(self.pending.values())

    def order_ids(self) -> list[OrderId]:
        return [o.id for o in self.orders]

    def active_ids(self) -> list[OrderId]:
        return [o.id for o in self.active_orders]

    def completed_ids(self) -> list[OrderId]:
        return [o.id for o in self.completed_orders]


class LifecycleStore:
    """Owns the order containers and the operation phase slots.

    Invariant (for every order in ``orders``):
    - classify(status) == ACTIVE    <=> order is in ``active_orders``
    - classify(status) == COMPLETED <=> order is in ``completed_orders``
    - no order is in both projections

    The one deliberate exception: ``remove`` never touches
    ``completed_orders``, so delivered history survives a stale remove.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._event_bus = event_bus
        self._clock = clock

        self._orders: list[Order] = []
        self._active: list[Order] = []
        # Most recently completed first.
        self._completed: list[Order] = []

        # Pending is a counter so overlapping operations of one kind keep the
        # flag raised until the last of them settles.
        self._pending: dict[OperationKind, int] = {kind: 0 for kind in OperationKind}
        self._errors: dict[OperationKind, str | None] = {kind: None for kind in OperationKind}
        self._last_error: str | None = None
        self._last_error_kind: OperationKind | None = None
        self._last_updated: datetime | None = None

    # ---- Read accessors ----
    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(self._orders)

    @property
    def active_orders(self) -> tuple[Order, ...]:
        return tuple(self._active)

    @property
    def completed_orders(self) -> tuple[Order, ...]:
        return tuple(self._completed)

    @property
    def pending(self) -> Mapping[OperationKind, bool]:
        return MappingProxyType({kind: count > 0 for kind, count in self._pending.items()})

    @property
    def errors(self) -> Mapping[OperationKind, str | None]:
        return MappingProxyType(dict(self._errors))

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def last_updated(self) -> datetime | None:
        """Time of the last successful bulk replace."""
        return self._last_updated

    @property
    def loading(self) -> bool:
        return any(count > 0 for count in self._pending.values())

    def is_pending(self, kind: OperationKind) -> bool:
        return self._pending[kind] > 0

    def contains(self, order_id: OrderId) -> bool:
        return _index_of(self._orders, order_id) != -1

    def get(self, order_id: OrderId) -> Order | None:
        idx = _index_of(self._orders, order_id)
        return None if idx == -1 else self._orders[idx]

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            orders=self.orders,
            active_orders=self.active_orders,
            completed_orders=self.completed_orders,
            pending=self.pending,
            errors=self.errors,
            last_error=self._last_error,
            last_updated=self._last_updated,
        )

    # ---- Mutation primitives ----
    def replace_all(self, orders: Iterable[Order]) -> None:
        """Replace every container from an authoritative order list.

        Projections are recomputed from scratch in input order, so a
        completed order the service no longer returns disappears too.
        """
        self._orders = list(orders)
        self._active = [o for o in self._orders if classify(o.status) is Membership.ACTIVE]
        self._completed = [o for o in self._orders if classify(o.status) is Membership.COMPLETED]
        self._last_updated = self._clock()

        self._event_bus.emit(
            OrdersReplacedEvent(
                ts_ns=time.time_ns(),
                orders=len(self._orders),
                active=len(self._active),
                completed=len(self._completed),
            )
        )

    def upsert(self, order: Order) -> None:
        """Merge one service-returned order into every container.

        Idempotent: applying the same order twice equals applying it once.
        """
        idx = _index_of(self._orders, order.id)
        appended = idx == -1
        if appended:
            self._orders.append(order)
        else:
            self._orders[idx] = order

        membership = classify(order.status)

        # Leave ACTIVE before entering COMPLETED.
        _reconcile(self._active, order, belongs=membership is Membership.ACTIVE, at_front=False)
        _reconcile(self._completed, order, belongs=membership is Membership.COMPLETED, at_front=True)

        self._event_bus.emit(
            OrderUpsertedEvent(
                ts_ns=time.time_ns(),
                order_id=order.id,
                status=order.status,
                membership=membership,
                appended=appended,
            )
        )

    def remove(self, order_id: OrderId) -> None:
        """Drop an order from ``orders`` and ``active_orders``.

        ``completed_orders`` is left alone.
        """
        before = len(self._orders)
        self._orders = [o for o in self._orders if not same_order_id(o.id, order_id)]
        self._active = [o for o in self._active if not same_order_id(o.id, order_id)]
        found = len(self._orders) != before

        if not found:
            LOGGER.debug("remove() for unknown order", extra={"order_id": order_id})

        self._event_bus.emit(
            OrderRemovedEvent(ts_ns=time.time_ns(), order_id=order_id, found=found)
        )

    def insert_at_front(self, order: Order) -> None:
        """Prepend a newly assigned order.

        No deduplication happens here; callers that may see a known id must
        route it through ``upsert`` instead.
        """
        membership = classify(order.status)

        self._orders.insert(0, order)
        if membership is Membership.ACTIVE:
            self._active.insert(0, order)
        elif membership is Membership.COMPLETED:
            self._completed.insert(0, order)

        self._event_bus.emit(
            OrderInsertedEvent(
                ts_ns=time.time_ns(),
                order_id=order.id,
                status=order.status,
                membership=membership,
            )
        )

    # ---- Operation phases ----
    def begin(self, kind: OperationKind) -> None:
        """Enter the pending phase for one operation of ``kind``.

        Clears the kind's own error slot and ``last_error`` whichever kind
        set it. Other kinds' slots keep their messages.
        """
        self._pending[kind] += 1
        self._errors[kind] = None
        self._last_error = None
        self._last_error_kind = None

    def succeed(self, kind: OperationKind) -> None:
        self._release(kind)
        self._errors[kind] = None
        if self._last_error_kind is kind:
            self._last_error = None
            self._last_error_kind = None

    def fail(self, kind: OperationKind, message: str) -> None:
        """Record a failed operation. Containers are never touched here."""
        self._release(kind)
        self._errors[kind] = message
        self._last_error = message
        self._last_error_kind = kind

    def settle(self, kind: OperationKind) -> None:
        """Leave the pending phase without recording an outcome."""
        self._release(kind)

    def clear_error(self) -> None:
        self._errors = {kind: None for kind in OperationKind}
        self._last_error = None
        self._last_error_kind = None

    def _release(self, kind: OperationKind) -> None:
        self._pending[kind] = max(0, self._pending[kind] - 1)
