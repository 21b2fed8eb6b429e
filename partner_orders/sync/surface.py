"""Integration surface consumed by the UI layer and the notification channel."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping

from partner_orders.core.domain.order_state_machine import ASSIGNED
from partner_orders.core.domain.types import OperationKind, Order
from partner_orders.core.events.events import DuplicateNotificationEvent

if TYPE_CHECKING:
    from partner_orders.core.domain.store import LifecycleStore, StoreSnapshot
    from partner_orders.core.events.event_bus import EventBus

LOGGER = logging.getLogger(__name__)


class OrdersSurface:
    """Inbound new-order handler plus read-only projection accessors.

    Accessors return tuples and read-only mappings. Orders themselves are
    frozen models.
    """

    def __init__(
        self,
        store: LifecycleStore,
        event_bus: EventBus,
        *,
        dedupe_inbound: bool = True,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._dedupe_inbound = dedupe_inbound

    def add_new_order(self, order: Order | Mapping[str, Any]) -> Order:
        """Insert a newly assigned order pushed by the notification channel.

        With ``dedupe_inbound`` a redelivered id is never inserted a second
        time. It is merged through ``upsert`` (position kept) only while the
        stored order is still ASSIGNED; an order the client has already moved
        on is left untouched and the stored order is returned.
        """
        if not isinstance(order, Order):
            order = Order.from_payload(dict(order))

        known = self._store.get(order.id) if self._dedupe_inbound else None
        if known is not None:
            LOGGER.info(
                "Redelivered new-order notification",
                extra={"order_id": order.id, "stored_status": known.status},
            )
            self._event_bus.emit(
                DuplicateNotificationEvent(ts_ns=time.time_ns(), order_id=order.id, status=order.status)
            )
            if known.status != ASSIGNED:
                return known
            self._store.upsert(order)
            return order

        self._store.insert_at_front(order)
        return order

    def clear_error(self) -> None:
        self._store.clear_error()

    # ---- Read accessors ----
    @property
    def orders(self) -> tuple[Order, ...]:
        return self._store.orders

    @property
    def active_orders(self) -> tuple[Order, ...]:
        return self._store.active_orders

    @property
    def completed_orders(self) -> tuple[Order, ...]:
        return self._store.completed_orders

    @property
    def pending(self) -> Mapping[OperationKind, bool]:
        return self._store.pending

    @property
    def errors(self) -> Mapping[OperationKind, str | None]:
        return self._store.errors

    @property
    def last_error(self) -> str | None:
        return self._store.last_error

    @property
    def loading(self) -> bool:
        return self._store.loading

    @property
    def last_updated(self) -> datetime | None:
        return self._store.last_updated

    def snapshot(self) -> StoreSnapshot:
        return self._store.snapshot()
