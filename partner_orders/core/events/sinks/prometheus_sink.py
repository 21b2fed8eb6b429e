from __future__ import annotations

import logging
from typing import Any

from prometheus_client import CollectorRegistry, Counter

from partner_orders.core.events.events import (
    DuplicateNotificationEvent,
    OperationSettledEvent,
    OrderInsertedEvent,
    OrderRemovedEvent,
    OrdersReplacedEvent,
    OrderUpsertedEvent,
    TransitionAnomalyEvent,
)

LOGGER = logging.getLogger(__name__)

_MUTATIONS: dict[type, str] = {
    OrdersReplacedEvent: "replace_all",
    OrderUpsertedEvent: "upsert",
    OrderRemovedEvent: "remove",
    OrderInsertedEvent: "insert_at_front",
}


class PrometheusEventSink:
    """Counts domain events into Prometheus counters.

    Counters live on a private CollectorRegistry so that several clients in
    one process (or in one test session) never collide. Expose the registry
    with prometheus_client's own exposition helpers, e.g.
    ``generate_latest(sink.registry)``.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        self._operations = Counter(
            "partner_orders_operations_total",
            "Settled order-assignment service operations.",
            labelnames=["kind", "outcome"],
            registry=self.registry,
        )
        self._mutations = Counter(
            "partner_orders_store_mutations_total",
            "Applied lifecycle store mutation primitives.",
            labelnames=["primitive"],
            registry=self.registry,
        )
        self._anomalies = Counter(
            "partner_orders_transition_anomalies_total",
            "Requested status changes outside the assignment state machine.",
            registry=self.registry,
        )
        self._duplicates = Counter(
            "partner_orders_duplicate_notifications_total",
            "Inbound new-order notifications for an already known assignment.",
            registry=self.registry,
        )

    def on_event(self, event: Any) -> None:
        if isinstance(event, OperationSettledEvent):
            outcome = "success" if event.ok else "failure"
            self._operations.labels(kind=event.kind.value, outcome=outcome).inc()
            return

        if isinstance(event, TransitionAnomalyEvent):
            self._anomalies.inc()
            return

        if isinstance(event, DuplicateNotificationEvent):
            self._duplicates.inc()
            return

        primitive = _MUTATIONS.get(type(event))
        if primitive is None:
            LOGGER.debug("Unmetered domain event", extra={"event_type": type(event).__name__})
            return
        self._mutations.labels(primitive=primitive).inc()
