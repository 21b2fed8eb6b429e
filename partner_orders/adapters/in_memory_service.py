"""In-process order-assignment service.

Holds authoritative assignment records and enforces the assignment state
machine the way the remote service does. Used by the CLI demo mode and by
tests that need a real service behind the dispatcher.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from partner_orders.core.domain.errors import InvalidTransition, NotFound, TransportFailure
from partner_orders.core.domain.order_state_machine import (
    ACCEPTED,
    ASSIGNED,
    REJECTED,
    is_valid_transition,
)
from partner_orders.core.domain.types import Order, OrderId, RejectAck

LOGGER = logging.getLogger(__name__)


class InMemoryAssignmentService:
    """Authoritative assignment records keyed by assignment id.

    ``latency_s`` adds an ``asyncio.sleep`` before every call so overlapping
    operations actually interleave. ``fail_next`` makes the next call raise
    the given error instead of doing anything.
    """

    def __init__(self, *, latency_s: float = 0.0) -> None:
        self._records: dict[OrderId, dict[str, Any]] = {}
        self._partner_of: dict[OrderId, OrderId] = {}
        self._latency_s = latency_s
        self._fail_next: list[Exception] = []

        self.calls: list[tuple[str, OrderId]] = []

    # ---- Setup ----
    def assign(self, partner_id: OrderId, order: Order | dict[str, Any]) -> Order:
        """Create an ASSIGNED record for a partner and return it."""
        if isinstance(order, Order):
            payload = order.to_payload()
        else:
            payload = dict(order)
        payload["status"] = ASSIGNED

        record = Order.from_payload(payload)
        self._records[record.id] = record.to_payload()
        self._partner_of[record.id] = partner_id
        return record

    def fail_next(self, error: Exception) -> None:
        self._fail_next.append(error)

    def record(self, assignment_id: OrderId) -> Order:
        return Order.from_payload(self._records[assignment_id])

    # ---- OrderAssignmentService ----
    async def list_orders(self, partner_id: OrderId, status_filter: str | None = None) -> list[Order]:
        await self._enter("list", partner_id)
        orders = [
            Order.from_payload(rec)
            for oid, rec in self._records.items()
            if self._partner_of[oid] == partner_id and rec["status"] != REJECTED
        ]
        if status_filter:
            orders = [o for o in orders if o.status == status_filter]
        return orders

    async def accept(self, assignment_id: OrderId, partner_id: OrderId) -> Order:
        await self._enter("accept", assignment_id)
        return self._move(assignment_id, partner_id, ACCEPTED)

    async def reject(self, assignment_id: OrderId, partner_id: OrderId, reason: str) -> RejectAck:
        await self._enter("reject", assignment_id)
        self._move(assignment_id, partner_id, REJECTED, rejectionReason=reason)
        return RejectAck(assignment_id=assignment_id, reason=reason)

    async def update_status(self, assignment_id: OrderId, partner_id: OrderId, new_status: str) -> Order:
        await self._enter("update_status", assignment_id)
        return self._move(assignment_id, partner_id, new_status)

    # ---- Internals ----
    async def _enter(self, operation: str, key: OrderId) -> None:
        self.calls.append((operation, key))
        if self._latency_s > 0:
            await asyncio.sleep(self._latency_s)
        if self._fail_next:
            raise self._fail_next.pop(0)

    def _move(self, assignment_id: OrderId, partner_id: OrderId, new_status: str, **fields: Any) -> Order:
        record = self._records.get(assignment_id)
        if record is None:
            raise NotFound(f"Order assignment not found with ID: {assignment_id}", status_code=404)

        if self._partner_of[assignment_id] != partner_id:
            raise TransportFailure("Partner not authorized for this assignment", status_code=403)

        current = record["status"]
        if not is_valid_transition(current, new_status):
            raise InvalidTransition(
                f"Invalid status transition from {current} to {new_status}",
                status_code=400,
            )

        record.update(fields)
        record["status"] = new_status
        LOGGER.debug(
            "Assignment moved",
            extra={"order_id": assignment_id, "prev_status": current, "next_status": new_status},
        )
        return Order.from_payload(record)
