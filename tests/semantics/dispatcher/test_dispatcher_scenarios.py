"""
Semantic test: dispatcher operations against a scripted service.

Invariants:
- accept / update_status success upserts the returned order.
- reject success removes the id from orders and active_orders only.
- Any failed operation leaves every container equal to its pre-call state
  and sets last_error to the failure message.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from partner_orders.core.domain.errors import (
    InvalidTransition,
    NotFound,
    TransportFailure,
)
from partner_orders.core.domain.types import Failure, OperationKind, Order, RejectAck, Success
from partner_orders.core.events.events import OperationSettledEvent, TransitionAnomalyEvent
from partner_orders.sync.dispatcher import DEFAULT_REJECTION_REASON, Dispatcher

PARTNER = 7


class ScriptedService:
    """Returns canned responses, or raises the queued error."""

    def __init__(self) -> None:
        self.listed: list[Order] = []
        self.errors: list[Exception] = []
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _maybe_raise(self) -> None:
        if self.errors:
            raise self.errors.pop(0)

    async def list_orders(self, partner_id, status_filter=None):
        self.calls.append(("list", (partner_id, status_filter)))
        self._maybe_raise()
        return list(self.listed)

    async def accept(self, assignment_id, partner_id):
        self.calls.append(("accept", (assignment_id, partner_id)))
        self._maybe_raise()
        return Order(id=assignment_id, status="ACCEPTED")

    async def reject(self, assignment_id, partner_id, reason):
        self.calls.append(("reject", (assignment_id, partner_id, reason)))
        self._maybe_raise()
        return RejectAck(assignment_id=assignment_id, reason=reason)

    async def update_status(self, assignment_id, partner_id, new_status):
        self.calls.append(("update_status", (assignment_id, partner_id, new_status)))
        self._maybe_raise()
        return Order(id=assignment_id, status=new_status)


@pytest.fixture
def service() -> ScriptedService:
    svc = ScriptedService()
    svc.listed = [
        Order(id=1, status="ASSIGNED"),
        Order(id=2, status="DELIVERED"),
        Order(id=3, status="REJECTED"),
    ]
    return svc


@pytest.fixture
def dispatcher(service, store, bus) -> Dispatcher:
    disp = Dispatcher(service=service, store=store, event_bus=bus)
    asyncio.run(disp.fetch_orders(PARTNER))
    return disp


def test_fetch_replaces_all(dispatcher, store, service) -> None:
    assert service.calls[0] == ("list", (PARTNER, None))
    assert [o.id for o in store.orders] == [1, 2, 3]
    assert [o.id for o in store.active_orders] == [1]
    assert [o.id for o in store.completed_orders] == [2]
    assert store.loading is False


def test_accept_upserts_returned_order(dispatcher, store) -> None:
    result = asyncio.run(dispatcher.accept_order(1, PARTNER))

    assert isinstance(result, Success)
    assert result.kind is OperationKind.ACCEPT
    assert [(o.id, o.status) for o in store.active_orders] == [(1, "ACCEPTED")]
    assert [o.id for o in store.orders] == [1, 2, 3]
    assert [o.id for o in store.completed_orders] == [2]


def test_reject_removes_from_orders_and_active(dispatcher, store, service) -> None:
    result = asyncio.run(dispatcher.reject_order(1, PARTNER, "Too far"))

    assert result.ok
    assert service.calls[-1] == ("reject", (1, PARTNER, "Too far"))
    assert [o.id for o in store.orders] == [2, 3]
    assert store.active_orders == ()
    assert [o.id for o in store.completed_orders] == [2]


def test_reject_without_reason_sends_default(dispatcher, service) -> None:
    asyncio.run(dispatcher.reject_order(1, PARTNER, "   "))

    assert service.calls[-1] == ("reject", (1, PARTNER, DEFAULT_REJECTION_REASON))


def test_delivery_prepends_to_completed(dispatcher, store) -> None:
    for status in ("ACCEPTED", "PICKED_UP", "OUT_FOR_DELIVERY"):
        asyncio.run(dispatcher.update_order_status(1, PARTNER, status))
    assert [o.id for o in store.active_orders] == [1]

    asyncio.run(dispatcher.update_order_status(1, PARTNER, "DELIVERED"))

    assert store.active_orders == ()
    assert [o.id for o in store.completed_orders] == [1, 2]


@pytest.mark.parametrize(
    ("kind", "error"),
    [
        (OperationKind.FETCH, TransportFailure("Failed to fetch orders")),
        (OperationKind.ACCEPT, NotFound("Order assignment not found with ID: 1")),
        (OperationKind.REJECT, TransportFailure("Service unavailable")),
        (OperationKind.UPDATE_STATUS, InvalidTransition("Invalid status transition")),
    ],
)
def test_failure_leaves_containers_untouched(dispatcher, store, service, recorder, kind, error) -> None:
    before = store.snapshot()
    service.errors.append(error)

    operations = {
        OperationKind.FETCH: lambda: dispatcher.fetch_orders(PARTNER),
        OperationKind.ACCEPT: lambda: dispatcher.accept_order(1, PARTNER),
        OperationKind.REJECT: lambda: dispatcher.reject_order(1, PARTNER, "x"),
        OperationKind.UPDATE_STATUS: lambda: dispatcher.update_order_status(1, PARTNER, "PICKED_UP"),
    }
    result = asyncio.run(operations[kind]())

    assert isinstance(result, Failure)
    assert result.kind is kind
    assert result.error_type == type(error).__name__

    after = store.snapshot()
    assert after.orders == before.orders
    assert after.active_orders == before.active_orders
    assert after.completed_orders == before.completed_orders
    assert after.last_error == error.message
    assert after.errors[kind] == error.message
    assert after.pending[kind] is False

    settled = recorder.of_type(OperationSettledEvent)[-1]
    assert settled.ok is False
    assert settled.message == error.message


def test_retry_after_failure_succeeds(dispatcher, store, service) -> None:
    service.errors.append(TransportFailure("timeout"))
    asyncio.run(dispatcher.accept_order(1, PARTNER))
    assert store.last_error == "timeout"

    result = asyncio.run(dispatcher.accept_order(1, PARTNER))

    assert result.ok
    assert store.last_error is None
    assert store.get(1).status == "ACCEPTED"


def test_non_service_error_propagates_and_releases_pending(dispatcher, store, service) -> None:
    service.errors.append(RuntimeError("bug"))

    with pytest.raises(RuntimeError, match="bug"):
        asyncio.run(dispatcher.accept_order(1, PARTNER))

    assert store.pending[OperationKind.ACCEPT] is False
    assert store.last_error is None


def test_backward_transition_is_observed_but_still_sent(dispatcher, store, service, recorder) -> None:
    asyncio.run(dispatcher.update_order_status(2, PARTNER, "OUT_FOR_DELIVERY"))

    anomalies = recorder.of_type(TransitionAnomalyEvent)
    assert len(anomalies) == 1
    assert (anomalies[0].prev_status, anomalies[0].next_status) == ("DELIVERED", "OUT_FOR_DELIVERY")
    assert service.calls[-1] == ("update_status", (2, PARTNER, "OUT_FOR_DELIVERY"))
