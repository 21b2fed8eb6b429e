"""
Semantic test: results are applied in completion order.

Invariants:
- While an operation is in flight the store stays in its last committed
  state and reports the operation as pending.
- A fetch issued before an accept but completing after it overwrites the
  accepted order with the older snapshot (known race). The next refresh
  heals it.
"""

from __future__ import annotations

import asyncio

from partner_orders.core.domain.store import LifecycleStore
from partner_orders.core.domain.types import OperationKind, Order, RejectAck
from partner_orders.core.events.sinks.null_event_bus import NullEventBus
from partner_orders.sync.dispatcher import Dispatcher

PARTNER = 7


class GatedService:
    """Service whose responses are held until the test releases them.

    Each call captures the authoritative state when it is issued, like a
    server that has already answered but whose response is still in transit.
    """

    def __init__(self) -> None:
        self.records: dict[int, str] = {1: "ASSIGNED", 2: "ASSIGNED"}
        self.gates: dict[str, asyncio.Event] = {}

    def _gate(self, name: str) -> asyncio.Event:
        return self.gates.setdefault(name, asyncio.Event())

    def release(self, name: str) -> None:
        self._gate(name).set()

    async def list_orders(self, partner_id, status_filter=None):
        snapshot = [Order(id=oid, status=status) for oid, status in self.records.items()]
        await self._gate("list").wait()
        return snapshot

    async def accept(self, assignment_id, partner_id):
        self.records[assignment_id] = "ACCEPTED"
        await self._gate(f"accept-{assignment_id}").wait()
        return Order(id=assignment_id, status="ACCEPTED")

    async def reject(self, assignment_id, partner_id, reason):
        self.records.pop(assignment_id, None)
        await self._gate(f"reject-{assignment_id}").wait()
        return RejectAck(assignment_id=assignment_id, reason=reason)

    async def update_status(self, assignment_id, partner_id, new_status):
        raise NotImplementedError


def _build() -> tuple[GatedService, LifecycleStore, Dispatcher]:
    service = GatedService()
    store = LifecycleStore(event_bus=NullEventBus())
    store.replace_all([Order(id=1, status="ASSIGNED"), Order(id=2, status="ASSIGNED")])
    return service, store, Dispatcher(service=service, store=store, event_bus=NullEventBus())


def test_stale_fetch_reverts_a_completed_accept() -> None:
    service, store, dispatcher = _build()

    async def scenario() -> None:
        fetch = asyncio.create_task(dispatcher.fetch_orders(PARTNER))
        await asyncio.sleep(0)
        accept = asyncio.create_task(dispatcher.accept_order(1, PARTNER))
        await asyncio.sleep(0)

        assert store.pending[OperationKind.FETCH] is True
        assert store.pending[OperationKind.ACCEPT] is True
        assert store.get(1).status == "ASSIGNED"

        service.release("accept-1")
        await accept
        assert store.get(1).status == "ACCEPTED"

        service.release("list")
        await fetch
        # Last completion wins, even though the fetch was issued first.
        assert store.get(1).status == "ASSIGNED"

        await dispatcher.fetch_orders(PARTNER)
        assert store.get(1).status == "ACCEPTED"

    asyncio.run(scenario())
    assert store.loading is False


def test_overlapping_operations_of_one_kind_keep_pending() -> None:
    service, store, dispatcher = _build()

    async def scenario() -> None:
        first = asyncio.create_task(dispatcher.accept_order(1, PARTNER))
        second = asyncio.create_task(dispatcher.accept_order(2, PARTNER))
        await asyncio.sleep(0)

        service.release("accept-2")
        await second
        assert store.pending[OperationKind.ACCEPT] is True
        assert [o.status for o in store.active_orders] == ["ASSIGNED", "ACCEPTED"]

        service.release("accept-1")
        await first
        assert store.pending[OperationKind.ACCEPT] is False

    asyncio.run(scenario())
    assert [o.status for o in store.active_orders] == ["ACCEPTED", "ACCEPTED"]


def test_interleaved_accept_and_reject_are_isolated() -> None:
    service, store, dispatcher = _build()

    async def scenario() -> None:
        accept = asyncio.create_task(dispatcher.accept_order(1, PARTNER))
        reject = asyncio.create_task(dispatcher.reject_order(2, PARTNER, "Too far"))
        await asyncio.sleep(0)

        service.release("reject-2")
        await reject
        assert [o.id for o in store.orders] == [1]
        assert store.pending[OperationKind.ACCEPT] is True

        service.release("accept-1")
        await accept

    asyncio.run(scenario())
    assert [(o.id, o.status) for o in store.active_orders] == [(1, "ACCEPTED")]


def test_cancelled_operation_releases_pending() -> None:
    _service, store, dispatcher = _build()

    async def scenario() -> None:
        fetch = asyncio.create_task(dispatcher.fetch_orders(PARTNER))
        await asyncio.sleep(0)
        assert store.pending[OperationKind.FETCH] is True

        fetch.cancel()
        try:
            await fetch
        except asyncio.CancelledError:
            pass

    asyncio.run(scenario())
    assert store.pending[OperationKind.FETCH] is False
    assert [o.id for o in store.orders] == [1, 2]
