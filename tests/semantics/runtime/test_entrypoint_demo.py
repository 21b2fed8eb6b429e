"""
Semantic test: CLI wiring and the scripted demo lifecycle.

Invariant:
The demo drives every operation once through a real client; the final
projections reflect completion order, and the refused update is the only
error left in the store.
"""

from __future__ import annotations

import asyncio

from partner_orders.adapters.in_memory_service import InMemoryAssignmentService
from partner_orders.core.config.client_config import ClientConfig
from partner_orders.core.domain.types import OperationKind
from partner_orders.runtime.client import PartnerOrdersClient
from partner_orders.runtime.entrypoint import _run_demo, main


def test_demo_lifecycle_projections() -> None:
    cfg = ClientConfig.from_json_obj({"base_url": "http://localhost", "partner_id": 1})
    service = InMemoryAssignmentService()

    async def scenario():
        async with PartnerOrdersClient(cfg, service=service) as client:
            await _run_demo(client, service)
            return client.surface.snapshot(), client.metrics

    snap, metrics = asyncio.run(scenario())

    assert snap.order_ids() == [104, 101, 103]
    assert snap.active_ids() == [104, 103]
    assert snap.completed_ids() == [101]
    assert snap.last_error == "Invalid status transition from ASSIGNED to DELIVERED"
    assert snap.errors[OperationKind.UPDATE_STATUS] == snap.last_error
    assert snap.errors[OperationKind.ACCEPT] is None
    assert not snap.loading
    assert metrics.registry.get_sample_value(
        "partner_orders_operations_total", {"kind": "update_status", "outcome": "failure"}
    ) == 1.0


def test_main_demo_prints_summary(capsys) -> None:
    assert main(["--demo"]) == 0

    out = capsys.readouterr().out
    assert "[104, 101, 103]" in out
    assert "last error : Invalid status transition from ASSIGNED to DELIVERED" in out


def test_main_rejects_non_positive_cycles(capsys) -> None:
    assert main(["--demo", "--cycles", "0"]) == 2
    assert "--cycles must be positive" in capsys.readouterr().err
