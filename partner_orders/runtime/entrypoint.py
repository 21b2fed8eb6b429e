from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from partner_orders.adapters.in_memory_service import InMemoryAssignmentService
from partner_orders.core.config.client_config import ClientConfig
from partner_orders.core.domain.order_state_machine import (
    DELIVERED,
    OUT_FOR_DELIVERY,
    PICKED_UP,
)
from partner_orders.runtime.client import PartnerOrdersClient

if TYPE_CHECKING:
    from partner_orders.core.domain.store import StoreSnapshot

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_config(args: argparse.Namespace) -> ClientConfig:
    if args.demo:
        data = {
            "base_url": "http://localhost",
            "partner_id": args.partner_id or 1,
            "poll_interval_s": 0,
        }
        return ClientConfig.from_json_obj(data)

    cfg = ClientConfig.from_json_file(args.config) if args.config else ClientConfig.from_env()
    if args.partner_id is not None:
        cfg = cfg.model_copy(update={"partner_id": args.partner_id})
    return cfg


def print_summary(snapshot: StoreSnapshot) -> None:
    print("=" * 60)
    print("ORDERS")
    print("=" * 60)
    print(f"all        : {len(snapshot.orders):>4}  {snapshot.order_ids()}")
    print(f"active     : {len(snapshot.active_orders):>4}  {snapshot.active_ids()}")
    print(f"completed  : {len(snapshot.completed_orders):>4}  {snapshot.completed_ids()}")
    print(f"updated at : {snapshot.last_updated.isoformat() if snapshot.last_updated else '-'}")
    if snapshot.last_error:
        print(f"last error : {snapshot.last_error}")


async def _run_demo(client: PartnerOrdersClient, service: InMemoryAssignmentService) -> None:
    partner_id = client.config.partner_id
    for oid, amount in ((101, 40.0), (102, 55.0), (103, 32.5)):
        service.assign(partner_id, {"id": oid, "status": "ASSIGNED", "totalEarnings": amount})

    dispatcher = client.dispatcher
    await dispatcher.fetch_orders(partner_id)
    await dispatcher.accept_order(101, partner_id)
    for status in (PICKED_UP, OUT_FOR_DELIVERY, DELIVERED):
        await dispatcher.update_order_status(101, partner_id, status)
    await dispatcher.reject_order(102, partner_id, "Vehicle breakdown")

    pushed = service.assign(partner_id, {"id": 104, "status": "ASSIGNED", "totalEarnings": 61.0})
    client.surface.add_new_order(pushed)

    # Refused by the service: stays a failure in the store, nothing changes.
    await dispatcher.update_order_status(103, partner_id, DELIVERED)


async def _run(args: argparse.Namespace) -> int:
    cfg = _load_config(args)

    demo_service = InMemoryAssignmentService() if args.demo else None
    async with PartnerOrdersClient(cfg, service=demo_service) as client:
        if demo_service is not None:
            await _run_demo(client, demo_service)
            print_summary(client.surface.snapshot())
            return 0

        if args.once:
            result = await client.poller.poll_once()
            print_summary(client.surface.snapshot())
            return 0 if result.ok else 1

        await client.poller.run(max_cycles=args.cycles)
        print_summary(client.surface.snapshot())
        return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Delivery-partner order sync client (fetch, poll or demo)"
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to client JSON config. Defaults to PARTNER_ORDERS_* environment variables.",
    )

    parser.add_argument(
        "--partner-id",
        type=int,
        default=None,
        help="Override the configured partner id.",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Fetch once, print the projections and exit (exit code 1 on failure).",
    )

    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="Stop polling after this many refresh cycles (default: poll forever).",
    )

    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run a scripted lifecycle against an in-process service.",
    )

    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level.",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cycles is not None and args.cycles <= 0:
        print("Error: --cycles must be positive.", file=sys.stderr)
        return 2

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
