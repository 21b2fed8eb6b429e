"""Periodic refresh of the partner's assignments."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from partner_orders.core.domain.types import OperationResult, OrderId

if TYPE_CHECKING:
    from partner_orders.sync.dispatcher import Dispatcher

LOGGER = logging.getLogger(__name__)


class OrderPoller:
    """Calls ``fetch_orders`` every ``interval_s`` seconds.

    A failed refresh is already recorded in the store by the dispatcher; the
    loop keeps going and the next cycle is the retry.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        partner_id: OrderId,
        *,
        interval_s: float,
        status_filter: str | None = None,
    ) -> None:
        if interval_s < 0:
            raise ValueError("interval_s must be >= 0")

        self._dispatcher = dispatcher
        self._partner_id = partner_id
        self._interval_s = interval_s
        self._status_filter = status_filter
        self._stopped = asyncio.Event()

        self.cycles = 0
        self.failures = 0

    async def poll_once(self) -> OperationResult:
        result = await self._dispatcher.fetch_orders(self._partner_id, self._status_filter)
        self.cycles += 1
        if not result.ok:
            self.failures += 1
        return result

    async def run(self, max_cycles: int | None = None) -> None:
        """Poll until ``stop()`` is called or ``max_cycles`` are done.

        ``max_cycles`` counts the cycles of this call only.
        """
        self._stopped.clear()
        done = 0
        while not self._stopped.is_set():
            await self.poll_once()
            done += 1

            if max_cycles is not None and done >= max_cycles:
                break

            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self._interval_s)
            except asyncio.TimeoutError:
                continue

        LOGGER.info(
            "Order poller stopped",
            extra={"cycles": self.cycles, "failures": self.failures},
        )

    def stop(self) -> None:
        self._stopped.set()
