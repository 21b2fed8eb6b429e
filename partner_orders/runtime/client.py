"""Wiring of one partner's sync client.

One PartnerOrdersClient == one store == one partner. Construction and
teardown are the caller's; nothing here is module-level state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from partner_orders.adapters.http_service import HttpOrderAssignmentService
from partner_orders.core.domain.store import LifecycleStore
from partner_orders.core.events.event_bus import EventBus
from partner_orders.core.events.sinks.file_recorder import FileRecorderSink
from partner_orders.core.events.sinks.prometheus_sink import PrometheusEventSink
from partner_orders.core.events.sinks.sink_logging import LoggingEventSink
from partner_orders.sync.dispatcher import Dispatcher
from partner_orders.sync.notifications import NotificationPump
from partner_orders.sync.poller import OrderPoller
from partner_orders.sync.surface import OrdersSurface

if TYPE_CHECKING:
    from partner_orders.core.config.client_config import ClientConfig
    from partner_orders.core.ports.assignment_service import OrderAssignmentService


class PartnerOrdersClient:
    """Store, dispatcher, surface and poller for one partner."""

    # pylint: disable=too-many-instance-attributes

    def __init__(
        self,
        config: ClientConfig,
        *,
        service: OrderAssignmentService | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.config = config

        self.metrics: PrometheusEventSink | None = None
        self.event_bus = event_bus if event_bus is not None else self._build_event_bus(config.event_log_path)

        if service is None:
            service = HttpOrderAssignmentService(
                config.base_url,
                api_token=config.api_token,
                timeout=config.timeout_s,
            )
        self.service = service

        self.store = LifecycleStore(event_bus=self.event_bus)
        self.dispatcher = Dispatcher(service=service, store=self.store, event_bus=self.event_bus)
        self.surface = OrdersSurface(
            store=self.store,
            event_bus=self.event_bus,
            dedupe_inbound=config.dedupe_inbound,
        )
        self.poller = OrderPoller(
            self.dispatcher,
            config.partner_id,
            interval_s=config.poll_interval_s,
            status_filter=config.status_filter,
        )
        self.notifications = NotificationPump(self.surface)

    def _build_event_bus(self, path: Path | None) -> EventBus:
        logger = logging.getLogger("bus")

        self.metrics = PrometheusEventSink()
        sinks = [
            LoggingEventSink(logger),
            self.metrics,
        ]
        if path is not None:
            sinks.append(FileRecorderSink(path))

        return EventBus(sinks=sinks)

    async def aclose(self) -> None:
        close_fn = getattr(self.service, "aclose", None)
        if callable(close_fn):
            await close_fn()
        self.event_bus.close()

    async def __aenter__(self) -> PartnerOrdersClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
