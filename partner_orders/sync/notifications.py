"""Notification pump: drains an inbound channel into the integration surface."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

if TYPE_CHECKING:
    from partner_orders.core.ports.notification_channel import NotificationChannel
    from partner_orders.sync.surface import OrdersSurface

LOGGER = logging.getLogger(__name__)


class NotificationPump:
    """Feeds every inbound payload to ``OrdersSurface.add_new_order``.

    The channel bypasses the dispatcher: there is no service call and no
    pending phase for a pushed order.
    """

    def __init__(self, surface: OrdersSurface) -> None:
        self._surface = surface
        self.accepted = 0
        self.skipped = 0

    async def run(self, channel: NotificationChannel) -> int:
        """Consume the channel until it closes. Return the accepted count."""
        async for payload in channel:
            try:
                self._surface.add_new_order(payload)
            except ValidationError as exc:
                self.skipped += 1
                LOGGER.warning(
                    "Dropping invalid new-order notification",
                    extra={"errors": exc.errors(include_url=False)},
                )
                continue
            self.accepted += 1
        return self.accepted
