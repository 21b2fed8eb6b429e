from __future__ import annotations

from typing import Any, AsyncIterator, Protocol


class NotificationChannel(Protocol):
    """Inbound push channel for newly assigned orders.

    Each item is a single order payload (a mapping or an ``Order``). The
    channel may deliver at any time; iteration ends when it closes.
    """

    def __aiter__(self) -> AsyncIterator[Any]:
        """Iterate over inbound order payloads."""
