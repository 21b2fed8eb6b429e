"""Order-assignment service protocol.

This module defines the service-facing boundary used by the dispatcher.
Concrete implementations adapt a specific transport (HTTP, in-process) to
this protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from partner_orders.core.domain.types import Order, OrderId, RejectAck


class OrderAssignmentService(Protocol):
    """Authoritative source of assignment state.

    Every method raises a ``ServiceError`` subclass on failure. Timeouts are
    the transport's concern and surface as ``TransportFailure``.
    """

    async def list_orders(self, partner_id: OrderId, status_filter: str | None = None) -> list[Order]:
        """Return the partner's assignments, in service order."""

    async def accept(self, assignment_id: OrderId, partner_id: OrderId) -> Order:
        """Accept an ASSIGNED assignment and return the updated record."""

    async def reject(self, assignment_id: OrderId, partner_id: OrderId, reason: str) -> RejectAck:
        """Reject an ASSIGNED assignment."""

    async def update_status(self, assignment_id: OrderId, partner_id: OrderId, new_status: str) -> Order:
        """Move an assignment forward and return the updated record."""
