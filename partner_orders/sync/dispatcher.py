"""Dispatcher: asynchronous assignment operations against the service.

Every operation follows the same three phases, mirrored on the store's
slot for its kind:

- pending: ``store.begin(kind)`` before the service call is awaited
- success: the store mutation for the result, then ``store.succeed(kind)``
- failure: ``store.fail(kind, message)``; containers stay untouched

The awaited service call is the only suspension point. The result is
applied synchronously right after it resumes, so results land in
completion order, not issue order.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from partner_orders.core.domain.errors import ServiceError
from partner_orders.core.domain.order_state_machine import (
    ACCEPTED,
    REJECTED,
    is_valid_transition,
)
from partner_orders.core.domain.types import (
    Failure,
    OperationKind,
    OperationResult,
    Order,
    OrderId,
    Success,
)
from partner_orders.core.events.events import OperationSettledEvent, TransitionAnomalyEvent

if TYPE_CHECKING:
    from partner_orders.core.domain.store import LifecycleStore
    from partner_orders.core.events.event_bus import EventBus
    from partner_orders.core.ports.assignment_service import OrderAssignmentService

LOGGER = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


class Dispatcher:
    """Runs fetch / accept / reject / status-update against the service.

    Operations are independent: a failure in one never rolls back or blocks
    another, and nothing is retried here. Retrying is the caller re-invoking
    the same operation.
    """

    def __init__(
        self,
        service: OrderAssignmentService,
        store: LifecycleStore,
        event_bus: EventBus,
    ) -> None:
        self._service = service
        self._store = store
        self._event_bus = event_bus

    @property
    def store(self) -> LifecycleStore:
        return self._store

    # ---- Operations ----
    async def fetch_orders(self, partner_id: OrderId, status_filter: str | None = None) -> OperationResult:
        """Refresh every container from the service (bulk replace)."""
        result = await self._call(
            OperationKind.FETCH,
            self._service.list_orders(partner_id, status_filter),
        )
        self._commit(result, self._store.replace_all)
        return result

    async def accept_order(self, assignment_id: OrderId, partner_id: OrderId) -> OperationResult:
        self._observe_transition(assignment_id, ACCEPTED)
        result = await self._call(
            OperationKind.ACCEPT,
            self._service.accept(assignment_id, partner_id),
        )
        self._commit(result, self._store.upsert)
        return result

    async def reject_order(
        self,
        assignment_id: OrderId,
        partner_id: OrderId,
        reason: str | None = None,
    ) -> OperationResult:
        """Reject an assignment and drop it from the store.

        Only the identifier is used on success; the acknowledgement body
        carries nothing worth projecting.
        """
        if reason is None or not reason.strip():
            reason = DEFAULT_REJECTION_REASON

        self._observe_transition(assignment_id, REJECTED)
        result = await self._call(
            OperationKind.REJECT,
            self._service.reject(assignment_id, partner_id, reason),
        )
        self._commit(result, lambda _ack: self._store.remove(assignment_id))
        return result

    async def update_order_status(
        self,
        assignment_id: OrderId,
        partner_id: OrderId,
        new_status: str,
    ) -> OperationResult:
        """Move an assignment forward.

        Backward or skipping transitions are a caller error. They are
        reported as TransitionAnomalyEvent but still sent: the service
        decides.
        """
        self._observe_transition(assignment_id, new_status)
        result = await self._call(
            OperationKind.UPDATE_STATUS,
            self._service.update_status(assignment_id, partner_id, new_status),
        )
        self._commit(result, self._store.upsert)
        return result

    # ---- Phases ----
    async def _call(self, kind: OperationKind, call: Awaitable[Any]) -> OperationResult:
        self._store.begin(kind)
        try:
            value = await call
        except ServiceError as exc:
            LOGGER.warning(
                "Order operation failed",
                extra={"kind": kind.value, "error_type": type(exc).__name__, "error": exc.message},
            )
            return Failure(kind=kind, message=exc.message, error_type=type(exc).__name__)
        except BaseException:
            # Not a service outcome (bug, cancellation): release the slot and propagate.
            self._store.settle(kind)
            raise
        return Success(kind=kind, value=value)

    def _commit(self, result: OperationResult, mutate: Callable[[Any], None]) -> None:
        if isinstance(result, Success):
            try:
                mutate(result.value)
            except BaseException:
                self._store.settle(result.kind)
                raise
            self._store.succeed(result.kind)
            message = None
        else:
            self._store.fail(result.kind, result.message)
            message = result.message

        self._event_bus.emit(
            OperationSettledEvent(
                ts_ns=time.time_ns(),
                kind=result.kind,
                ok=result.ok,
                message=message,
            )
        )

    def _observe_transition(self, assignment_id: OrderId, next_status: str) -> None:
        current: Order | None = self._store.get(assignment_id)
        if current is None:
            return
        if is_valid_transition(current.status, next_status):
            return

        LOGGER.warning(
            "Requested status change is outside the assignment state machine",
            extra={
                "order_id": assignment_id,
                "prev_status": current.status,
                "next_status": next_status,
            },
        )
        self._event_bus.emit(
            TransitionAnomalyEvent(
                ts_ns=time.time_ns(),
                order_id=assignment_id,
                prev_status=current.status,
                next_status=next_status,
            )
        )
