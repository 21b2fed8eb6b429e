"""HTTP client for the order-assignment service."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import httpx
from pydantic import ValidationError

from partner_orders.core.domain.errors import (
    InvalidTransition,
    NotFound,
    ServiceError,
    TransportFailure,
)
from partner_orders.core.domain.types import Order, OrderId, RejectAck

LOGGER = logging.getLogger(__name__)

_INVALID_TRANSITION_CODES = frozenset({400, 409, 422})


class HttpOrderAssignmentService:
    """``OrderAssignmentService`` over the REST order-assignment API.

    Endpoints, relative to ``base_url``:
    - GET  /order-assignments/partner/{partnerId}?status=
    - PUT  /order-assignments/{assignmentId}/accept
    - PUT  /order-assignments/{assignmentId}/reject
    - PUT  /order-assignments/{assignmentId}/status
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("base_url must include scheme and host")

        self._base_url = base_url.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._headers = headers

        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    # ------------------------------------------------------------------
    # OrderAssignmentService
    # ------------------------------------------------------------------
    async def list_orders(self, partner_id: OrderId, status_filter: str | None = None) -> list[Order]:
        params = {"status": status_filter} if status_filter else None
        data = await self._request(
            "GET",
            f"/order-assignments/partner/{partner_id}",
            params=params,
            default_error="Failed to fetch orders",
        )
        if not isinstance(data, list):
            raise TransportFailure("Failed to fetch orders: expected a list of assignments")
        return [self._parse_order(item, "Failed to fetch orders") for item in data]

    async def accept(self, assignment_id: OrderId, partner_id: OrderId) -> Order:
        data = await self._request(
            "PUT",
            f"/order-assignments/{assignment_id}/accept",
            json={"partnerId": partner_id},
            default_error="Failed to accept order",
        )
        return self._parse_order(data, "Failed to accept order")

    async def reject(self, assignment_id: OrderId, partner_id: OrderId, reason: str) -> RejectAck:
        await self._request(
            "PUT",
            f"/order-assignments/{assignment_id}/reject",
            json={"partnerId": partner_id, "rejectionReason": reason},
            default_error="Failed to reject order",
        )
        # The service answers with an empty body; echo the id.
        return RejectAck(assignment_id=assignment_id, reason=reason)

    async def update_status(self, assignment_id: OrderId, partner_id: OrderId, new_status: str) -> Order:
        data = await self._request(
            "PUT",
            f"/order-assignments/{assignment_id}/status",
            json={"partnerId": partner_id, "status": new_status},
            default_error="Failed to update order status",
        )
        return self._parse_order(data, "Failed to update order status")

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpOrderAssignmentService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        default_error: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers,
            )
        except httpx.TimeoutException as exc:
            raise TransportFailure(f"{default_error}: request timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{default_error}: {exc}") from exc

        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise TransportFailure(f"{default_error}: invalid JSON response") from exc

        raise self._error_for(response, default_error)

    @staticmethod
    def _error_message(response: httpx.Response, default_error: str) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            for key in ("error", "message"):
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()

        text = response.text.strip()
        return text or default_error

    @classmethod
    def _error_for(cls, response: httpx.Response, default_error: str) -> ServiceError:
        message = cls._error_message(response, default_error)
        status = response.status_code

        LOGGER.info(
            "Order-assignment service returned an error",
            extra={"status_code": status, "url": str(response.request.url)},
        )

        if status == 404:
            return NotFound(message, status_code=status)
        if status in _INVALID_TRANSITION_CODES:
            return InvalidTransition(message, status_code=status)
        return TransportFailure(message, status_code=status)

    @staticmethod
    def _parse_order(data: Any, default_error: str) -> Order:
        if not isinstance(data, dict):
            raise TransportFailure(f"{default_error}: expected an assignment object")
        try:
            return Order.from_payload(data)
        except ValidationError as exc:
            raise TransportFailure(f"{default_error}: malformed assignment") from exc
