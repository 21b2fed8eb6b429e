"""Order-assignment service error taxonomy.

The client does not distinguish service-side rejection reasons beyond the
message string. The subclasses exist so adapters can say what went wrong
and callers can branch on it if they want to.
"""

from __future__ import annotations


class ServiceError(RuntimeError):
    """Raised when an order-assignment service operation does not succeed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TransportFailure(ServiceError):
    """Service unreachable, timed out, or answered with a non-success response."""


class NotFound(ServiceError):
    """The operation referenced an assignment the service no longer recognizes."""


class InvalidTransition(ServiceError):
    """The service refused a status change outside the assignment state machine."""
