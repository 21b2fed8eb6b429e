"""
Order assignment lifecycle state machine definitions.

This module defines the canonical assignment statuses and the allowed
transitions between them. It is intentionally passive and validation-only.

The order-assignment service is the authority on transitions. The client
uses this table for observability only: it must NOT block a request or
raise exceptions in production paths.
"""

from __future__ import annotations

ASSIGNED = "ASSIGNED"
ACCEPTED = "ACCEPTED"
PICKED_UP = "PICKED_UP"
OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
DELIVERED = "DELIVERED"
REJECTED = "REJECTED"

ORDER_STATUSES: tuple[str, ...] = (
    ASSIGNED,
    ACCEPTED,
    PICKED_UP,
    OUT_FOR_DELIVERY,
    DELIVERED,
    REJECTED,
)

# Terminal statuses: once reached, the assignment is immutable for this client.
ORDER_TERMINAL_STATUSES: frozenset[str] = frozenset(
    {
        DELIVERED,
        REJECTED,
    }
)


# Allowed assignment status transitions.
#
# Key   : previous status (or None if the assignment was not previously known)
# Value : set of allowed next statuses
#
# Notes:
# - Only forward edges exist. There is no way back from a terminal status.
# - Repeated statuses are not transitions and are not listed.
ORDER_ALLOWED_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({ASSIGNED}),

    ASSIGNED: frozenset(
        {
            ACCEPTED,
            REJECTED,
        }
    ),

    ACCEPTED: frozenset({PICKED_UP}),

    PICKED_UP: frozenset({OUT_FOR_DELIVERY}),

    OUT_FOR_DELIVERY: frozenset({DELIVERED}),
}


def is_terminal_status(status: str) -> bool:
    """Return True if the given status is terminal."""
    return status in ORDER_TERMINAL_STATUSES


def is_valid_transition(prev_status: str | None, next_status: str) -> bool:
    """Return True if the transition prev_status -> next_status is allowed."""
    allowed = ORDER_ALLOWED_TRANSITIONS.get(prev_status)
    if allowed is None:
        return False
    return next_status in allowed
