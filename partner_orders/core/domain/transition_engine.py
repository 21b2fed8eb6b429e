"""Projection membership classification.

Every store mutation path decides which projection an assignment belongs to
through ``classify``. Nothing else may decide membership.
"""

from __future__ import annotations

from enum import Enum

from partner_orders.core.domain.order_state_machine import (
    ACCEPTED,
    ASSIGNED,
    DELIVERED,
    OUT_FOR_DELIVERY,
    PICKED_UP,
)


class Membership(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    NONE = "NONE"


ACTIVE_STATUSES: frozenset[str] = frozenset(
    {
        ASSIGNED,
        ACCEPTED,
        PICKED_UP,
        OUT_FOR_DELIVERY,
    }
)

COMPLETED_STATUSES: frozenset[str] = frozenset({DELIVERED})


def classify(status: str) -> Membership:
    """Return the projection membership of a status.

    Total function: REJECTED and any unrecognized status map to NONE.
    """
    if status in ACTIVE_STATUSES:
        return Membership.ACTIVE
    if status in COMPLETED_STATUSES:
        return Membership.COMPLETED
    return Membership.NONE
