"""Core shared data models.

``Order`` is the canonical assignment record exchanged with the
order-assignment service and the inbound notification channel. Only ``id``
and ``status`` are interpreted; every other field is opaque payload that is
carried through unchanged.

The tagged operation results are internal models (not part of the JSON
schema) used to hand service outcomes to the store.
"""

# pylint: disable=missing-class-docstring,missing-function-docstring
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

OrderId = Union[int, str]


def same_order_id(left: OrderId, right: OrderId) -> bool:
    """Return True if both ids name the same assignment.

    Services and notification payloads disagree on id type (``5`` vs
    ``"5"``), so ids are compared by their string form.
    """
    return left == right or str(left) == str(right)


# ---------------------------------------------------------------------------
# Order record
# ---------------------------------------------------------------------------


class Order(BaseModel):
    """
    A single delivery assignment.

    Notes:
    - ``id`` is accepted as either ``id`` or ``assignmentId`` in payloads.
    - ``id`` keeps the type the payload used. Lookups go through
      ``same_order_id``, so ``5`` and ``"5"`` name the same assignment.
    - ``status`` is a free string: unknown values are kept and classify as
      neither active nor completed.
    - Instances are frozen. A status change is always a new Order.
    """

    id: OrderId = Field(
        ...,
        validation_alias=AliasChoices("id", "assignmentId"),
        description="Assignment identifier, stable across the assignment's lifetime.",
    )
    status: str = Field(
        ...,
        min_length=1,
        description="Assignment status as reported by the order-assignment service.",
    )

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Order:
        """Create an Order from a JSON-compatible service payload."""
        return cls.model_validate(payload)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-compatible payload, opaque fields included."""
        return self.model_dump(mode="json")


class RejectAck(BaseModel):
    """Acknowledgement returned by the service for a rejected assignment."""

    assignment_id: OrderId
    reason: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


# ---------------------------------------------------------------------------
# Operation results (internal, not part of the JSON schema)
# ---------------------------------------------------------------------------


class OperationKind(str, Enum):
    FETCH = "fetch"
    ACCEPT = "accept"
    REJECT = "reject"
    UPDATE_STATUS = "update_status"


T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    kind: OperationKind
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Failure:
    """A failed operation.

    error_type keeps the ServiceError subclass name. The store only records
    the message.
    """

    kind: OperationKind
    message: str
    error_type: str

    @property
    def ok(self) -> bool:
        return False


OperationResult = Union[Success[Any], Failure]
