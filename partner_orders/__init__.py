"""Public API for the partner_orders package.

Only symbols imported here are considered part of the stable,
supported external interface.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

# ----------------------------------------------------------------------
# Adapters
# ----------------------------------------------------------------------
from partner_orders.adapters.http_service import HttpOrderAssignmentService
from partner_orders.adapters.in_memory_service import InMemoryAssignmentService

# ----------------------------------------------------------------------
# Config API
# ----------------------------------------------------------------------
from partner_orders.core.config.client_config import ClientConfig

# ----------------------------------------------------------------------
# Domain
# ----------------------------------------------------------------------
from partner_orders.core.domain.errors import (
    InvalidTransition,
    NotFound,
    ServiceError,
    TransportFailure,
)
from partner_orders.core.domain.order_state_machine import (
    ORDER_STATUSES,
    is_terminal_status,
    is_valid_transition,
)
from partner_orders.core.domain.store import LifecycleStore, StoreSnapshot
from partner_orders.core.domain.transition_engine import Membership, classify
from partner_orders.core.domain.types import (
    Failure,
    OperationKind,
    OperationResult,
    Order,
    RejectAck,
    Success,
)
from partner_orders.core.events.event_bus import EventBus
from partner_orders.core.ports.assignment_service import OrderAssignmentService
from partner_orders.core.ports.notification_channel import NotificationChannel
from partner_orders.runtime.client import PartnerOrdersClient

# ----------------------------------------------------------------------
# Sync layer
# ----------------------------------------------------------------------
from partner_orders.sync.dispatcher import Dispatcher
from partner_orders.sync.notifications import NotificationPump
from partner_orders.sync.poller import OrderPoller
from partner_orders.sync.surface import OrdersSurface

# ----------------------------------------------------------------------
# Public API definition
# ----------------------------------------------------------------------

__all__ = [
    # Client
    "PartnerOrdersClient",
    "ClientConfig",

    # Domain
    "Order",
    "RejectAck",
    "Membership",
    "classify",
    "ORDER_STATUSES",
    "is_terminal_status",
    "is_valid_transition",
    "LifecycleStore",
    "StoreSnapshot",
    "OperationKind",
    "OperationResult",
    "Success",
    "Failure",
    "EventBus",

    # Errors
    "ServiceError",
    "TransportFailure",
    "NotFound",
    "InvalidTransition",

    # Sync layer
    "Dispatcher",
    "OrdersSurface",
    "NotificationPump",
    "OrderPoller",

    # Ports and adapters
    "OrderAssignmentService",
    "NotificationChannel",
    "HttpOrderAssignmentService",
    "InMemoryAssignmentService",

    # Version
    "__version__",
]

# ----------------------------------------------------------------------
# Package version
# ----------------------------------------------------------------------

try:
    __version__ = version("partner-orders")
except PackageNotFoundError:
    __version__ = "0.0.0"
