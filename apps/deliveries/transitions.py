"""Delivery statuses and the transitions riders may take between them."""
from __future__ import annotations

from typing import Dict, FrozenSet

PENDING = "pending"
ASSIGNED = "assigned"
PICKUP_IN_PROGRESS = "pickup_in_progress"
PICKED_UP = "picked_up"
IN_TRANSIT = "in_transit"
DELIVERED = "delivered"
FAILED = "failed"

DELIVERY_STATUSES = (
    PENDING,
    ASSIGNED,
    PICKUP_IN_PROGRESS,
    PICKED_UP,
    IN_TRANSIT,
    DELIVERED,
    FAILED,
)

# pending -> assigned is only taken by rider assignment, never by a status update.
DELIVERY_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({ASSIGNED}),
    ASSIGNED: frozenset({PICKUP_IN_PROGRESS}),
    PICKUP_IN_PROGRESS: frozenset({PICKED_UP, FAILED}),
    PICKED_UP: frozenset({IN_TRANSIT, FAILED}),
    IN_TRANSIT: frozenset({DELIVERED, FAILED}),
    DELIVERED: frozenset(),
    FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({DELIVERED, FAILED})

ASSIGNABLE_STATUSES = frozenset({PENDING, ASSIGNED})

TRACKING_CODE_MAX_RETRIES = 5

def can_transition(current: str, requested: str) -> bool:
    return requested in DELIVERY_TRANSITIONS.get(current, frozenset())
