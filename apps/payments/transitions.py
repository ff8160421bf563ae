"""Escrow payment statuses and permitted transitions."""
from __future__ import annotations

from typing import Dict, FrozenSet

PENDING = "pending"
PROCESSING = "processing"
HELD_IN_ESCROW = "held_in_escrow"
RELEASED = "released"
REFUNDED = "refunded"
FAILED = "failed"

PAYMENT_STATUSES = (PENDING, PROCESSING, HELD_IN_ESCROW, RELEASED, REFUNDED, FAILED)

PAYMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({PROCESSING, HELD_IN_ESCROW, FAILED}),
    PROCESSING: frozenset({HELD_IN_ESCROW, REFUNDED, FAILED}),
    HELD_IN_ESCROW: frozenset({RELEASED, REFUNDED, FAILED}),
    RELEASED: frozenset(),
    REFUNDED: frozenset(),
    FAILED: frozenset(),
}

TERMINAL_STATUSES = frozenset({RELEASED, REFUNDED, FAILED})

REFUNDABLE_STATUSES = frozenset({PROCESSING, HELD_IN_ESCROW})

def can_transition(current: str, requested: str) -> bool:
    return requested in PAYMENT_TRANSITIONS.get(current, frozenset())
