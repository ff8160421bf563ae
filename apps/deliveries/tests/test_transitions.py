from __future__ import annotations

from django.test import SimpleTestCase

from apps.deliveries.transitions import (
    ASSIGNED,
    DELIVERED,
    DELIVERY_STATUSES,
    DELIVERY_TRANSITIONS,
    FAILED,
    IN_TRANSIT,
    PENDING,
    PICKED_UP,
    PICKUP_IN_PROGRESS,
    TERMINAL_STATUSES,
    can_transition,
)

class DeliveryTransitionTableTests(SimpleTestCase):

    def test_every_status_has_an_entry(self):
        self.assertEqual(set(DELIVERY_TRANSITIONS), set(DELIVERY_STATUSES))

    def test_happy_path(self):
        path = [PENDING, ASSIGNED, PICKUP_IN_PROGRESS, PICKED_UP, IN_TRANSIT, DELIVERED]
        for current, requested in zip(path, path[1:]):
            self.assertTrue(can_transition(current, requested), f"{current} -> {requested}")

    def test_no_skipping_ahead(self):
        self.assertFalse(can_transition(ASSIGNED, PICKED_UP))
        self.assertFalse(can_transition(PENDING, IN_TRANSIT))
        self.assertFalse(can_transition(PICKUP_IN_PROGRESS, DELIVERED))

    def test_failure_only_once_pickup_started(self):
        self.assertFalse(can_transition(PENDING, FAILED))
        self.assertFalse(can_transition(ASSIGNED, FAILED))
        for current in (PICKUP_IN_PROGRESS, PICKED_UP, IN_TRANSIT):
            self.assertTrue(can_transition(current, FAILED))

    def test_terminal_statuses_are_final(self):
        for current in TERMINAL_STATUSES:
            for requested in DELIVERY_STATUSES:
                self.assertFalse(can_transition(current, requested))

    def test_unknown_status(self):
        self.assertFalse(can_transition("teleported", DELIVERED))
