from __future__ import annotations

from unittest import mock

from apps.deliveries import services
from apps.deliveries.mongo_models import Delivery
from apps.orders.mongo_models import Order
from apps.tailors.mongo_models import Tailor
from apps.users.mongo_models import ROLE_ADMIN, ROLE_RIDER, ROLE_TAILOR
from apps.utils.exceptions import ConcurrentModification
from apps.utils.repository import get_repository
from apps.utils.testing import MemoryBackendTestCase, make_user

class DeliveryWorkflowTests(MemoryBackendTestCase):

    def setUp(self):
        super().setUp()
        self.admin = make_user(role=ROLE_ADMIN)
        self.rider = make_user(role=ROLE_RIDER)
        self.customer = make_user()
        self.tailor_user = make_user(role=ROLE_TAILOR)
        tailor = get_repository(Tailor).add(Tailor(user_id=self.tailor_user.id, shop_name="Hemline"))
        self.order = get_repository(Order).add(
            Order(customer_id=self.customer.id, tailor_id=tailor.id, order_type="dress", status="ready_for_delivery")
        )

    def _create(self):
        self.client.force_authenticate(user=self.tailor_user)
        response = self.client.post(
            "/api/v1/deliveries",
            {
                "orderId": str(self.order.id),
                "pickupAddress": "12 Mercer St",
                "deliveryAddress": "400 W 42nd St",
                "deliveryFee": "9.50",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        return response.data["data"]["delivery"]

    def _assign(self, delivery_id, rider=None):
        self.client.force_authenticate(user=self.admin)
        return self.client.put(
            f"/api/v1/deliveries/{delivery_id}/assign",
            {"riderId": str((rider or self.rider).id)},
            format="json",
        )

    def _advance(self, delivery_id, new_status, **body):
        self.client.force_authenticate(user=self.rider)
        return self.client.put(f"/api/v1/deliveries/{delivery_id}/status", {"status": new_status, **body}, format="json")

    def test_create_marks_order_pending_delivery(self):
        delivery = self._create()

        self.assertEqual(delivery["status"], "pending")
        self.assertEqual(len(delivery["trackingCode"]), 8)
        self.assertEqual(get_repository(Order).get(self.order.id).status, "pending_delivery")

    def test_one_delivery_per_order(self):
        self._create()

        response = self.client.post(
            "/api/v1/deliveries",
            {"orderId": str(self.order.id), "pickupAddress": "a", "deliveryAddress": "b"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)

    def test_customer_cannot_create(self):
        self.client.force_authenticate(user=self.customer)

        response = self.client.post(
            "/api/v1/deliveries",
            {"orderId": str(self.order.id), "pickupAddress": "a", "deliveryAddress": "b"},
            format="json",
        )

        self.assertEqual(response.status_code, 403)

    def test_tracking_code_collisions_are_retried(self):
        existing = self._create()
        other = get_repository(Order).add(
            Order(customer_id=self.customer.id, tailor_id=self.order.tailor_id, order_type="shirt")
        )
        codes = iter([existing["trackingCode"], "NEWCODE1"])

        with mock.patch.object(services, "generate_tracking_code", side_effect=lambda: next(codes)):
            delivery = services.create_delivery(self.tailor_user, other.id, "a", "b")

        self.assertEqual(delivery.tracking_code, "NEWCODE1")

    def test_tracking_code_exhaustion(self):
        existing = self._create()
        other = get_repository(Order).add(
            Order(customer_id=self.customer.id, tailor_id=self.order.tailor_id, order_type="shirt")
        )

        with mock.patch.object(services, "generate_tracking_code", return_value=existing["trackingCode"]):
            with self.assertRaises(ConcurrentModification):
                services.create_delivery(self.tailor_user, other.id, "a", "b")

    def test_assignment_rules(self):
        delivery_id = self._create()["id"]

        self.assertEqual(self._assign(delivery_id, rider=self.customer).status_code, 400)

        self.client.force_authenticate(user=self.tailor_user)
        forbidden = self.client.put(
            f"/api/v1/deliveries/{delivery_id}/assign", {"riderId": str(self.rider.id)}, format="json"
        )
        self.assertEqual(forbidden.status_code, 403)

        assigned = self._assign(delivery_id)
        self.assertEqual(assigned.status_code, 200)
        self.assertEqual(assigned.data["data"]["delivery"]["status"], "assigned")
        self.assertEqual(assigned.data["data"]["delivery"]["riderId"], str(self.rider.id))

        other_rider = make_user(role=ROLE_RIDER)
        self.assertEqual(self._assign(delivery_id, rider=other_rider).status_code, 200)
        self.assertEqual(self._assign(delivery_id).status_code, 200)

        self._advance(delivery_id, "pickup_in_progress")
        self.assertEqual(self._assign(delivery_id, rider=other_rider).status_code, 400)

    def test_full_journey(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)

        self.assertEqual(self._advance(delivery_id, "pickup_in_progress").status_code, 200)
        picked = self._advance(delivery_id, "picked_up", currentLocation={"lat": 40.72, "lng": -74.0})
        self.assertIsNotNone(picked.data["data"]["delivery"]["pickupDate"])
        self.assertEqual(picked.data["data"]["delivery"]["currentLocation"]["latitude"], 40.72)

        self._advance(delivery_id, "in_transit")
        delivered = self._advance(delivery_id, "delivered")

        self.assertEqual(delivered.status_code, 200)
        self.assertIsNotNone(delivered.data["data"]["delivery"]["deliveryDate"])
        self.assertEqual(delivered.data["data"]["delivery"]["version"], 5)
        self.assertEqual(get_repository(Order).get(self.order.id).status, "delivered")

    def test_skipping_a_step_is_rejected(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)

        response = self._advance(delivery_id, "picked_up")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["data"], {"current": "assigned", "requested": "picked_up"})
        self.assertEqual(get_repository(Delivery).get(delivery_id).status, "assigned")

    def test_delivered_is_final(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)
        for step in ("pickup_in_progress", "picked_up", "in_transit", "delivered"):
            self._advance(delivery_id, step)

        self.assertEqual(self._advance(delivery_id, "failed").status_code, 400)

    def test_only_assigned_rider_updates(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)
        self.client.force_authenticate(user=make_user(role=ROLE_RIDER))

        response = self.client.put(
            f"/api/v1/deliveries/{delivery_id}/status", {"status": "pickup_in_progress"}, format="json"
        )

        self.assertEqual(response.status_code, 403)

    def test_stale_write_loses(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)
        stale = get_repository(Delivery).get(delivery_id)
        self._advance(delivery_id, "pickup_in_progress")

        with self.assertRaises(ConcurrentModification):
            services._write_status(stale, {"status": "pickup_in_progress"})

    def test_stale_write_over_http_is_conflict(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)

        with mock.patch.object(services, "_write_status", side_effect=ConcurrentModification()):
            response = self._advance(delivery_id, "pickup_in_progress")

        self.assertEqual(response.status_code, 409)

    def test_location_ping(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)
        self.client.force_authenticate(user=self.rider)

        response = self.client.put(
            f"/api/v1/deliveries/{delivery_id}/location", {"latitude": 40.75, "longitude": -73.99}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        location = response.data["data"]["delivery"]["currentLocation"]
        self.assertEqual((location["latitude"], location["longitude"]), (40.75, -73.99))
        self.assertEqual(response.data["data"]["delivery"]["status"], "assigned")
        self.assertEqual(response.data["data"]["delivery"]["version"], 1)

    def test_by_order_visibility(self):
        delivery_id = self._create()["id"]

        self.client.force_authenticate(user=self.customer)
        response = self.client.get(f"/api/v1/deliveries/order/{self.order.id}")
        self.assertEqual(response.data["data"]["delivery"]["id"], delivery_id)

        self.client.force_authenticate(user=make_user())
        self.assertEqual(self.client.get(f"/api/v1/deliveries/order/{self.order.id}").status_code, 403)

    def test_by_order_without_delivery(self):
        url = f"/api/v1/deliveries/order/{self.order.id}"

        self.client.force_authenticate(user=make_user())
        self.assertEqual(self.client.get(url).status_code, 403)
        self.client.force_authenticate(user=self.rider)
        self.assertEqual(self.client.get(url).status_code, 403)

        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.get(url).status_code, 404)
        self.client.force_authenticate(user=self.admin)
        self.assertEqual(self.client.get(url).status_code, 404)

    def test_by_order_for_assigned_rider(self):
        delivery_id = self._create()["id"]
        self.client.force_authenticate(user=self.rider)
        url = f"/api/v1/deliveries/order/{self.order.id}"
        self.assertEqual(self.client.get(url).status_code, 403)

        self._assign(delivery_id)
        self.client.force_authenticate(user=self.rider)

        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["delivery"]["id"], delivery_id)

    def test_rider_and_admin_listings(self):
        delivery_id = self._create()["id"]
        self._assign(delivery_id)

        self.client.force_authenticate(user=self.rider)
        mine = self.client.get("/api/v1/deliveries/rider")
        self.assertEqual([item["id"] for item in mine.data["data"]["deliveries"]], [delivery_id])
        self.assertEqual(self.client.get("/api/v1/deliveries").status_code, 403)

        self.client.force_authenticate(user=self.admin)
        filtered = self.client.get("/api/v1/deliveries", {"status": "pending"})
        self.assertEqual(filtered.data["data"]["deliveries"], [])

class TrackingTests(MemoryBackendTestCase):

    def test_public_lookup(self):
        customer = make_user()
        order = get_repository(Order).add(
            Order(customer_id=customer.id, tailor_id=customer.id, order_type="suit", status="pending_delivery")
        )
        get_repository(Delivery).add(
            Delivery(order_id=order.id, tracking_code="ABCD1234", pickup_address="a", delivery_address="b")
        )

        response = self.client.get("/api/v1/deliveries/tracking/abcd1234")

        self.assertEqual(response.status_code, 200)
        tracking = response.data["data"]["tracking"]
        self.assertEqual(tracking["trackingCode"], "ABCD1234")
        self.assertEqual(tracking["orderStatus"], "pending_delivery")
        self.assertNotIn("orderId", tracking)
        self.assertNotIn("riderId", tracking)

    def test_unknown_code_stops_before_order_lookup(self):
        with mock.patch.object(services, "order_status_for") as order_status_for:
            response = self.client.get("/api/v1/deliveries/tracking/NOPE0000")

        self.assertEqual(response.status_code, 404)
        order_status_for.assert_not_called()
