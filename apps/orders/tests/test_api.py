from __future__ import annotations

from decimal import Decimal

from apps.materials.mongo_models import Material
from apps.orders.mongo_models import STATUS_CANCELLED, Order
from apps.tailors.mongo_models import Tailor
from apps.users.mongo_models import ROLE_ADMIN, ROLE_TAILOR
from apps.utils.repository import get_repository
from apps.utils.testing import MemoryBackendTestCase, make_user

class OrderApiTests(MemoryBackendTestCase):

    def setUp(self):
        super().setUp()
        self.tailor_user = make_user(role=ROLE_TAILOR)
        self.tailor = get_repository(Tailor).add(Tailor(user_id=self.tailor_user.id, shop_name="Bespoke"))
        self.customer = make_user()
        self.client.force_authenticate(user=self.customer)

    def _place(self, **body):
        body.setdefault("tailorId", str(self.tailor.id))
        body.setdefault("orderType", "suit")
        body.setdefault("tailoringPrice", "200.00")
        return self.client.post("/api/v1/orders", body, format="json")

    def test_total_is_sum_of_parts(self):
        material = get_repository(Material).add(
            Material(
                tailor_id=self.tailor.id,
                name="Wool",
                type="wool",
                price_per_yard=Decimal("30.00"),
                quantity_available=Decimal("5"),
            )
        )

        response = self._place(materialId=str(material.id), quantity="2.5", deliveryPrice="15.00")

        self.assertEqual(response.status_code, 201)
        pricing = response.data["data"]["order"]["pricing"]
        self.assertEqual(Decimal(str(pricing["materialPrice"])), Decimal("75.00"))
        self.assertEqual(Decimal(str(pricing["totalPrice"])), Decimal("290.00"))
        self.assertEqual(response.data["data"]["order"]["materialSource"], "tailor")
        self.assertEqual(response.data["data"]["order"]["status"], "pending")
        self.assertEqual(response.data["data"]["order"]["paymentStatus"], "unpaid")

    def test_material_stock_is_checked(self):
        material = get_repository(Material).add(
            Material(tailor_id=self.tailor.id, name="Silk", type="silk", price_per_yard=Decimal("40"), quantity_available=Decimal("1"))
        )

        response = self._place(materialId=str(material.id), quantity="3")

        self.assertEqual(response.status_code, 400)

    def test_unknown_tailor(self):
        response = self._place(tailorId="64b7f0c2a1b2c3d4e5f60718")

        self.assertEqual(response.status_code, 404)

    def test_only_customers_place_orders(self):
        self.client.force_authenticate(user=self.tailor_user)

        self.assertEqual(self._place().status_code, 403)

    def test_visibility(self):
        order_id = self._place().data["data"]["order"]["id"]

        self.assertEqual(self.client.get(f"/api/v1/orders/{order_id}").status_code, 200)

        self.client.force_authenticate(user=self.tailor_user)
        listed = self.client.get("/api/v1/orders")
        self.assertEqual([order["id"] for order in listed.data["data"]["orders"]], [order_id])

        self.client.force_authenticate(user=make_user())
        self.assertEqual(self.client.get(f"/api/v1/orders/{order_id}").status_code, 403)
        self.assertEqual(self.client.get("/api/v1/orders").data["data"]["orders"], [])

    def test_tailor_updates_status(self):
        order_id = self._place().data["data"]["order"]["id"]

        self.assertEqual(self.client.put(f"/api/v1/orders/{order_id}", {"status": "confirmed"}, format="json").status_code, 403)

        self.client.force_authenticate(user=self.tailor_user)
        response = self.client.put(f"/api/v1/orders/{order_id}", {"status": "completed"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(response.data["data"]["order"]["actualCompletionDate"])

    def test_terminal_orders_do_not_change(self):
        order_id = self._place().data["data"]["order"]["id"]
        order = get_repository(Order).get(order_id)
        order.status = STATUS_CANCELLED
        get_repository(Order).save(order)
        self.client.force_authenticate(user=make_user(role=ROLE_ADMIN))

        response = self.client.put(f"/api/v1/orders/{order_id}", {"status": "in_progress"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["data"], {"current": "cancelled", "requested": "in_progress"})
