from __future__ import annotations

import json
from decimal import Decimal
from unittest import mock

from django.test import SimpleTestCase

from apps.orders.mongo_models import Order
from apps.payments import gateway
from apps.payments.mongo_models import Payment
from apps.payments.services import parse_amount, to_minor_units
from apps.tailors.mongo_models import Tailor
from apps.users.mongo_models import ROLE_ADMIN, ROLE_TAILOR
from apps.utils.exceptions import InvalidRequest, PaymentGatewayError
from apps.utils.repository import get_repository
from apps.utils.testing import MemoryBackendTestCase, make_user

class AmountTests(SimpleTestCase):

    def test_minor_units(self):
        self.assertEqual(to_minor_units(Decimal("49.99")), 4999)
        self.assertEqual(to_minor_units(Decimal("0.005")), 1)

    def test_parse_amount(self):
        self.assertEqual(parse_amount("12.50"), Decimal("12.50"))
        self.assertEqual(parse_amount(30), Decimal("30"))
        for bad in (None, "", "abc", 0, -5, "NaN", True):
            with self.assertRaises(InvalidRequest):
                parse_amount(bad)

class GatewaySelectionTests(SimpleTestCase):

    def test_real_key_detection(self):
        self.assertTrue(gateway.is_real_stripe_key("sk_test_51Habc"))
        self.assertFalse(gateway.is_real_stripe_key(""))
        self.assertFalse(gateway.is_real_stripe_key(None))
        self.assertFalse(gateway.is_real_stripe_key("pk_test_51Habc"))
        self.assertFalse(gateway.is_real_stripe_key("sk_test_yourstripetestkey"))

    def test_mock_without_key(self):
        with self.settings(STRIPE_SECRET_KEY=""):
            self.assertIsInstance(gateway.get_gateway(), gateway.MockGateway)

    def test_stripe_with_key(self):
        with self.settings(STRIPE_SECRET_KEY="sk_test_51Habc", STRIPE_WEBHOOK_SECRET="whsec_1"):
            selected = gateway.get_gateway()

        self.assertIsInstance(selected, gateway.StripeGateway)
        self.assertEqual(selected.webhook_secret, "whsec_1")

    def test_mock_intent_shape(self):
        intent = gateway.MockGateway().create_intent(1000, "usd", {})

        self.assertTrue(intent.id.startswith("mock_payment_"))
        self.assertTrue(intent.client_secret.startswith("mock_client_secret_"))

    def test_stripe_refund_error_is_translated(self):
        stripe_gateway = gateway.StripeGateway("sk_test_51Habc")

        with mock.patch.object(gateway.stripe.Refund, "create", side_effect=gateway.stripe.StripeError("declined")):
            with self.assertRaises(PaymentGatewayError):
                stripe_gateway.refund("pi_123")

class EscrowTests(MemoryBackendTestCase):

    def setUp(self):
        super().setUp()
        self.customer = make_user()
        self.tailor_user = make_user(role=ROLE_TAILOR)
        tailor = get_repository(Tailor).add(Tailor(user_id=self.tailor_user.id, shop_name="Selvedge"))
        self.order = get_repository(Order).add(
            Order(
                customer_id=self.customer.id,
                tailor_id=tailor.id,
                order_type="suit",
                tailoring_price=Decimal("250"),
                total_price=Decimal("250"),
            )
        )

    def _create_intent(self, **body):
        self.client.force_authenticate(user=self.customer)
        body.setdefault("orderId", str(self.order.id))
        return self.client.post("/api/v1/payments/create-payment-intent", body, format="json")

    def _webhook(self, event_type, intent_id, **intent):
        payload = json.dumps({"type": event_type, "data": {"object": {"id": intent_id, **intent}}})
        return self.anonymous_client().post("/api/v1/payments/webhook", payload, content_type="application/json")

    def _held_payment(self):
        intent_id = self._create_intent().data["data"]["paymentId"]
        self._webhook("payment_intent.succeeded", intent_id)
        return get_repository(Payment).first(payment_intent_id=intent_id)

    def test_intent_charges_order_total(self):
        response = self._create_intent(amount=1)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["data"]["clientSecret"].startswith("mock_client_secret_"))
        payment = get_repository(Payment).first(order_id=self.order.id)
        self.assertEqual(payment.amount, Decimal("250"))
        self.assertEqual(payment.status, "pending")
        self.assertEqual(payment.currency, "USD")
        self.assertEqual(payment.payment_intent_id, response.data["data"]["paymentId"])

    def test_intent_metadata(self):
        with mock.patch.object(gateway.MockGateway, "create_intent", autospec=True) as create_intent:
            create_intent.return_value = gateway.GatewayIntent(id="mock_payment_1", client_secret="mock_client_secret_1")
            self._create_intent()

        _, amount, currency, metadata = create_intent.call_args.args
        self.assertEqual((amount, currency), (25000, "usd"))
        self.assertEqual(metadata["orderId"], str(self.order.id))
        self.assertEqual(metadata["customerId"], str(self.customer.id))
        self.assertEqual(metadata["tailorId"], str(self.order.tailor_id))

    def test_intent_without_order_uses_amount(self):
        response = self._create_intent(orderId="64b7f0c2a1b2c3d4e5f60718", amount="19.99")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(get_repository(Payment).filter(), [])

    def test_intent_without_order_needs_valid_amount(self):
        self.assertEqual(self._create_intent(orderId="", amount="-3").status_code, 400)
        self.assertEqual(self._create_intent(orderId="").status_code, 400)

    def test_only_customer_pays(self):
        self.client.force_authenticate(user=self.tailor_user)

        response = self.client.post(
            "/api/v1/payments/create-payment-intent", {"orderId": str(self.order.id)}, format="json"
        )

        self.assertEqual(response.status_code, 403)

    def test_success_webhook_moves_funds_to_escrow(self):
        intent_id = self._create_intent().data["data"]["paymentId"]

        response = self._webhook(
            "payment_intent.succeeded", intent_id, charges={"data": [{"receipt_url": "https://pay.example/r/1"}]}
        )

        self.assertEqual(response.status_code, 200)
        payment = get_repository(Payment).first(payment_intent_id=intent_id)
        self.assertEqual(payment.status, "held_in_escrow")
        self.assertEqual(payment.receipt_url, "https://pay.example/r/1")
        order = get_repository(Order).get(self.order.id)
        self.assertEqual(order.payment_status, "in_escrow")
        self.assertTrue(order.is_paid)
        self.assertEqual(order.payment_id, payment.id)

        self.assertEqual(self._create_intent().status_code, 400)

    def test_duplicate_and_unknown_events_are_acknowledged(self):
        payment = self._held_payment()

        again = self._webhook("payment_intent.succeeded", payment.payment_intent_id)
        stray = self._webhook("payment_intent.succeeded", "pi_unknown")
        other = self._webhook("charge.dispute.created", payment.payment_intent_id)

        for response in (again, stray, other):
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.data["data"], {"received": True})
        self.assertEqual(get_repository(Payment).get(payment.id).version, payment.version)

    def test_late_failure_after_release_is_ignored(self):
        payment = self._held_payment()
        self.client.force_authenticate(user=self.customer)
        self.client.put(f"/api/v1/payments/{payment.id}/release-escrow")

        self._webhook("payment_intent.payment_failed", payment.payment_intent_id)

        self.assertEqual(get_repository(Payment).get(payment.id).status, "released")

    def test_malformed_webhook(self):
        response = self.anonymous_client().post("/api/v1/payments/webhook", "not json", content_type="application/json")

        self.assertEqual(response.status_code, 400)

    def test_customer_releases_escrow(self):
        payment = self._held_payment()

        self.client.force_authenticate(user=self.tailor_user)
        self.assertEqual(self.client.put(f"/api/v1/payments/{payment.id}/release-escrow").status_code, 403)

        self.client.force_authenticate(user=self.customer)
        response = self.client.put(f"/api/v1/payments/{payment.id}/release-escrow")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["payment"]["status"], "released")
        self.assertIsNotNone(response.data["data"]["payment"]["escrowReleaseDate"])
        self.assertEqual(get_repository(Order).get(self.order.id).payment_status, "paid")

        again = self.client.put(f"/api/v1/payments/{payment.id}/release-escrow")
        self.assertEqual(again.status_code, 400)

    def test_tailor_refunds(self):
        payment = self._held_payment()

        self.client.force_authenticate(user=self.customer)
        self.assertEqual(self.client.put(f"/api/v1/payments/{payment.id}/refund").status_code, 403)

        self.client.force_authenticate(user=self.tailor_user)
        response = self.client.put(f"/api/v1/payments/{payment.id}/refund")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["data"]["payment"]["status"], "refunded")
        self.assertEqual(response.data["data"]["refund"]["status"], "succeeded")
        order = get_repository(Order).get(self.order.id)
        self.assertEqual((order.status, order.payment_status), ("cancelled", "refunded"))

    def test_pending_payment_cannot_be_refunded(self):
        self._create_intent()
        payment = get_repository(Payment).first(order_id=self.order.id)
        self.client.force_authenticate(user=make_user(role=ROLE_ADMIN))

        response = self.client.put(f"/api/v1/payments/{payment.id}/refund")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["data"], {"current": "pending", "requested": "refunded"})

    def test_processor_refund_failure_marks_payment_failed(self):
        payment = self._held_payment()
        self.client.force_authenticate(user=self.tailor_user)

        with mock.patch.object(gateway.MockGateway, "refund", side_effect=PaymentGatewayError("card_declined")):
            response = self.client.put(f"/api/v1/payments/{payment.id}/refund")

        self.assertEqual(response.status_code, 502)
        self.assertEqual(get_repository(Payment).get(payment.id).status, "failed")
        self.assertEqual(get_repository(Order).get(self.order.id).payment_status, "in_escrow")

    def test_payment_by_order(self):
        payment = self._held_payment()

        self.client.force_authenticate(user=self.tailor_user)
        response = self.client.get(f"/api/v1/payments/order/{self.order.id}")

        self.assertEqual(response.data["data"]["payment"]["id"], str(payment.id))

        self.client.force_authenticate(user=make_user())
        self.assertEqual(self.client.get(f"/api/v1/payments/order/{self.order.id}").status_code, 403)
