"""
Payment processor adapters.

``StripeGateway`` talks to Stripe through the official SDK. ``MockGateway``
stands in when no real secret key is configured (local development and the
test-suite) and fabricates identifiers shaped like the real ones.
"""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Dict

import stripe
from django.conf import settings

from apps.utils.exceptions import InvalidRequest, PaymentGatewayError

logger = logging.getLogger(__name__)

PLACEHOLDER_KEY_PATTERN = re.compile(r"yourstripetestkey", re.IGNORECASE)

@dataclass(frozen=True)
class GatewayIntent:
    id: str
    client_secret: str

def is_real_stripe_key(secret_key: str | None) -> bool:
    if not secret_key:
        return False
    return secret_key.lower().startswith("sk_") and not PLACEHOLDER_KEY_PATTERN.search(secret_key)

def _parse_event(payload) -> Dict[str, Any]:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    try:
        event = json.loads(payload)
    except ValueError as exc:
        raise InvalidRequest("Invalid webhook payload") from exc
    if not isinstance(event, dict) or "type" not in event:
        raise InvalidRequest("Invalid webhook payload")
    return event

class PaymentGateway:
    name = "base"

    def create_intent(self, amount: int, currency: str, metadata: Dict[str, str]) -> GatewayIntent:
        raise NotImplementedError

    def refund(self, intent_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    def construct_event(self, payload, signature: str | None) -> Dict[str, Any]:
        raise NotImplementedError

class StripeGateway(PaymentGateway):
    name = "stripe"

    def __init__(self, secret_key: str, webhook_secret: str | None = None) -> None:
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def create_intent(self, amount, currency, metadata):
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                metadata=metadata,
                api_key=self.secret_key,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe PaymentIntent.create failed: %s", exc)
            raise PaymentGatewayError(str(exc.user_message or exc)) from exc
        return GatewayIntent(id=intent["id"], client_secret=intent["client_secret"])

    def refund(self, intent_id):
        try:
            refund = stripe.Refund.create(payment_intent=intent_id, api_key=self.secret_key)
        except stripe.StripeError as exc:
            logger.error("Stripe Refund.create failed for %s: %s", intent_id, exc)
            raise PaymentGatewayError(str(exc.user_message or exc)) from exc
        return {"id": refund["id"], "status": refund["status"]}

    def construct_event(self, payload, signature):
        if not self.webhook_secret:
            raise InvalidRequest("Webhook secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as exc:
            raise InvalidRequest("Invalid webhook payload") from exc
        except stripe.SignatureVerificationError as exc:
            raise InvalidRequest(f"Webhook Error: {exc}") from exc
        return _parse_event(payload)

class MockGateway(PaymentGateway):
    name = "mock"

    @staticmethod
    def _timestamp() -> int:
        return int(time.time() * 1000)

    def create_intent(self, amount, currency, metadata):
        stamp = self._timestamp()
        return GatewayIntent(id=f"mock_payment_{stamp}", client_secret=f"mock_client_secret_{stamp}")

    def refund(self, intent_id):
        return {"id": f"mock_refund_{self._timestamp()}", "status": "succeeded"}

    def construct_event(self, payload, signature):
        return _parse_event(payload)

def get_gateway() -> PaymentGateway:
    secret_key = getattr(settings, "STRIPE_SECRET_KEY", "")
    if is_real_stripe_key(secret_key):
        return StripeGateway(secret_key, getattr(settings, "STRIPE_WEBHOOK_SECRET", None))
    return MockGateway()
