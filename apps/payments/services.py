"""
Escrow payment lifecycle.

Funds are captured into escrow when the processor reports success, released
to the tailor on customer confirmation, or refunded by the tailor. Every
status change goes through the transition table and a compare-and-set on
``(status, version)``.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from django.conf import settings

from apps.orders.mongo_models import (
    PAYMENT_IN_ESCROW,
    PAYMENT_PAID,
    PAYMENT_REFUNDED,
    STATUS_CANCELLED,
    Order,
)
from apps.orders.services import apply_order_changes, get_order, is_order_customer, is_order_tailor
from apps.utils.exceptions import (
    ConcurrentModification,
    IllegalTransition,
    InvalidRequest,
    NotAuthorized,
    NotFound,
    PaymentGatewayError,
    PersistenceUnavailable,
)
from apps.utils.repository import get_repository

from .gateway import get_gateway
from .mongo_models import Payment
from .transitions import (
    FAILED,
    HELD_IN_ESCROW,
    PENDING,
    PROCESSING,
    REFUNDABLE_STATUSES,
    REFUNDED,
    RELEASED,
    TERMINAL_STATUSES,
    can_transition,
)

logger = logging.getLogger(__name__)

EVENT_PROCESSING = "payment_intent.processing"
EVENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_FAILED = "payment_intent.payment_failed"

def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def parse_amount(raw) -> Decimal:
    if raw is None or raw == "" or isinstance(raw, bool):
        raise InvalidRequest("Amount is required when order is unavailable")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidRequest("Invalid amount provided") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidRequest("Invalid amount provided")
    return amount

def get_payment(payment_id) -> Payment:
    payment = get_repository(Payment).get(payment_id)
    if payment is None:
        raise NotFound("Payment not found")
    return payment

def transition(payment: Payment, target: str, **changes) -> Payment:
    if not can_transition(payment.status, target):
        raise IllegalTransition(payment.status, target, f"Payment cannot move from {payment.status} to {target}")
    expected = {"status": payment.status, "version": payment.version}
    previous = payment.status
    if not get_repository(Payment).compare_and_set(payment, expected, {"status": target, **changes}):
        raise ConcurrentModification()
    logger.info("Payment %s status %s -> %s", payment.id, previous, target)
    return payment

def _resolve_order(order_id) -> Optional[Order]:
    if not order_id:
        return None
    try:
        order = get_repository(Order).get(order_id)
    except PersistenceUnavailable:
        logger.warning("Order lookup for %s failed; charging the requested amount", order_id)
        return None
    if order is None:
        logger.warning("Order %s not found; charging the requested amount", order_id)
    return order

def _record_intent(order: Order, intent_id: str, amount: Decimal, currency: str) -> None:
    payments = get_repository(Payment)
    try:
        existing = payments.first(order_id=order.id)
        if existing is None:
            payments.add(
                Payment(
                    order_id=order.id,
                    payment_intent_id=intent_id,
                    amount=amount,
                    currency=currency.upper(),
                    payment_method="card",
                    status=PENDING,
                )
            )
            return
        if existing.status in (RELEASED, REFUNDED):
            logger.warning("Payment %s is already %s; not resetting", existing.id, existing.status)
            return
        payments.compare_and_set(
            existing,
            {"status": existing.status, "version": existing.version},
            {"status": PENDING, "payment_intent_id": intent_id, "amount": amount},
        )
    except PersistenceUnavailable:
        logger.warning("Skipping payment persistence for order %s: storage unavailable", order.id)

def create_payment_intent(user, order_id=None, amount=None, currency: str | None = None) -> Dict[str, str]:
    currency = (currency or settings.PAYMENT_CURRENCY).lower()
    order = _resolve_order(order_id)

    charge = None
    if order is not None:
        if not is_order_customer(user, order):
            raise NotAuthorized("You can only pay for your own orders")
        if order.payment_status in (PAYMENT_IN_ESCROW, PAYMENT_PAID):
            raise InvalidRequest("Order has already been paid")
        if order.total_price and Decimal(order.total_price) > 0:
            charge = Decimal(order.total_price)
    if charge is None:
        charge = parse_amount(amount)

    metadata = {
        "orderId": str(order.id) if order is not None else "no-order",
        "customerId": str(order.customer_id if order is not None else user.id),
        "tailorId": str(order.tailor_id) if order is not None else "no-tailor",
    }
    intent = get_gateway().create_intent(to_minor_units(charge), currency, metadata)

    if order is not None:
        _record_intent(order, intent.id, charge, currency)

    logger.info("Created payment intent %s for %s %s", intent.id, charge, currency.upper())
    return {"client_secret": intent.client_secret, "payment_id": intent.id}

def _receipt_url(intent: Dict[str, Any]) -> Optional[str]:
    charges = (intent.get("charges") or {}).get("data") or []
    if charges:
        return charges[0].get("receipt_url")
    latest = intent.get("latest_charge")
    return latest.get("receipt_url") if isinstance(latest, dict) else None

def handle_webhook(payload, signature: str | None) -> Dict[str, Any]:
    event = get_gateway().construct_event(payload, signature)
    event_type = event.get("type")
    intent = (event.get("data") or {}).get("object") or {}

    if event_type not in (EVENT_PROCESSING, EVENT_SUCCEEDED, EVENT_FAILED):
        logger.info("Unhandled event type %s", event_type)
        return {"received": True}

    payment = get_repository(Payment).first(payment_intent_id=intent.get("id"))
    if payment is None:
        logger.warning("Webhook %s for unknown payment intent %s", event_type, intent.get("id"))
        return {"received": True}

    target = {EVENT_PROCESSING: PROCESSING, EVENT_SUCCEEDED: HELD_IN_ESCROW, EVENT_FAILED: FAILED}[event_type]
    if payment.status == target:
        return {"received": True}

    changes = {"receipt_url": _receipt_url(intent)} if target == HELD_IN_ESCROW else {}
    try:
        transition(payment, target, **changes)
    except IllegalTransition:
        logger.warning("Ignoring %s for payment %s in status %s", event_type, payment.id, payment.status)
        return {"received": True}

    if target == HELD_IN_ESCROW:
        apply_order_changes(
            payment.order_id,
            payment_status=PAYMENT_IN_ESCROW,
            is_paid=True,
            paid_at=datetime.utcnow(),
            payment_id=payment.id,
        )
    return {"received": True}

def get_for_order(user, order_id) -> Payment:
    order = get_order(order_id)
    if not (user.is_admin or is_order_customer(user, order) or is_order_tailor(user, order)):
        raise NotAuthorized("You cannot view this payment")
    payment = get_repository(Payment).first(order_id=order.id)
    if payment is None:
        raise NotFound("Payment not found")
    return payment

def release_escrow(user, payment_id) -> Payment:
    payment = get_payment(payment_id)
    order = get_order(payment.order_id)
    if not (user.is_admin or is_order_customer(user, order)):
        raise NotAuthorized("Only the customer can release escrow")
    if payment.status != HELD_IN_ESCROW:
        raise IllegalTransition(payment.status, RELEASED, "Payment is not in escrow")

    transition(payment, RELEASED, escrow_release_date=datetime.utcnow())
    apply_order_changes(order.id, payment_status=PAYMENT_PAID)
    return payment

def refund(user, payment_id) -> tuple[Payment, Dict[str, Any]]:
    payment = get_payment(payment_id)
    order = get_order(payment.order_id)
    if not (user.is_admin or is_order_tailor(user, order)):
        raise NotAuthorized("Only the order's tailor can refund this payment")
    if payment.status not in REFUNDABLE_STATUSES:
        raise IllegalTransition(payment.status, REFUNDED, "Payment cannot be refunded")

    try:
        result = get_gateway().refund(payment.payment_intent_id)
    except PaymentGatewayError:
        if payment.status not in TERMINAL_STATUSES:
            try:
                transition(payment, FAILED)
            except ConcurrentModification:
                logger.warning("Payment %s changed while recording refund failure", payment.id)
        raise

    transition(payment, REFUNDED)
    apply_order_changes(order.id, status=STATUS_CANCELLED, payment_status=PAYMENT_REFUNDED)
    return payment, result
