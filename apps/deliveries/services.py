"""
Delivery workflow: creation, rider assignment and rider-driven status updates.

Status changes are compare-and-set writes on ``(status, version)`` so two
riders' requests (or a rider racing an admin) cannot both apply.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

import mongoengine as me

from apps.orders.mongo_models import STATUS_DELIVERED, STATUS_PENDING_DELIVERY, Order
from apps.orders.services import apply_order_changes, get_order, is_order_customer, is_order_tailor
from apps.users.mongo_models import ROLE_RIDER, User
from apps.users.permissions import require_admin, require_role
from apps.utils.exceptions import (
    ConcurrentModification,
    IllegalTransition,
    InvalidRequest,
    NotAuthorized,
    NotFound,
)
from apps.utils.payload import make_point
from apps.utils.repository import get_repository

from .mongo_models import Delivery
from .transitions import (
    ASSIGNABLE_STATUSES,
    ASSIGNED,
    DELIVERED,
    DELIVERY_STATUSES,
    PENDING,
    PICKED_UP,
    TRACKING_CODE_MAX_RETRIES,
    can_transition,
)

logger = logging.getLogger(__name__)

def generate_tracking_code() -> str:
    return uuid.uuid4().hex[:8].upper()

def get_delivery(delivery_id) -> Delivery:
    delivery = get_repository(Delivery).get(delivery_id)
    if delivery is None:
        raise NotFound("Delivery not found")
    return delivery

def create_delivery(
    user,
    order_id,
    pickup_address: str,
    delivery_address: str,
    notes: Optional[str] = None,
    delivery_fee: Decimal = Decimal("0"),
) -> Delivery:
    order = get_order(order_id)
    if not (user.is_admin or is_order_tailor(user, order)):
        raise NotAuthorized("Only the order's tailor can arrange its delivery")
    if order.is_terminal:
        raise InvalidRequest(f"Order is already {order.status}")

    deliveries = get_repository(Delivery)
    if deliveries.exists(order_id=order.id):
        raise InvalidRequest("Delivery already exists for this order")

    delivery = None
    for _ in range(TRACKING_CODE_MAX_RETRIES):
        code = generate_tracking_code()
        if deliveries.exists(tracking_code=code):
            continue
        candidate = Delivery(
            order_id=order.id,
            tracking_code=code,
            status=PENDING,
            pickup_address=pickup_address,
            delivery_address=delivery_address,
            notes=notes,
            delivery_fee=delivery_fee,
        )
        try:
            delivery = deliveries.add(candidate)
        except me.NotUniqueError:
            if deliveries.exists(order_id=order.id):
                raise InvalidRequest("Delivery already exists for this order")
            continue
        break

    if delivery is None:
        raise ConcurrentModification("Could not allocate a unique tracking code. Try again.")

    apply_order_changes(order.id, status=STATUS_PENDING_DELIVERY)
    logger.info("Delivery %s (%s) created for order %s", delivery.id, delivery.tracking_code, order.id)
    return delivery

def _write_status(delivery: Delivery, changes: dict) -> Delivery:
    expected = {"status": delivery.status, "version": delivery.version}
    if not get_repository(Delivery).compare_and_set(delivery, expected, changes):
        raise ConcurrentModification()
    return delivery

def assign_rider(user, delivery_id, rider_id) -> Delivery:
    require_admin(user)
    delivery = get_delivery(delivery_id)

    rider = get_repository(User).get(rider_id)
    if rider is None or rider.role != ROLE_RIDER:
        raise InvalidRequest("Rider not found")
    if delivery.status not in ASSIGNABLE_STATUSES:
        raise IllegalTransition(delivery.status, ASSIGNED, f"Cannot assign a rider to a {delivery.status} delivery")

    _write_status(delivery, {"status": ASSIGNED, "rider_id": rider.id})
    logger.info("Delivery %s assigned to rider %s", delivery.id, rider.id)
    return delivery

def advance_status(user, delivery_id, new_status: str, current_location: Optional[dict] = None) -> Delivery:
    if new_status not in DELIVERY_STATUSES:
        raise InvalidRequest(f"Unknown delivery status: {new_status}")

    delivery = get_delivery(delivery_id)
    if delivery.rider_id is None or delivery.rider_id != user.id:
        raise NotAuthorized("Only the assigned rider can update this delivery")

    previous = delivery.status
    if not can_transition(previous, new_status):
        raise IllegalTransition(previous, new_status, f"Cannot change delivery status from {previous} to {new_status}")

    changes = {"status": new_status}
    now = datetime.utcnow()
    if new_status == PICKED_UP and delivery.pickup_date is None:
        changes["pickup_date"] = now
    if new_status == DELIVERED and delivery.delivery_date is None:
        changes["delivery_date"] = now
    if current_location:
        changes["current_location"] = make_point(current_location["latitude"], current_location["longitude"])

    _write_status(delivery, changes)
    logger.info("Delivery %s status %s -> %s", delivery.id, previous, new_status)

    if new_status == DELIVERED:
        apply_order_changes(delivery.order_id, status=STATUS_DELIVERED)
    return delivery

def update_location(user, delivery_id, latitude: float, longitude: float) -> Delivery:
    delivery = get_delivery(delivery_id)
    if delivery.rider_id is None or delivery.rider_id != user.id:
        raise NotAuthorized("Only the assigned rider can update this delivery")
    return get_repository(Delivery).update(delivery, {"current_location": make_point(latitude, longitude)})

def query_by_order(user, order_id) -> Delivery:
    order = get_order(order_id)
    delivery = get_repository(Delivery).first(order_id=order.id)

    # Outsiders learn nothing about whether a delivery exists; only its rider may see it.
    if not (user.is_admin or is_order_customer(user, order) or is_order_tailor(user, order)):
        if delivery is None or delivery.rider_id != user.id:
            raise NotAuthorized("You cannot view this delivery")
    elif delivery is None:
        raise NotFound("Delivery not found for this order")
    return delivery

def order_status_for(order_id) -> Optional[str]:
    order = get_repository(Order).get(order_id)
    return order.status if order is not None else None

def query_by_tracking_code(code: str) -> dict:
    delivery = get_repository(Delivery).first(tracking_code=(code or "").strip().upper())
    if delivery is None:
        raise NotFound("Delivery not found")
    return {
        "tracking_code": delivery.tracking_code,
        "status": delivery.status,
        "pickup_date": delivery.pickup_date,
        "delivery_date": delivery.delivery_date,
        "current_location": delivery.current_location,
        "order_status": order_status_for(delivery.order_id),
    }

def list_all(user, status: Optional[str] = None) -> list[Delivery]:
    require_admin(user)
    criteria = {"status": status} if status else {}
    return get_repository(Delivery).filter(order_by="-created_at", **criteria)

def list_for_rider(user) -> list[Delivery]:
    require_role(user, ROLE_RIDER, message="Only riders have assigned deliveries")
    return get_repository(Delivery).filter(order_by="-created_at", rider_id=user.id)
