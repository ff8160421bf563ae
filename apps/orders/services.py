from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from apps.materials.mongo_models import Material
from apps.measurements.mongo_models import MeasurementSet
from apps.tailors.mongo_models import Tailor
from apps.tailors.services import get_tailor_for_user
from apps.users.mongo_models import ROLE_CUSTOMER
from apps.users.permissions import require_role
from apps.utils.exceptions import IllegalTransition, InvalidRequest, NotAuthorized, NotFound
from apps.utils.repository import get_repository

from .mongo_models import MATERIAL_SOURCE_TAILOR, STATUS_COMPLETED, Order

logger = logging.getLogger(__name__)

def get_order(order_id) -> Order:
    order = get_repository(Order).get(order_id)
    if order is None:
        raise NotFound("Order not found")
    return order

def is_order_customer(user, order: Order) -> bool:
    return getattr(user, "id", None) is not None and order.customer_id == user.id

def is_order_tailor(user, order: Order) -> bool:
    profile = get_tailor_for_user(user)
    return profile is not None and profile.id == order.tailor_id

def get_order_for(user, order_id) -> Order:
    order = get_order(order_id)
    if not (user.is_admin or is_order_customer(user, order) or is_order_tailor(user, order)):
        raise NotAuthorized("You can only view your own orders")
    return order

def list_orders(user, status: str | None = None) -> list[Order]:
    criteria = {}
    if status:
        criteria["status"] = status

    repository = get_repository(Order)
    if user.is_admin:
        return repository.filter(order_by="-created_at", **criteria)

    orders = {order.id: order for order in repository.filter(customer_id=user.id, **criteria)}
    profile = get_tailor_for_user(user)
    if profile is not None:
        for order in repository.filter(tailor_id=profile.id, **criteria):
            orders.setdefault(order.id, order)
    return sorted(orders.values(), key=lambda order: order.created_at, reverse=True)

def create_order(user, data: dict) -> Order:
    require_role(user, ROLE_CUSTOMER, message="Only customers can place orders")
    data = dict(data)

    tailor = get_repository(Tailor).get(data.pop("tailor_id"))
    if tailor is None:
        raise NotFound("Tailor not found")
    if not tailor.is_available:
        raise InvalidRequest("Tailor is not accepting orders")

    measurement_id = data.pop("measurement_id", None)
    if measurement_id:
        measurement = get_repository(MeasurementSet).get(measurement_id)
        if measurement is None or measurement.user_id != user.id:
            raise InvalidRequest("Measurement not found")
        data["measurement_id"] = measurement.id

    material_id = data.pop("material_id", None)
    if material_id:
        material = get_repository(Material).get(material_id)
        if material is None or material.tailor_id != tailor.id or not material.is_available:
            raise InvalidRequest("Material is not available from this tailor")
        quantity = Decimal(data.get("material_quantity") or 1)
        if quantity > Decimal(material.quantity_available or 0):
            raise InvalidRequest("Not enough material in stock")
        data.update(
            material_id=material.id,
            material_quantity=quantity,
            material_source=MATERIAL_SOURCE_TAILOR,
            material_price=(Decimal(material.price_per_yard) * quantity).quantize(Decimal("0.01")),
        )

    order = Order(customer_id=user.id, tailor_id=tailor.id, **data)
    order.compute_total()
    get_repository(Order).add(order)
    logger.info("Order %s placed by %s with tailor %s (total %s)", order.id, user.id, tailor.id, order.total_price)
    return order

def update_order_status(user, order_id, new_status: str, **changes) -> Order:
    order = get_order(order_id)
    if not (user.is_admin or is_order_tailor(user, order)):
        raise NotAuthorized("Only the order's tailor can update its status")
    if order.is_terminal:
        raise IllegalTransition(order.status, new_status, f"Order is already {order.status}")

    previous = order.status
    order.status = new_status
    for key, value in changes.items():
        setattr(order, key, value)
    if new_status == STATUS_COMPLETED and order.actual_completion_date is None:
        order.actual_completion_date = datetime.utcnow()

    get_repository(Order).save(order)
    logger.info("Order %s status %s -> %s", order.id, previous, new_status)
    return order

def apply_order_changes(order_id, **changes) -> Order | None:
    """Side-effect update from the delivery and payment workflows."""
    repository = get_repository(Order)
    order = repository.get(order_id)
    if order is None:
        logger.warning("Order %s missing while applying %s", order_id, sorted(changes))
        return None
    for key, value in changes.items():
        setattr(order, key, value)
    return repository.save(order)
