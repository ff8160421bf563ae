from __future__ import annotations

import logging
from decimal import Decimal

from apps.tailors.services import get_tailor, get_tailor_for_user, is_tailor_owner
from apps.users.mongo_models import ROLE_TAILOR
from apps.users.permissions import require_role
from apps.utils.exceptions import InvalidRequest, NotAuthorized, NotFound
from apps.utils.repository import get_repository

from .mongo_models import Material

logger = logging.getLogger(__name__)

def get_material(material_id) -> Material:
    material = get_repository(Material).get(material_id)
    if material is None:
        raise NotFound("Material not found")
    return material

def list_available(material_type: str | None = None) -> list[Material]:
    criteria = {"is_available": True}
    if material_type:
        criteria["type"] = material_type
    return get_repository(Material).filter(order_by="-created_at", **criteria)

def list_for_tailor(tailor_id) -> list[Material]:
    tailor = get_tailor(tailor_id)
    return get_repository(Material).filter(order_by="-created_at", tailor_id=tailor.id)

def _owned_material(user, material_id) -> Material:
    material = get_material(material_id)
    if not is_tailor_owner(user, material.tailor_id):
        raise NotAuthorized("You can only manage your own materials")
    return material

def create_material(user, data: dict) -> Material:
    require_role(user, ROLE_TAILOR, message="Only tailors can add materials")
    profile = get_tailor_for_user(user)
    if profile is None:
        raise InvalidRequest("Create a tailor profile before adding materials")
    material = Material(tailor_id=profile.id, **data)
    get_repository(Material).add(material)
    logger.info("Tailor %s added material %s", profile.id, material.id)
    return material

def update_material(user, material_id, data: dict) -> Material:
    material = _owned_material(user, material_id)
    for key, value in data.items():
        setattr(material, key, value)
    return get_repository(Material).save(material)

def delete_material(user, material_id) -> None:
    material = _owned_material(user, material_id)
    get_repository(Material).delete(material)

def set_quantity(user, material_id, quantity: Decimal) -> Material:
    if quantity < 0:
        raise InvalidRequest("Quantity cannot be negative")
    material = _owned_material(user, material_id)
    material.quantity_available = quantity
    if quantity == 0:
        material.is_available = False
    return get_repository(Material).save(material)
