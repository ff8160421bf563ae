from __future__ import annotations

import logging
from typing import Tuple

from apps.utils.exceptions import InvalidRequest, NotAuthorized, NotFound

from .mongo_models import BODY_FIELDS, MeasurementSet
from .repositories import measurement_repository
from .units import INCHES, POUNDS, UnknownUnitError, convert_unit, convert_weight, to_number
from .validation import ValidationReport, validate_measurement_set

logger = logging.getLogger(__name__)

def to_canonical(data: dict, unit: str = INCHES, weight_unit: str = POUNDS) -> dict:
    """Convert body fields to inches and weight to pounds; absent values become None."""
    converted = dict(data)
    try:
        for name in BODY_FIELDS:
            if name in data:
                number = to_number(data[name])
                converted[name] = convert_unit(number, unit, INCHES) if number is not None else None
        if "weight" in data:
            number = to_number(data["weight"])
            converted["weight"] = convert_weight(number, weight_unit, POUNDS) if number is not None else None
    except UnknownUnitError as exc:
        raise InvalidRequest(str(exc)) from exc
    return converted

def get_measurement(user, measurement_id) -> MeasurementSet:
    measurement = measurement_repository().get(measurement_id)
    if measurement is None:
        raise NotFound("Measurement not found")
    if measurement.user_id != user.id and not user.is_admin:
        raise NotAuthorized("You can only access your own measurements")
    return measurement

def _owned_measurement(user, measurement_id) -> MeasurementSet:
    measurement = measurement_repository().get(measurement_id)
    if measurement is None:
        raise NotFound("Measurement not found")
    if measurement.user_id != user.id:
        raise NotAuthorized("You can only modify your own measurements")
    return measurement

def list_measurements(user) -> list[MeasurementSet]:
    return measurement_repository().filter(order_by="-created_at", user_id=user.id)

def create_measurement(user, data: dict, unit: str = INCHES, weight_unit: str = POUNDS) -> Tuple[MeasurementSet, ValidationReport]:
    values = to_canonical(data, unit, weight_unit)
    make_default = bool(values.pop("is_default", False))

    repository = measurement_repository()
    if not repository.exists(user_id=user.id):
        make_default = True

    measurement = MeasurementSet(user_id=user.id, **values)
    repository.add(measurement)
    if make_default:
        repository.set_default(measurement)

    report = validate_measurement_set(measurement.body_values(), display_unit=unit)
    logger.info("User %s saved measurement set %s (%s)", user.id, measurement.id, report.overall)
    return measurement, report

def update_measurement(user, measurement_id, data: dict, unit: str = INCHES, weight_unit: str = POUNDS) -> Tuple[MeasurementSet, ValidationReport]:
    measurement = _owned_measurement(user, measurement_id)
    values = to_canonical(data, unit, weight_unit)
    make_default = bool(values.pop("is_default", False))

    # Only the submitted fields are written; is_default moves through set_default alone.
    repository = measurement_repository()
    repository.update(measurement, values)
    if make_default and not measurement.is_default:
        repository.set_default(measurement)

    return measurement, validate_measurement_set(measurement.body_values(), display_unit=unit)

def delete_measurement(user, measurement_id) -> None:
    measurement = _owned_measurement(user, measurement_id)
    measurement_repository().delete(measurement)

def set_default_measurement(user, measurement_id) -> MeasurementSet:
    measurement = _owned_measurement(user, measurement_id)
    measurement = measurement_repository().set_default(measurement)
    logger.info("User %s default measurement set is now %s", user.id, measurement.id)
    return measurement

def measurement_report(user, measurement_id, unit: str = INCHES) -> ValidationReport:
    measurement = get_measurement(user, measurement_id)
    try:
        return validate_measurement_set(measurement.body_values(), display_unit=unit)
    except UnknownUnitError as exc:
        raise InvalidRequest(str(exc)) from exc
