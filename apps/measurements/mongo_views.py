from __future__ import annotations

import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action

from apps.tailors.services import get_tailor
from apps.utils import api_success, paginated_payload
from apps.utils.exceptions import InvalidRequest

from .mongo_serializers import (
    BMISerializer,
    ConvertSerializer,
    MeasurementSetSerializer,
    ScheduleSerializer,
    SuggestionSerializer,
    ValidateMeasurementSerializer,
)
from .services import (
    create_measurement,
    delete_measurement,
    get_measurement,
    list_measurements,
    measurement_report,
    set_default_measurement,
    to_canonical,
    update_measurement,
)
from .units import (
    INCHES,
    POUNDS,
    UNIT_SYMBOLS,
    calculate_bmi,
    convert_unit,
    convert_weight,
    format_measurement,
    get_measurement_suggestion,
    validate_measurement,
)
from .validation import validate_measurement_set

logger = logging.getLogger(__name__)

PUBLIC_TOOLS = ("validate", "convert", "bmi", "suggestion")

def _serialize(measurement):
    return MeasurementSetSerializer(measurement).data

def _split_units(validated_data: dict) -> tuple[dict, str, str]:
    data = dict(validated_data)
    unit = data.pop("unit", INCHES)
    weight_unit = data.pop("weight_unit", POUNDS)
    return data, unit, weight_unit

class MeasurementViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action in PUBLIC_TOOLS:
            return [permissions.AllowAny()]
        return super().get_permissions()

    def list(self, request):
        measurements = list_measurements(request.user)
        return api_success(
            "Measurements retrieved successfully",
            paginated_payload(request, "measurements", measurements, _serialize),
        )

    def retrieve(self, request, pk=None):
        return api_success(
            "Measurement retrieved successfully",
            {
                "measurement": _serialize(get_measurement(request.user, pk)),
            },
        )

    def create(self, request):
        serializer = MeasurementSetSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data, unit, weight_unit = _split_units(serializer.validated_data)
        measurement, report = create_measurement(request.user, data, unit, weight_unit)
        return api_success(
            "Measurement created successfully",
            {
                "measurement": _serialize(measurement),
                "validation": report.as_dict(),
            },
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        serializer = MeasurementSetSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data, unit, weight_unit = _split_units(serializer.validated_data)
        measurement, report = update_measurement(request.user, pk, data, unit, weight_unit)
        return api_success(
            "Measurement updated successfully",
            {
                "measurement": _serialize(measurement),
                "validation": report.as_dict(),
            },
        )

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        delete_measurement(request.user, pk)
        return api_success("Measurement deleted successfully")

    @action(detail=True, methods=["post"])
    def default(self, request, pk=None):
        measurement = set_default_measurement(request.user, pk)
        return api_success(
            "Default measurement updated successfully",
            {
                "measurement": _serialize(measurement),
            },
        )

    @action(detail=True, methods=["get"])
    def validation(self, request, pk=None):
        unit = request.query_params.get("unit") or INCHES
        report = measurement_report(request.user, pk, unit)
        return api_success(
            "Measurement validation completed",
            {
                "validation": report.as_dict(),
            },
        )

    @action(detail=False, methods=["post"])
    def validate(self, request):
        serializer = ValidateMeasurementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        unit = params["unit"]

        if "measurements" in params:
            values = to_canonical(params["measurements"], unit)
            report = validate_measurement_set(values, display_unit=unit)
            return api_success(
                "Measurement validation completed",
                {
                    "validation": report.as_dict(),
                },
            )

        check = validate_measurement(params.get("value"), params["type"], unit)
        return api_success(
            "Measurement validation completed",
            {
                "validation": check.as_dict(),
            },
        )

    @action(detail=False, methods=["post"])
    def convert(self, request):
        serializer = ConvertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        converted = convert_unit(params["value"], params["from_unit"], params["to_unit"])
        return api_success(
            "Measurement converted successfully",
            {
                "value": converted,
                "formatted": format_measurement(converted, params["to_unit"]),
                "unit": params["to_unit"],
                "symbol": UNIT_SYMBOLS[params["to_unit"]],
            },
        )

    @action(detail=False, methods=["post"])
    def bmi(self, request):
        serializer = BMISerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        weight_lbs = convert_weight(params["weight"], params["weight_unit"], POUNDS)
        result = calculate_bmi(params["height"], params["height_unit"], weight_lbs or None)
        if result is None:
            raise InvalidRequest("Height and weight must be positive numbers")
        return api_success(
            "BMI calculated successfully",
            {
                "bmi": result.as_dict(),
            },
        )

    @action(detail=False, methods=["get"])
    def suggestion(self, request):
        serializer = SuggestionSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        value = get_measurement_suggestion(params["type"], params["size"], params["unit"])
        return api_success(
            "Measurement suggestion retrieved successfully",
            {
                "type": params["type"],
                "size": params["size"],
                "unit": params["unit"],
                "value": value,
                "formatted": format_measurement(value, params["unit"]) if value is not None else None,
            },
        )

    @action(detail=False, methods=["post"])
    def schedule(self, request):
        serializer = ScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        tailor = get_tailor(params["tailor_id"])
        if not tailor.accepts_in_person:
            raise InvalidRequest("This tailor does not take in-person measurements")

        logger.info("User %s requested an in-person fitting with tailor %s", request.user.id, tailor.id)
        return api_success(
            "Measurement appointment requested",
            {
                "appointment": {
                    "tailorId": str(tailor.id),
                    "customerId": str(request.user.id),
                    "preferredDate": params["preferred_date"],
                    "location": params.get("location", ""),
                    "notes": params.get("notes", ""),
                    "status": "pending",
                },
            },
            status_code=status.HTTP_201_CREATED,
        )
