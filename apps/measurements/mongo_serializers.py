from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import remap_keys

from .mongo_models import BODY_FIELDS, MEASUREMENT_TYPES
from .units import INCHES, POUNDS, SIZES, UnknownUnitError, normalize_unit, normalize_weight_unit

class LengthUnitField(serializers.CharField):

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return normalize_unit(value)
        except UnknownUnitError as exc:
            raise serializers.ValidationError(str(exc))

class WeightUnitField(serializers.CharField):

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return normalize_weight_unit(value)
        except UnknownUnitError as exc:
            raise serializers.ValidationError(str(exc))

class MeasurementSetSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    weight = serializers.FloatField(required=False, allow_null=True, min_value=0)
    additional_measurements = serializers.DictField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_default = serializers.BooleanField(required=False)
    measurement_type = serializers.ChoiceField(choices=MEASUREMENT_TYPES, required=False)
    measurement_date = serializers.DateTimeField(required=False)
    unit = LengthUnitField(required=False, default=INCHES, write_only=True)
    weight_unit = WeightUnitField(required=False, default=POUNDS, write_only=True)

    def get_fields(self):
        fields = super().get_fields()
        for name in BODY_FIELDS:
            fields[name] = serializers.FloatField(required=False, allow_null=True, min_value=0)
        return fields

    def to_internal_value(self, data):
        field_mapping = {
            "additionalMeasurements": "additional_measurements",
            "isDefault": "is_default",
            "measurementType": "measurement_type",
            "measurementDate": "measurement_date",
            "weightUnit": "weight_unit",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        payload = {
            "id": str(instance.id),
            "userId": str(instance.user_id),
            "name": instance.name,
            "unit": INCHES,
            "weightUnit": POUNDS,
        }
        for name in BODY_FIELDS:
            payload[name] = getattr(instance, name)
        payload.update({
            "weight": instance.weight,
            "additionalMeasurements": dict(instance.additional_measurements or {}),
            "notes": instance.notes,
            "isDefault": instance.is_default,
            "measurementType": instance.measurement_type,
            "measurementDate": instance.measurement_date,
            "createdAt": instance.created_at,
            "updatedAt": instance.updated_at,
        })
        return payload

class ValidateMeasurementSerializer(serializers.Serializer):
    """Either one ``value``/``type`` pair or a whole ``measurements`` mapping."""

    value = serializers.JSONField(required=False, allow_null=True)
    type = serializers.CharField(required=False)
    measurements = serializers.DictField(required=False)
    unit = LengthUnitField(required=False, default=INCHES)

    def validate(self, attrs):
        if "measurements" not in attrs and "type" not in attrs:
            raise serializers.ValidationError("Provide either measurements or a value and type")
        return attrs

class ConvertSerializer(serializers.Serializer):
    value = serializers.JSONField(allow_null=True)
    from_unit = LengthUnitField()
    to_unit = LengthUnitField()

    def to_internal_value(self, data):
        field_mapping = {
            "fromUnit": "from_unit",
            "toUnit": "to_unit",
            "from": "from_unit",
            "to": "to_unit",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

class BMISerializer(serializers.Serializer):
    height = serializers.JSONField(allow_null=True)
    height_unit = LengthUnitField(required=False, default=INCHES)
    weight = serializers.JSONField(allow_null=True)
    weight_unit = WeightUnitField(required=False, default=POUNDS)

    def to_internal_value(self, data):
        field_mapping = {
            "heightUnit": "height_unit",
            "weightUnit": "weight_unit",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

class SuggestionSerializer(serializers.Serializer):
    type = serializers.CharField()
    size = serializers.ChoiceField(choices=SIZES)
    unit = LengthUnitField(required=False, default=INCHES)

    def to_internal_value(self, data):
        data = remap_keys(data, {"measurementType": "type"})
        if hasattr(data, "get") and isinstance(data.get("size"), str):
            data = dict(data.items())
            data["size"] = data["size"].upper()
        return super().to_internal_value(data)

class ScheduleSerializer(serializers.Serializer):
    tailor_id = serializers.CharField()
    preferred_date = serializers.DateTimeField()
    location = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        field_mapping = {
            "tailorId": "tailor_id",
            "preferredDate": "preferred_date",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))
