from __future__ import annotations

from rest_framework import serializers

from apps.users.mongo_serializers import UserSerializer
from apps.utils.payload import remap_keys

from .geo import SORT_BY_DISTANCE, SORT_OPTIONS

class TailorSerializer(serializers.Serializer):
    shop_name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    specialties = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    experience = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    is_available = serializers.BooleanField(required=False)
    business_hours = serializers.DictField(required=False)
    accepts_in_person = serializers.BooleanField(required=False)
    accepts_digital_measurements = serializers.BooleanField(required=False)
    provides_materials = serializers.BooleanField(required=False)

    def to_internal_value(self, data):
        field_mapping = {
            "shopName": "shop_name",
            "isAvailable": "is_available",
            "businessHours": "business_hours",
            "acceptsInPerson": "accepts_in_person",
            "acceptsDigitalMeasurements": "accepts_digital_measurements",
            "providesMaterials": "provides_materials",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        owner = self.context.get("owner")
        payload = {
            "id": str(instance.id),
            "userId": str(instance.user_id),
            "shopName": instance.shop_name,
            "description": instance.description,
            "specialties": list(instance.specialties or []),
            "experience": instance.experience,
            "rating": instance.rating,
            "reviewCount": instance.review_count,
            "isAvailable": instance.is_available,
            "businessHours": dict(instance.business_hours or {}),
            "portfolio": list(instance.portfolio or []),
            "acceptsInPerson": instance.accepts_in_person,
            "acceptsDigitalMeasurements": instance.accepts_digital_measurements,
            "providesMaterials": instance.provides_materials,
            "createdAt": instance.created_at,
        }
        if owner is not None:
            payload["user"] = UserSerializer(owner).data
        if "distance" in self.context:
            distance = self.context["distance"]
            payload["distance"] = round(distance, 2) if distance is not None else None
        return payload

class TailorSearchSerializer(serializers.Serializer):
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    radius = serializers.FloatField(required=False, min_value=0)
    specialties = serializers.CharField(required=False, allow_blank=True)
    min_rating = serializers.FloatField(required=False, min_value=0, max_value=5)
    sort_by = serializers.ChoiceField(choices=SORT_OPTIONS, required=False, default=SORT_BY_DISTANCE)

    def to_internal_value(self, data):
        field_mapping = {
            "latitude": "lat",
            "longitude": "lng",
            "minRating": "min_rating",
            "sortBy": "sort_by",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def validate(self, attrs):
        if ("lat" in attrs) != ("lng" in attrs):
            raise serializers.ValidationError("lat and lng must be provided together")
        return attrs

class PortfolioSerializer(serializers.Serializer):
    images = serializers.ListField(child=serializers.URLField(), min_length=1)
