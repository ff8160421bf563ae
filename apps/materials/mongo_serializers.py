from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import remap_keys

from .mongo_models import MATERIAL_TYPES

class MaterialSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    type = serializers.ChoiceField(choices=MATERIAL_TYPES, required=False)
    color = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    pattern = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price_per_yard = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    quantity_available = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    image_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_available = serializers.BooleanField(required=False)

    def to_internal_value(self, data):
        field_mapping = {
            "pricePerYard": "price_per_yard",
            "quantityAvailable": "quantity_available",
            "imageUrl": "image_url",
            "isAvailable": "is_available",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        return {
            "id": str(instance.id),
            "tailorId": str(instance.tailor_id),
            "name": instance.name,
            "description": instance.description,
            "type": instance.type,
            "color": instance.color,
            "pattern": instance.pattern,
            "pricePerYard": instance.price_per_yard,
            "quantityAvailable": instance.quantity_available,
            "imageUrl": instance.image_url,
            "isAvailable": instance.is_available,
            "createdAt": instance.created_at,
        }

class QuantitySerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
