from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import object_id_str, point_to_dict, remap_keys

from .transitions import DELIVERY_STATUSES

class LocationSerializer(serializers.Serializer):
    latitude = serializers.FloatField(min_value=-90, max_value=90)
    longitude = serializers.FloatField(min_value=-180, max_value=180)

    def to_internal_value(self, data):
        return super().to_internal_value(remap_keys(data, {"lat": "latitude", "lng": "longitude"}))

class DeliverySerializer(serializers.Serializer):
    order_id = serializers.CharField()
    pickup_address = serializers.CharField()
    delivery_address = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    delivery_fee = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)

    def to_internal_value(self, data):
        field_mapping = {
            "orderId": "order_id",
            "pickupAddress": "pickup_address",
            "deliveryAddress": "delivery_address",
            "deliveryFee": "delivery_fee",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        return {
            "id": str(instance.id),
            "orderId": str(instance.order_id),
            "riderId": object_id_str(instance.rider_id),
            "trackingCode": instance.tracking_code,
            "status": instance.status,
            "pickupAddress": instance.pickup_address,
            "deliveryAddress": instance.delivery_address,
            "currentLocation": point_to_dict(instance.current_location),
            "pickupDate": instance.pickup_date,
            "deliveryDate": instance.delivery_date,
            "notes": instance.notes,
            "deliveryFee": instance.delivery_fee,
            "version": instance.version,
            "createdAt": instance.created_at,
            "updatedAt": instance.updated_at,
        }

class TrackingSerializer(serializers.Serializer):
    """Public view of a delivery; carries no internal ids."""

    def to_representation(self, instance):
        return {
            "trackingCode": instance["tracking_code"],
            "status": instance["status"],
            "pickupDate": instance["pickup_date"],
            "deliveryDate": instance["delivery_date"],
            "currentLocation": point_to_dict(instance["current_location"]),
            "orderStatus": instance["order_status"],
        }

class AssignRiderSerializer(serializers.Serializer):
    rider_id = serializers.CharField()

    def to_internal_value(self, data):
        return super().to_internal_value(remap_keys(data, {"riderId": "rider_id"}))

class DeliveryStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=DELIVERY_STATUSES)
    current_location = LocationSerializer(required=False, allow_null=True)

    def to_internal_value(self, data):
        return super().to_internal_value(remap_keys(data, {"currentLocation": "current_location"}))
