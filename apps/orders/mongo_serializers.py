from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import object_id_str, remap_keys

from .mongo_models import MATERIAL_SOURCES, ORDER_STATUSES

class OrderSerializer(serializers.Serializer):
    tailor_id = serializers.CharField()
    measurement_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    material_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    material_quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    order_type = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    instructions = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    material_source = serializers.ChoiceField(choices=MATERIAL_SOURCES, required=False)
    tailoring_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    delivery_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    estimated_completion_date = serializers.DateTimeField(required=False, allow_null=True)

    def to_internal_value(self, data):
        field_mapping = {
            "tailorId": "tailor_id",
            "measurementId": "measurement_id",
            "materialId": "material_id",
            "materialQuantity": "material_quantity",
            "quantity": "material_quantity",
            "orderType": "order_type",
            "materialSource": "material_source",
            "tailoringPrice": "tailoring_price",
            "deliveryPrice": "delivery_price",
            "estimatedCompletionDate": "estimated_completion_date",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        return {
            "id": str(instance.id),
            "customerId": str(instance.customer_id),
            "tailorId": str(instance.tailor_id),
            "measurementId": object_id_str(instance.measurement_id),
            "materialId": object_id_str(instance.material_id),
            "materialQuantity": instance.material_quantity,
            "orderType": instance.order_type,
            "description": instance.description,
            "instructions": instance.instructions,
            "materialSource": instance.material_source,
            "pricing": {
                "tailoringPrice": instance.tailoring_price,
                "materialPrice": instance.material_price,
                "deliveryPrice": instance.delivery_price,
                "totalPrice": instance.total_price,
            },
            "paymentStatus": instance.payment_status,
            "isPaid": instance.is_paid,
            "paidAt": instance.paid_at,
            "paymentId": object_id_str(instance.payment_id),
            "status": instance.status,
            "estimatedCompletionDate": instance.estimated_completion_date,
            "actualCompletionDate": instance.actual_completion_date,
            "createdAt": instance.created_at,
            "updatedAt": instance.updated_at,
        }

class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ORDER_STATUSES)
    estimated_completion_date = serializers.DateTimeField(required=False, allow_null=True)

    def to_internal_value(self, data):
        return super().to_internal_value(
            remap_keys(data, {"estimatedCompletionDate": "estimated_completion_date"})
        )
