from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import remap_keys

class CreatePaymentIntentSerializer(serializers.Serializer):
    order_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    amount = serializers.JSONField(required=False, allow_null=True)
    currency = serializers.CharField(required=False, max_length=3, min_length=3)

    def to_internal_value(self, data):
        return super().to_internal_value(remap_keys(data, {"orderId": "order_id"}))

class PaymentSerializer(serializers.Serializer):

    def to_representation(self, instance):
        return {
            "id": str(instance.id),
            "orderId": str(instance.order_id),
            "paymentIntentId": instance.payment_intent_id,
            "amount": instance.amount,
            "currency": instance.currency,
            "paymentMethod": instance.payment_method,
            "status": instance.status,
            "escrowReleaseDate": instance.escrow_release_date,
            "transactionFee": instance.transaction_fee,
            "receiptUrl": instance.receipt_url,
            "notes": instance.notes,
            "createdAt": instance.created_at,
            "updatedAt": instance.updated_at,
        }
