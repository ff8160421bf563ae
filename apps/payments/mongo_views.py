from __future__ import annotations

from rest_framework import permissions, viewsets
from rest_framework.decorators import action

from apps.utils import api_success

from . import services
from .mongo_serializers import CreatePaymentIntentSerializer, PaymentSerializer

class PaymentViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["post"], url_path="create-payment-intent")
    def create_payment_intent(self, request):
        serializer = CreatePaymentIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        result = services.create_payment_intent(
            request.user,
            order_id=params.get("order_id"),
            amount=params.get("amount"),
            currency=params.get("currency"),
        )
        return api_success(
            "Payment intent created successfully",
            {
                "clientSecret": result["client_secret"],
                "paymentId": result["payment_id"],
            },
        )

    @action(detail=False, methods=["post"], permission_classes=[permissions.AllowAny], authentication_classes=[])
    def webhook(self, request):
        # Signature verification needs the raw bytes exactly as sent.
        result = services.handle_webhook(request.body, request.META.get("HTTP_STRIPE_SIGNATURE"))
        return api_success("Webhook received", result)

    @action(detail=False, methods=["get"], url_path=r"order/(?P<order_id>[^/.]+)")
    def by_order(self, request, order_id=None):
        payment = services.get_for_order(request.user, order_id)
        return api_success(
            "Payment retrieved successfully",
            {
                "payment": PaymentSerializer(payment).data,
            },
        )

    @action(detail=True, methods=["put"], url_path="release-escrow")
    def release_escrow(self, request, pk=None):
        payment = services.release_escrow(request.user, pk)
        return api_success(
            "Escrow released successfully",
            {
                "payment": PaymentSerializer(payment).data,
            },
        )

    @action(detail=True, methods=["put"])
    def refund(self, request, pk=None):
        payment, result = services.refund(request.user, pk)
        return api_success(
            "Payment refunded successfully",
            {
                "payment": PaymentSerializer(payment).data,
                "refund": result,
            },
        )
