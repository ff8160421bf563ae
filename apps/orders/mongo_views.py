from __future__ import annotations

from rest_framework import permissions, status, viewsets

from apps.utils import api_success, paginated_payload
from apps.utils.exceptions import InvalidRequest

from .mongo_models import ORDER_STATUSES
from .mongo_serializers import OrderSerializer, OrderStatusUpdateSerializer
from .services import create_order, get_order_for, list_orders, update_order_status

def _serialize(order):
    return OrderSerializer(order).data

class OrderViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):
        status_filter = request.query_params.get("status")
        if status_filter and status_filter not in ORDER_STATUSES:
            raise InvalidRequest(f"Unknown order status: {status_filter}")

        orders = list_orders(request.user, status_filter)
        return api_success(
            "Orders retrieved successfully",
            paginated_payload(request, "orders", orders, _serialize),
        )

    def retrieve(self, request, pk=None):
        return api_success(
            "Order retrieved successfully",
            {
                "order": _serialize(get_order_for(request.user, pk)),
            },
        )

    def create(self, request):
        serializer = OrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = create_order(request.user, serializer.validated_data)
        return api_success(
            "Order created successfully!",
            {
                "order": _serialize(order),
            },
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = dict(serializer.validated_data)
        order = update_order_status(request.user, pk, changes.pop("status"), **changes)
        return api_success(
            "Order updated successfully",
            {
                "order": _serialize(order),
            },
        )
