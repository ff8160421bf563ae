from __future__ import annotations

from decimal import Decimal

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action

from apps.utils import api_success, paginated_payload
from apps.utils.exceptions import InvalidRequest

from .mongo_serializers import (
    AssignRiderSerializer,
    DeliverySerializer,
    DeliveryStatusSerializer,
    LocationSerializer,
    TrackingSerializer,
)
from .services import (
    advance_status,
    assign_rider,
    create_delivery,
    list_all,
    list_for_rider,
    query_by_order,
    query_by_tracking_code,
    update_location,
)
from .transitions import DELIVERY_STATUSES

def _serialize(delivery):
    return DeliverySerializer(delivery).data

def _delivery_response(message, delivery, status_code=status.HTTP_200_OK):
    return api_success(
        message,
        {
            "delivery": _serialize(delivery),
        },
        status_code=status_code,
    )

class DeliveryViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def list(self, request):
        status_filter = request.query_params.get("status")
        if status_filter and status_filter not in DELIVERY_STATUSES:
            raise InvalidRequest(f"Unknown delivery status: {status_filter}")
        deliveries = list_all(request.user, status_filter)
        return api_success(
            "Deliveries retrieved successfully",
            paginated_payload(request, "deliveries", deliveries, _serialize),
        )

    @action(detail=False, methods=["get"])
    def rider(self, request):
        deliveries = list_for_rider(request.user)
        return api_success(
            "Deliveries retrieved successfully",
            paginated_payload(request, "deliveries", deliveries, _serialize),
        )

    @action(detail=False, methods=["get"], url_path=r"order/(?P<order_id>[^/.]+)")
    def by_order(self, request, order_id=None):
        return _delivery_response("Delivery retrieved successfully", query_by_order(request.user, order_id))

    @action(
        detail=False,
        methods=["get"],
        url_path=r"tracking/(?P<code>[^/.]+)",
        permission_classes=[permissions.AllowAny],
        authentication_classes=[],
    )
    def tracking(self, request, code=None):
        return api_success(
            "Delivery tracking retrieved successfully",
            {
                "tracking": TrackingSerializer(query_by_tracking_code(code)).data,
            },
        )

    def create(self, request):
        serializer = DeliverySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        delivery = create_delivery(
            request.user,
            params["order_id"],
            params["pickup_address"],
            params["delivery_address"],
            notes=params.get("notes"),
            delivery_fee=params.get("delivery_fee", Decimal("0")),
        )
        return _delivery_response("Delivery created successfully", delivery, status.HTTP_201_CREATED)

    @action(detail=True, methods=["put"])
    def assign(self, request, pk=None):
        serializer = AssignRiderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        delivery = assign_rider(request.user, pk, serializer.validated_data["rider_id"])
        return _delivery_response("Rider assigned successfully", delivery)

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = DeliveryStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        delivery = advance_status(request.user, pk, params["status"], params.get("current_location"))
        return _delivery_response("Delivery status updated successfully", delivery)

    @action(detail=True, methods=["put"])
    def location(self, request, pk=None):
        serializer = LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        delivery = update_location(request.user, pk, params["latitude"], params["longitude"])
        return _delivery_response("Delivery location updated successfully", delivery)
