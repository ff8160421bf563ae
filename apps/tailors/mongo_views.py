from __future__ import annotations

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action

from apps.users.mongo_models import User
from apps.utils import api_success, paginated_payload
from apps.utils.repository import get_repository

from .mongo_serializers import PortfolioSerializer, TailorSearchSerializer, TailorSerializer
from .services import add_portfolio_images, find_tailors, get_tailor, upsert_profile

class TailorViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.AllowAny()]
        return super().get_permissions()

    def list(self, request):
        search = TailorSearchSerializer(data=request.query_params)
        search.is_valid(raise_exception=True)
        params = search.validated_data

        candidates = find_tailors(
            latitude=params.get("lat"),
            longitude=params.get("lng"),
            radius=params.get("radius"),
            specialties=params.get("specialties"),
            min_rating=params.get("min_rating"),
            sort_by=params["sort_by"],
        )

        def serialize(candidate):
            tailor, owner = candidate.item
            return TailorSerializer(tailor, context={"owner": owner, "distance": candidate.distance}).data

        return api_success(
            "Tailors retrieved successfully",
            paginated_payload(request, "tailors", candidates, serialize),
        )

    def retrieve(self, request, pk=None):
        tailor = get_tailor(pk)
        owner = get_repository(User).get(tailor.user_id)
        return api_success(
            "Tailor retrieved successfully",
            {
                "tailor": TailorSerializer(tailor, context={"owner": owner}).data,
            },
        )

    def create(self, request):
        serializer = TailorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tailor, created = upsert_profile(request.user, serializer.validated_data)
        return api_success(
            "Tailor profile created successfully" if created else "Tailor profile updated successfully",
            {
                "tailor": TailorSerializer(tailor).data,
            },
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def portfolio(self, request, pk=None):
        serializer = PortfolioSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tailor = add_portfolio_images(request.user, pk, serializer.validated_data["images"])
        return api_success(
            "Portfolio updated successfully",
            {
                "tailor": TailorSerializer(tailor).data,
            },
        )
