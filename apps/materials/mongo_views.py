from __future__ import annotations

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action

from apps.utils import api_success, paginated_payload

from .mongo_serializers import MaterialSerializer, QuantitySerializer
from .services import (
    create_material,
    delete_material,
    get_material,
    list_available,
    list_for_tailor,
    set_quantity,
    update_material,
)

def _serialize(material):
    return MaterialSerializer(material).data

class MaterialViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action in ("list", "retrieve", "by_tailor"):
            return [permissions.AllowAny()]
        return super().get_permissions()

    def list(self, request):
        materials = list_available(request.query_params.get("type"))
        return api_success(
            "Materials retrieved successfully",
            paginated_payload(request, "materials", materials, _serialize),
        )

    def retrieve(self, request, pk=None):
        return api_success(
            "Material retrieved successfully",
            {
                "material": _serialize(get_material(pk)),
            },
        )

    @action(detail=False, methods=["get"], url_path=r"tailor/(?P<tailor_id>[^/.]+)")
    def by_tailor(self, request, tailor_id=None):
        materials = list_for_tailor(tailor_id)
        return api_success(
            "Materials retrieved successfully",
            paginated_payload(request, "materials", materials, _serialize),
        )

    def create(self, request):
        serializer = MaterialSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        material = create_material(request.user, serializer.validated_data)
        return api_success(
            "Material created successfully",
            {
                "material": _serialize(material),
            },
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None):
        serializer = MaterialSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        material = update_material(request.user, pk, serializer.validated_data)
        return api_success(
            "Material updated successfully",
            {
                "material": _serialize(material),
            },
        )

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        delete_material(request.user, pk)
        return api_success("Material deleted successfully")

    @action(detail=True, methods=["put"])
    def quantity(self, request, pk=None):
        serializer = QuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        material = set_quantity(request.user, pk, serializer.validated_data["quantity"])
        return api_success(
            "Material quantity updated successfully",
            {
                "material": _serialize(material),
            },
        )
