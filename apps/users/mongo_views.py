from __future__ import annotations

from rest_framework import permissions, viewsets

from apps.utils import api_success, paginated_payload
from apps.utils.exceptions import InvalidRequest, NotAuthorized, NotFound
from apps.utils.repository import get_repository

from .mongo_models import ROLES, User
from .mongo_serializers import UserSerializer
from .permissions import IsAdmin, IsAdminOrSelf

class UserViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAuthenticated]

    def get_permissions(self):
        if self.action == "list":
            return [permissions.IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def _get_user(self, request, pk) -> User:
        user = get_repository(User).get(pk)
        if user is None:
            raise NotFound("User not found")
        if not IsAdminOrSelf().has_object_permission(request, self, user):
            raise NotAuthorized()
        return user

    def list(self, request):
        criteria = {}
        role = request.query_params.get("role")
        if role:
            if role not in ROLES:
                raise InvalidRequest(f"Unknown role: {role}")
            criteria["role"] = role

        users = get_repository(User).filter(order_by="-created_at", **criteria)
        return api_success(
            "Users retrieved successfully",
            paginated_payload(request, "users", users, lambda user: UserSerializer(user).data),
        )

    def retrieve(self, request, pk=None):
        user = self._get_user(request, pk)
        return api_success(
            "User retrieved successfully",
            {
                "user": UserSerializer(user).data,
            },
        )

    def update(self, request, pk=None):
        return self._update(request, pk)

    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    def _update(self, request, pk):
        user = self._get_user(request, pk)
        serializer = UserSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        users = get_repository(User)
        new_email = serializer.validated_data.get("email")
        if new_email and users.exists(email=new_email.strip().lower(), id__ne=user.id):
            raise InvalidRequest("Email is already in use")

        user = serializer.update(user, serializer.validated_data)
        users.save(user)
        return api_success(
            "User updated successfully",
            {
                "user": UserSerializer(user).data,
            },
        )
