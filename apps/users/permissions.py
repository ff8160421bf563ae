from __future__ import annotations

from rest_framework import permissions

from apps.utils.exceptions import NotAuthorized

from .mongo_models import ROLE_ADMIN

def is_authenticated_user(user) -> bool:
    return bool(user and getattr(user, "is_authenticated", False) and hasattr(user, "role"))

class IsAdmin(permissions.BasePermission):
    message = "Not authorized as admin."

    def has_permission(self, request, view):
        return is_authenticated_user(request.user) and request.user.role == ROLE_ADMIN

class IsAdminOrSelf(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        if not is_authenticated_user(request.user):
            return False
        return request.user.is_admin or str(obj.id) == str(request.user.id)

def require_role(user, *roles: str, message: str = "Not authorized.") -> None:
    if not is_authenticated_user(user) or user.role not in roles:
        raise NotAuthorized(message)

def require_admin(user) -> None:
    require_role(user, ROLE_ADMIN, message="Not authorized as admin.")
