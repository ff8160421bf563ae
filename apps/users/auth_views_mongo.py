from __future__ import annotations

import logging

from rest_framework import exceptions, permissions, status
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from apps.utils import api_success
from apps.utils.exceptions import InvalidRequest
from apps.utils.repository import get_repository

from .authentication import authenticate_credentials, issue_tokens
from .mongo_models import User
from .mongo_serializers import LoginSerializer, RefreshSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)

class CredentialsView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes: list = []

    def get_authenticate_header(self, request):
        # Bad credentials answer 401 even though no authenticator runs here.
        return 'Bearer realm="api"'

class RegisterView(CredentialsView):

    def post(self, request, *args, **kwargs):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        validated_data = serializer.validated_data.copy()
        password = validated_data.pop("password")

        users = get_repository(User)
        if users.exists(email=validated_data["email"]):
            raise InvalidRequest("User already exists")

        user = User(**validated_data)
        user.set_password(password)
        users.add(user)
        logger.info("Registered %s user %s", user.role, user.id)

        return api_success(
            "Registration successful.",
            {
                "tokens": issue_tokens(user),
                "user": UserSerializer(user).data,
            },
            status_code=status.HTTP_201_CREATED,
        )

class LoginView(CredentialsView):

    def post(self, request, *args, **kwargs):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = authenticate_credentials(
            serializer.validated_data["email"],
            serializer.validated_data["password"],
        )
        return api_success(
            "Login successfully.",
            {
                "tokens": issue_tokens(user),
                "user": UserSerializer(user).data,
            },
        )

class RefreshView(CredentialsView):

    def post(self, request, *args, **kwargs):
        serializer = RefreshSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            refresh = RefreshToken(serializer.validated_data["refresh"])
        except TokenError as exc:
            raise exceptions.AuthenticationFailed(str(exc))

        user = get_repository(User).get(refresh.get(api_settings.USER_ID_CLAIM))
        if user is None or not user.is_active:
            raise exceptions.AuthenticationFailed("User does not exist")

        return api_success(
            "Token refreshed.",
            {
                "tokens": {"access": str(refresh.access_token)},
            },
        )

class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return api_success(
            "Current user retrieved successfully",
            {
                "user": UserSerializer(request.user).data,
            },
        )

__all__ = [
    "LoginView",
    "MeView",
    "RefreshView",
    "RegisterView",
]
