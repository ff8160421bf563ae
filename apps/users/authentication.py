from __future__ import annotations

from typing import Optional, Tuple

from rest_framework import exceptions
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from apps.utils.repository import get_repository

from .mongo_models import User

class MongoEngineJWTAuthentication(JWTAuthentication):

    def authenticate(self, request: Request) -> Optional[Tuple[User, dict]]:

        auth_result = super().authenticate(request)
        if auth_result is not None:
            return auth_result

        raw_token = request.COOKIES.get("access_token")
        if not raw_token:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
        except (InvalidToken, TokenError) as exc:
            raise exceptions.AuthenticationFailed(str(exc))

        return self.get_user(validated_token), validated_token

    def get_user(self, validated_token):
        try:
            user_id = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise InvalidToken("Token does not contain user_id")

        user = get_repository(User).get(user_id)
        if user is None:
            raise exceptions.AuthenticationFailed("User does not exist")

        if not user.is_active:
            raise exceptions.AuthenticationFailed("User has been disabled")

        return user

def issue_tokens(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    refresh[api_settings.USER_ID_CLAIM] = str(user.id)
    refresh["email"] = user.email
    refresh["role"] = user.role
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }

def authenticate_credentials(email: str, password: str) -> User:
    if not email or not password:
        raise exceptions.ValidationError("Email and password are required.")

    user = get_repository(User).first(email=email.strip().lower())
    if user is None or not user.check_password(password):
        raise exceptions.AuthenticationFailed("Email or password is incorrect.")

    if not user.is_active:
        raise exceptions.AuthenticationFailed("Account has been disabled.")

    return user
