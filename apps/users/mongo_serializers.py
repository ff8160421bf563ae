from __future__ import annotations

from rest_framework import serializers

from apps.utils.payload import remap_keys

from .mongo_models import ROLE_CUSTOMER, ROLE_TAILOR

class UserSerializer(serializers.Serializer):
    first_name = serializers.CharField(required=False, max_length=150)
    last_name = serializers.CharField(required=False, allow_blank=True, max_length=150)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=30)
    address = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    city = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    state = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    zip_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    country = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    latitude = serializers.FloatField(required=False, allow_null=True, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, allow_null=True, min_value=-180, max_value=180)
    avatar = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        field_mapping = {
            "firstName": "first_name",
            "lastName": "last_name",
            "name": "first_name",
            "zipCode": "zip_code",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def to_representation(self, instance):
        return {
            "id": str(instance.id),
            "firstName": instance.first_name,
            "lastName": instance.last_name,
            "fullName": instance.full_name,
            "email": instance.email,
            "role": instance.role,
            "phone": instance.phone,
            "address": instance.address,
            "city": instance.city,
            "state": instance.state,
            "zipCode": instance.zip_code,
            "country": instance.country,
            "latitude": instance.latitude,
            "longitude": instance.longitude,
            "avatar": instance.avatar,
            "isVerified": instance.is_verified,
            "isActive": instance.is_active,
            "createdAt": instance.created_at,
        }

    def update(self, instance, validated_data):
        for key, value in validated_data.items():
            if key == "email":
                value = value.strip().lower()
            setattr(instance, key, value)
        return instance

class RegisterSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, write_only=True)
    is_tailor = serializers.BooleanField(required=False, default=False)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=30)
    address = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        field_mapping = {
            "firstName": "first_name",
            "lastName": "last_name",
            "isTailor": "is_tailor",
        }
        return super().to_internal_value(remap_keys(data, field_mapping))

    def validate_email(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        attrs["role"] = ROLE_TAILOR if attrs.pop("is_tailor", False) else ROLE_CUSTOMER
        return attrs

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField()

class RefreshSerializer(serializers.Serializer):
    refresh = serializers.CharField()
