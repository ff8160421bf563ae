from __future__ import annotations

from datetime import datetime

import bcrypt
import mongoengine as me
from mongoengine import fields

ROLE_CUSTOMER = "customer"
ROLE_TAILOR = "tailor"
ROLE_RIDER = "rider"
ROLE_ADMIN = "admin"

ROLES = (ROLE_CUSTOMER, ROLE_TAILOR, ROLE_RIDER, ROLE_ADMIN)

class User(me.Document):

    meta = {
        "collection": "users",
        "indexes": ["role"],
        "strict": False,
    }

    first_name = fields.StringField(required=True, max_length=150, db_field="firstName")
    last_name = fields.StringField(max_length=150, default="", db_field="lastName")
    email = fields.EmailField(required=True, unique=True, db_field="email")
    password = fields.StringField(required=False, db_field="password")
    role = fields.StringField(choices=ROLES, default=ROLE_CUSTOMER, db_field="role")

    phone = fields.StringField(max_length=30, null=True, db_field="phone")
    address = fields.StringField(null=True, db_field="address")
    city = fields.StringField(max_length=100, null=True, db_field="city")
    state = fields.StringField(max_length=100, null=True, db_field="state")
    zip_code = fields.StringField(max_length=20, null=True, db_field="zipCode")
    country = fields.StringField(max_length=100, null=True, db_field="country")
    latitude = fields.FloatField(null=True, min_value=-90, max_value=90, db_field="latitude")
    longitude = fields.FloatField(null=True, min_value=-180, max_value=180, db_field="longitude")
    avatar = fields.StringField(null=True, db_field="avatar")

    is_verified = fields.BooleanField(default=False, db_field="isVerified")
    is_active = fields.BooleanField(default=True, db_field="isActive")

    created_at = fields.DateTimeField(default=datetime.utcnow, db_field="createdAt")
    updated_at = fields.DateTimeField(default=datetime.utcnow, db_field="updatedAt")

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def check_password(self, raw_password: str) -> bool:
        if not self.password:
            return False
        return bcrypt.checkpw(raw_password.encode("utf-8"), self.password.encode("utf-8"))

    def set_password(self, raw_password: str) -> None:
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(raw_password.encode("utf-8"), salt)
        self.password = hashed.decode("utf-8")

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.is_admin

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False

    def __str__(self) -> str:
        return self.email
