from __future__ import annotations

from datetime import datetime

import mongoengine as me
from mongoengine import fields

class Tailor(me.Document):

    meta = {
        "collection": "tailors",
        "indexes": ["rating", "specialties"],
        "strict": False,
    }

    user_id = fields.ObjectIdField(required=True, unique=True)
    shop_name = fields.StringField(required=True, max_length=255)
    description = fields.StringField(null=True)
    specialties = fields.ListField(fields.StringField(max_length=100), default=list)
    experience = fields.IntField(min_value=0, null=True)
    rating = fields.FloatField(min_value=0, max_value=5, default=0.0)
    review_count = fields.IntField(min_value=0, default=0)
    is_available = fields.BooleanField(default=True)
    business_hours = fields.DictField(default=dict)
    portfolio = fields.ListField(fields.StringField(), default=list)
    accepts_in_person = fields.BooleanField(default=True)
    accepts_digital_measurements = fields.BooleanField(default=True)
    provides_materials = fields.BooleanField(default=True)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.shop_name
