from __future__ import annotations

from datetime import datetime

import mongoengine as me
from mongoengine import fields

MATERIAL_TYPES = (
    "cotton",
    "silk",
    "linen",
    "wool",
    "polyester",
    "denim",
    "leather",
    "other",
)

class Material(me.Document):

    meta = {
        "collection": "materials",
        "indexes": ["tailor_id", "type", "is_available"],
        "strict": False,
    }

    tailor_id = fields.ObjectIdField(required=True)
    name = fields.StringField(required=True, max_length=255)
    description = fields.StringField(null=True)
    type = fields.StringField(choices=MATERIAL_TYPES, default="other")
    color = fields.StringField(null=True)
    pattern = fields.StringField(null=True)
    price_per_yard = fields.DecimalField(min_value=0, precision=2, required=True)
    quantity_available = fields.DecimalField(min_value=0, precision=2, default=0)
    image_url = fields.StringField(null=True)
    is_available = fields.BooleanField(default=True)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.name
