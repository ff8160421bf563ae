from __future__ import annotations

from datetime import datetime

import mongoengine as me
from mongoengine import fields

BODY_FIELDS = (
    "neck",
    "bust",
    "waist",
    "hip",
    "shoulder",
    "sleeve",
    "inseam",
    "outseam",
    "thigh",
    "calf",
    "height",
)

MEASUREMENT_TYPE_SELF = "self"
MEASUREMENT_TYPE_PROFESSIONAL = "professional"
MEASUREMENT_TYPES = (MEASUREMENT_TYPE_SELF, MEASUREMENT_TYPE_PROFESSIONAL)

class MeasurementSet(me.Document):
    """Body measurements stored in inches, weight in pounds."""

    meta = {
        "collection": "measurements",
        "indexes": ["user_id", ("user_id", "is_default"), "-created_at"],
        "strict": False,
    }

    user_id = fields.ObjectIdField(required=True)
    name = fields.StringField(required=True, max_length=255)

    neck = fields.FloatField(min_value=0, null=True)
    bust = fields.FloatField(min_value=0, null=True)
    waist = fields.FloatField(min_value=0, null=True)
    hip = fields.FloatField(min_value=0, null=True)
    shoulder = fields.FloatField(min_value=0, null=True)
    sleeve = fields.FloatField(min_value=0, null=True)
    inseam = fields.FloatField(min_value=0, null=True)
    outseam = fields.FloatField(min_value=0, null=True)
    thigh = fields.FloatField(min_value=0, null=True)
    calf = fields.FloatField(min_value=0, null=True)
    height = fields.FloatField(min_value=0, null=True)
    weight = fields.FloatField(min_value=0, null=True)

    additional_measurements = fields.DictField(default=dict)
    notes = fields.StringField(null=True)
    is_default = fields.BooleanField(default=False)
    measurement_type = fields.StringField(choices=MEASUREMENT_TYPES, default=MEASUREMENT_TYPE_SELF)
    measurement_date = fields.DateTimeField(default=datetime.utcnow)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def body_values(self) -> dict:
        values = {name: getattr(self, name) for name in BODY_FIELDS}
        values["weight"] = self.weight
        return values

    def __str__(self) -> str:
        return self.name
