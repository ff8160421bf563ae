from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import mongoengine as me
from mongoengine import fields

from .transitions import DELIVERY_STATUSES, PENDING

class Delivery(me.Document):

    meta = {
        "collection": "deliveries",
        "indexes": ["rider_id", "status"],
        "strict": False,
    }

    order_id = fields.ObjectIdField(required=True, unique=True)
    rider_id = fields.ObjectIdField(null=True)
    tracking_code = fields.StringField(required=True, unique=True, max_length=8)
    status = fields.StringField(choices=DELIVERY_STATUSES, default=PENDING)

    pickup_address = fields.StringField(required=True)
    delivery_address = fields.StringField(required=True)
    current_location = fields.PointField(null=True)

    pickup_date = fields.DateTimeField(null=True)
    delivery_date = fields.DateTimeField(null=True)
    notes = fields.StringField(null=True)
    delivery_fee = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))

    version = fields.IntField(default=0)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Delivery {self.tracking_code}"
