from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import mongoengine as me
from mongoengine import fields

from .transitions import PAYMENT_STATUSES, PENDING

class Payment(me.Document):

    meta = {
        "collection": "payments",
        "indexes": ["payment_intent_id", "status"],
        "strict": False,
    }

    order_id = fields.ObjectIdField(required=True, unique=True)
    payment_intent_id = fields.StringField(required=True)
    amount = fields.DecimalField(min_value=0, precision=2, required=True)
    currency = fields.StringField(default="USD", max_length=3)
    payment_method = fields.StringField(default="card")
    status = fields.StringField(choices=PAYMENT_STATUSES, default=PENDING)
    escrow_release_date = fields.DateTimeField(null=True)
    transaction_fee = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))
    receipt_url = fields.StringField(null=True)
    notes = fields.StringField(null=True)

    version = fields.IntField(default=0)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def clean(self):
        if self.currency:
            self.currency = self.currency.upper()

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"Payment {self.payment_intent_id}"
