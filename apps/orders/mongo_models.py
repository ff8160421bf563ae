from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import mongoengine as me
from mongoengine import fields

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_IN_PROGRESS = "in_progress"
STATUS_READY_FOR_DELIVERY = "ready_for_delivery"
STATUS_PENDING_DELIVERY = "pending_delivery"
STATUS_DELIVERED = "delivered"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

ORDER_STATUSES = (
    STATUS_PENDING,
    STATUS_CONFIRMED,
    STATUS_IN_PROGRESS,
    STATUS_READY_FOR_DELIVERY,
    STATUS_PENDING_DELIVERY,
    STATUS_DELIVERED,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
)
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_CANCELLED)

PAYMENT_UNPAID = "unpaid"
PAYMENT_IN_ESCROW = "in_escrow"
PAYMENT_PAID = "paid"
PAYMENT_REFUNDED = "refunded"

PAYMENT_STATUSES = (PAYMENT_UNPAID, PAYMENT_IN_ESCROW, PAYMENT_PAID, PAYMENT_REFUNDED)

MATERIAL_SOURCE_TAILOR = "tailor"
MATERIAL_SOURCE_CUSTOMER = "customer"
MATERIAL_SOURCES = (MATERIAL_SOURCE_TAILOR, MATERIAL_SOURCE_CUSTOMER)

class Order(me.Document):

    meta = {
        "collection": "orders",
        "indexes": ["customer_id", "tailor_id", "status", "-created_at"],
        "strict": False,
    }

    customer_id = fields.ObjectIdField(required=True)
    tailor_id = fields.ObjectIdField(required=True)
    measurement_id = fields.ObjectIdField(null=True)
    material_id = fields.ObjectIdField(null=True)
    material_quantity = fields.DecimalField(min_value=0, precision=2, null=True)

    order_type = fields.StringField(required=True, max_length=100)
    description = fields.StringField(null=True)
    instructions = fields.StringField(null=True)
    material_source = fields.StringField(choices=MATERIAL_SOURCES, default=MATERIAL_SOURCE_CUSTOMER)

    tailoring_price = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))
    material_price = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))
    delivery_price = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))
    total_price = fields.DecimalField(min_value=0, precision=2, default=Decimal("0"))

    payment_status = fields.StringField(choices=PAYMENT_STATUSES, default=PAYMENT_UNPAID)
    is_paid = fields.BooleanField(default=False)
    paid_at = fields.DateTimeField(null=True)
    payment_id = fields.ObjectIdField(null=True)

    status = fields.StringField(choices=ORDER_STATUSES, default=STATUS_PENDING)
    estimated_completion_date = fields.DateTimeField(null=True)
    actual_completion_date = fields.DateTimeField(null=True)

    created_at = fields.DateTimeField(default=datetime.utcnow)
    updated_at = fields.DateTimeField(default=datetime.utcnow)

    def save(self, *args, **kwargs):
        self.updated_at = datetime.utcnow()
        return super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def compute_total(self) -> Decimal:
        self.total_price = (
            Decimal(self.tailoring_price or 0)
            + Decimal(self.material_price or 0)
            + Decimal(self.delivery_price or 0)
        )
        return self.total_price

    def __str__(self) -> str:
        return f"Order {self.id}"
