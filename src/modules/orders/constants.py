"""Order domain constants.

Status and payment-status choices.  ``update_status`` accepts any status
after any status; only the delivery flow narrows the allowed targets.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    VERIFIED = "verified", "Verified"
    DISPATCHED = "dispatched", "Dispatched"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"


TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Targets a courier may set from the delivery dashboard.
DELIVERY_STATUSES: set[str] = {OrderStatus.DISPATCHED, OrderStatus.DELIVERED}

MODIFIABLE_STATES: set[str] = {OrderStatus.PENDING}

ORDER_NUMBER_MAX_RETRIES = 5
