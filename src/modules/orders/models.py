"""Order and OrderStatusHistory models.

Business rules implemented:
- ``total_price`` is a snapshot of ``medicine.price * quantity`` taken when
  the order is placed or modified; later price edits never touch it.
- ``order_number`` is a human-readable identifier used by the chat bot.
- Medicine FK uses PROTECT so order history survives catalog edits.
- Each status change generates a history record (see ``signals.py``).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any, Dict

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    MODIFIABLE_STATES,
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    OrderStatus,
    PaymentStatus,
)
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    ``order_number`` is generated on first save (format:
    ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for all internal
    references and API lookups.

    ``courier`` records who the order was handed to.  The courier's own
    ``current_order`` slot is the live assignment and is cleared when the
    order reaches a terminal status.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer_name = models.CharField(max_length=255)
    address = models.TextField()
    phone = models.CharField(max_length=32, db_index=True)
    medicine = models.ForeignKey(
        "catalog.Medicine",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    prescription_image = models.FileField(
        upload_to="prescriptions/%Y/%m/",
        null=True,
        blank=True,
    )
    prescription_verified = models.BooleanField(default=False)
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    courier = models.ForeignKey(
        "delivery.Courier",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="orders_quantity_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def is_modifiable(self) -> bool:
        return self.status in MODIFIABLE_STATES

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def event_payload(self, **extra: Any) -> Dict[str, Any]:
        """Facts copied into domain events for notification handlers."""
        payload = {
            "order_number": self.order_number,
            "phone": self.phone,
            "customer_name": self.customer_name,
            "status": self.status,
        }
        payload.update(extra)
        return payload

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status changes.

    Rows are written by the ``post_save`` signal, never by services
    directly, so every code path that changes ``status`` is covered.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"
