"""Category and Medicine models.

Business rules implemented:
- Category names are unique.
- Medicine price is never negative (DB check constraint).
- Medicine stock is never negative (DB check constraint). Order mutations
  that would break this are rejected by the service layer, never clamped.
- Medicines reference their category with PROTECT: categories are never
  deleted while they still list medicines.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


class Category(BaseModel):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Medicine(BaseModel):
    """A sellable item with a live price and stock count.

    Orders snapshot ``price`` into their own ``total_price``; changing the
    price here never rewrites existing orders.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="medicines",
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    requires_prescription = models.BooleanField(default=False)

    class Meta:
        db_table = "medicines"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["category", "name"], name="medicines_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="medicines_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="medicines_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price < 0:
            raise ValidationError({"price": "Price cannot be negative."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    @property
    def is_available(self) -> bool:
        return self.stock > 0

    def __str__(self) -> str:
        return f"{self.name} ({self.stock} in stock)"
