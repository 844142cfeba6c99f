"""Courier and Feedback models.

- A courier logs in with a Django ``User`` and holds at most one current
  order (``current_order`` is a OneToOne, so two couriers can never share
  the same live assignment).
- Feedback is append-only and rated 1 to 5 (DB check constraint).
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel

MIN_RATING = 1
MAX_RATING = 5


class Courier(BaseModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="courier",
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32)
    current_order = models.OneToOneField(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="current_courier",
    )

    class Meta:
        db_table = "couriers"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Feedback(BaseModel):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="feedbacks",
    )
    courier = models.ForeignKey(
        Courier,
        on_delete=models.CASCADE,
        related_name="feedbacks",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)],
    )
    comment = models.TextField(blank=True, default="")

    class Meta:
        db_table = "feedback"
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rating__gte=MIN_RATING, rating__lte=MAX_RATING),
                name="feedback_rating_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order} -> {self.courier}: {self.rating}/5"
