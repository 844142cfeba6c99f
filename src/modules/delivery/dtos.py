"""Delivery DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

from modules.delivery.models import MAX_RATING, MIN_RATING


class FeedbackDTO(BaseModel):
    """Feedback for a delivered order.

    ``courier_id`` defaults to the courier who delivered the order.
    """

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    rating: int
    courier_id: Optional[UUID] = None
    comment: str = ""

    @field_validator("rating")
    @classmethod
    def rating_in_range(cls, v: int) -> int:
        if not MIN_RATING <= v <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
        return v
