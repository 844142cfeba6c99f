"""Reporting DTOs (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class DashboardSummaryDTO(BaseModel):
    """Headline numbers for the admin dashboard.

    ``gross_revenue`` sums every live order's frozen total, cancelled ones
    included.  ``total_revenue`` leaves cancelled orders out.
    """

    model_config = ConfigDict(frozen=True)

    total_orders: int
    total_revenue: Decimal
    gross_revenue: Decimal
    pending_orders: int
    delivered_orders: int
