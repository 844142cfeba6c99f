"""Read-only queries behind the admin dashboard.

Every query ignores soft-deleted orders.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List

from django.db.models import Count, DecimalField, Q, QuerySet, Sum, Value
from django.db.models.functions import Coalesce

from modules.delivery.models import Courier
from modules.orders.constants import OrderStatus
from modules.orders.models import Order

ZERO = Decimal("0.00")


class IReportRepository(ABC):
    @abstractmethod
    def order_totals(self) -> Dict[str, object]:
        """Counts and revenue sums over live orders."""

    @abstractmethod
    def recent_orders(self, limit: int) -> List[Order]:
        """Newest live orders with their medicine joined."""

    @abstractmethod
    def all_orders(self) -> QuerySet:
        """Every live order, newest first."""

    @abstractmethod
    def couriers(self) -> List[Courier]:
        """Every courier with its current assignment joined."""


class ReportDjangoRepository(IReportRepository):
    def _orders(self) -> QuerySet:
        return Order.objects.alive().select_related("medicine", "courier")

    def order_totals(self) -> Dict[str, object]:
        money = DecimalField(max_digits=14, decimal_places=2)
        return Order.objects.alive().aggregate(
            total_orders=Count("id"),
            pending_orders=Count("id", filter=Q(status=OrderStatus.PENDING)),
            delivered_orders=Count("id", filter=Q(status=OrderStatus.DELIVERED)),
            gross_revenue=Coalesce(
                Sum("total_price"), Value(ZERO), output_field=money
            ),
            total_revenue=Coalesce(
                Sum("total_price", filter=~Q(status=OrderStatus.CANCELLED)),
                Value(ZERO),
                output_field=money,
            ),
        )

    def recent_orders(self, limit: int) -> List[Order]:
        return list(self._orders().order_by("-created_at", "-id")[:limit])

    def all_orders(self) -> QuerySet:
        return self._orders().order_by("-created_at", "-id")

    def couriers(self) -> List[Courier]:
        return list(
            Courier.objects.select_related("current_order__medicine").order_by("name")
        )
