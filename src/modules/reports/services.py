"""Admin reporting use cases.  Pure queries: nothing here writes."""

from __future__ import annotations

from typing import TYPE_CHECKING, List

from django.conf import settings

from modules.reports.dtos import DashboardSummaryDTO

MAX_RECENT_ORDERS = 50

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.delivery.models import Courier
    from modules.orders.models import Order
    from modules.reports.repositories import IReportRepository


class ReportService:
    def __init__(self, repository: IReportRepository) -> None:
        self._repo = repository

    def summary(self) -> DashboardSummaryDTO:
        return DashboardSummaryDTO(**self._repo.order_totals())

    def recent_orders(self, limit: int | None = None) -> List[Order]:
        if not limit or limit < 1:
            limit = settings.RECENT_ORDERS_LIMIT
        return self._repo.recent_orders(min(limit, MAX_RECENT_ORDERS))

    def all_orders(self) -> QuerySet:
        return self._repo.all_orders()

    def couriers(self) -> List[Courier]:
        return self._repo.couriers()
