"""Admin dashboard views (staff only, read-only)."""

from __future__ import annotations

from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.delivery.serializers import CourierSerializer
from modules.orders.serializers import OrderListSerializer
from modules.reports.repositories import ReportDjangoRepository
from modules.reports.serializers import DashboardSummarySerializer
from modules.reports.services import ReportService


def build_report_service() -> ReportService:
    return ReportService(repository=ReportDjangoRepository())


class _ReportView(APIView):
    permission_classes = [IsAdminUser]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_report_service()


class DashboardView(_ReportView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/dashboard/"""
        summary = self._service.summary()
        return Response(DashboardSummarySerializer(summary.model_dump()).data)


class RecentOrdersView(_ReportView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/recent/?limit=N"""
        try:
            limit = int(request.query_params.get("limit", ""))
        except ValueError:
            limit = None
        orders = self._service.recent_orders(limit)
        return Response(
            OrderListSerializer(orders, many=True, context={"request": request}).data
        )


class AdminOrderListView(_ReportView, GenericAPIView):
    serializer_class = OrderListSerializer

    def get_queryset(self):
        return self._service.all_orders()

    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/ (newest first, paginated)"""
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)


class CourierListView(_ReportView):
    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/delivery-boys/"""
        couriers = self._service.couriers()
        return Response(
            CourierSerializer(couriers, many=True, context={"request": request}).data
        )
