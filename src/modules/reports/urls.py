"""Admin dashboard URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.reports.views import (
    AdminOrderListView,
    CourierListView,
    DashboardView,
    RecentOrdersView,
)

urlpatterns = [
    path("admin/dashboard/", DashboardView.as_view(), name="admin-dashboard"),
    path("admin/orders/", AdminOrderListView.as_view(), name="admin-orders"),
    path("admin/orders/recent/", RecentOrdersView.as_view(), name="admin-orders-recent"),
    path("admin/delivery-boys/", CourierListView.as_view(), name="admin-couriers"),
]
