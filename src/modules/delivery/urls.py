"""Delivery URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.delivery.views import (
    AssignOrderView,
    CurrentOrderView,
    DeliveryPaymentView,
    DeliveryStatusView,
    FeedbackCreateView,
    FeedbackListView,
)

urlpatterns = [
    path(
        "admin/delivery-boys/<str:courier_id>/assign-order/",
        AssignOrderView.as_view(),
        name="courier-assign-order",
    ),
    path("admin/feedbacks/", FeedbackListView.as_view(), name="feedback-list"),
    path("delivery/current-order/", CurrentOrderView.as_view(), name="courier-current-order"),
    path(
        "delivery/orders/<str:order_id>/status/",
        DeliveryStatusView.as_view(),
        name="delivery-order-status",
    ),
    path(
        "delivery/orders/<str:order_id>/payment/",
        DeliveryPaymentView.as_view(),
        name="delivery-order-payment",
    ),
    path("feedback/", FeedbackCreateView.as_view(), name="feedback-create"),
]
