"""Delivery API views.

- Staff assign orders to couriers and read feedback.
- Couriers (token with ``role: delivery``) see their current order and
  move it to dispatched/delivered after collecting payment.
- Anyone may leave feedback for a delivered order.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.permissions import IsCourier
from modules.delivery.dtos import FeedbackDTO
from modules.delivery.repositories import (
    CourierDjangoRepository,
    FeedbackDjangoRepository,
)
from modules.delivery.serializers import (
    AssignOrderSerializer,
    DeliveryStatusSerializer,
    FeedbackInputSerializer,
    FeedbackSerializer,
)
from modules.delivery.services import DeliveryService
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import OrderListSerializer, OrderSerializer


def build_delivery_service() -> DeliveryService:
    return DeliveryService(
        order_repository=OrderDjangoRepository(),
        courier_repository=CourierDjangoRepository(),
        feedback_repository=FeedbackDjangoRepository(),
    )


class _DeliveryView(APIView):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_delivery_service()


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class AssignOrderView(_DeliveryView):
    permission_classes = [IsAdminUser]

    def put(self, request: Request, courier_id: str) -> Response:
        """PUT /api/v1/admin/delivery-boys/{courier_id}/assign-order/"""
        serializer = AssignOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.assign_order(
            courier_id, serializer.validated_data["order_id"]
        )
        return Response(OrderSerializer(order, context={"request": request}).data)


class FeedbackListView(_DeliveryView):
    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        """GET /api/v1/admin/feedbacks/"""
        feedback = self._service.list_feedback()
        return Response(FeedbackSerializer(feedback, many=True).data)


# ---------------------------------------------------------------------------
# Courier dashboard
# ---------------------------------------------------------------------------


class CurrentOrderView(_DeliveryView):
    permission_classes = [IsCourier]

    def get(self, request: Request) -> Response:
        """GET /api/v1/delivery/current-order/ (``{"order": null}`` when idle)"""
        courier = self._service.get_courier_for_user(request.user)
        order = self._service.get_current_order(courier.id)
        data = (
            OrderListSerializer(order, context={"request": request}).data
            if order
            else None
        )
        return Response({"order": data})


class DeliveryStatusView(_DeliveryView):
    permission_classes = [IsCourier]

    def put(self, request: Request, order_id: str) -> Response:
        """PUT /api/v1/delivery/orders/{order_id}/status/"""
        serializer = DeliveryStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        courier = self._service.get_courier_for_user(request.user)
        order = self._service.update_delivery_status(
            order_id, serializer.validated_data["status"], courier=courier
        )
        return Response(OrderListSerializer(order, context={"request": request}).data)


class DeliveryPaymentView(_DeliveryView):
    permission_classes = [IsCourier]

    def put(self, request: Request, order_id: str) -> Response:
        """PUT /api/v1/delivery/orders/{order_id}/payment/"""
        courier = self._service.get_courier_for_user(request.user)
        order = self._service.record_payment(order_id, courier)
        return Response(OrderListSerializer(order, context={"request": request}).data)


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------


class FeedbackCreateView(_DeliveryView):
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        """POST /api/v1/feedback/"""
        serializer = FeedbackInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        feedback = self._service.submit_feedback(FeedbackDTO(**serializer.validated_data))
        return Response(FeedbackSerializer(feedback).data, status=status.HTTP_201_CREATED)
