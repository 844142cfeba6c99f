"""Order API views.

Exposes ``OrderService`` over HTTP.  Placing, reading, modifying and
deleting an order is public (the storefront has no customer accounts);
listing orders and the status/payment/prescription updates need staff.
Domain exceptions propagate to the standardized error handler.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny, BasePermission, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.catalog.repositories import MedicineDjangoRepository
from modules.delivery.repositories import CourierDjangoRepository
from modules.orders.dtos import CreateOrderDTO, ModifyOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CreateOrderSerializer,
    ModifyOrderSerializer,
    OrderCreatedSerializer,
    OrderListSerializer,
    OrderSerializer,
    PaymentStatusInputSerializer,
    StatusInputSerializer,
)
from modules.orders.services import OrderService

PUBLIC_ACTIONS = {"create", "retrieve", "partial_update", "destroy"}


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        medicine_repository=MedicineDjangoRepository(),
        courier_repository=CourierDjangoRepository(),
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``: all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number", "customer_name", "phone", "medicine__name"]
    ordering_fields = ["created_at", "total_price", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_throttles(self) -> list[BaseThrottle]:
        if self.action == "create":
            self.throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            self.throttle_scope = "order_listing"
        else:
            self.throttle_scope = None
        return super().get_throttles()

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Customer actions
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/ (JSON, or multipart with ``prescription_image``)"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.create_order(CreateOrderDTO(**serializer.validated_data))
        return Response(
            OrderCreatedSerializer(order).data, status=status.HTTP_201_CREATED
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(pk)
        return Response(OrderSerializer(order, context={"request": request}).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Only pending orders can be modified.  Changing ``medicine_id`` or
        ``quantity`` moves the stock reservation and reprices the order.
        """
        serializer = ModifyOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.modify_order(
            pk, ModifyOrderDTO(**serializer.validated_data)
        )
        return Response(OrderSerializer(order, context={"request": request}).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (cancel and restock)"""
        self._service.delete_order(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Staff actions
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (filtered, searchable, paginated)"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True, context={"request": request})
        return self.get_paginated_response(serializer.data)

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/

        Sets any status.  ``cancelled`` here does not restock.
        """
        serializer = StatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.update_status(
            pk,
            serializer.validated_data["status"],
            notes=serializer.validated_data["notes"],
        )
        return Response(OrderSerializer(order, context={"request": request}).data)

    @action(detail=True, methods=["put"], url_path="verify-prescription")
    def verify_prescription(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/verify-prescription/"""
        order = self._service.verify_prescription(pk)
        return Response(OrderSerializer(order, context={"request": request}).data)

    @action(detail=True, methods=["put"], url_path="payment-status")
    def payment_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/payment-status/"""
        serializer = PaymentStatusInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = self._service.set_payment_status(
            pk, serializer.validated_data["payment_status"]
        )
        return Response(OrderSerializer(order, context={"request": request}).data)
