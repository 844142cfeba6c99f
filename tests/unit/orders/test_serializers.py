"""Unit tests for Order serializers."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from modules.orders.models import Order
from modules.orders.serializers import (
    CreateOrderSerializer,
    ModifyOrderSerializer,
    OrderCreatedSerializer,
    OrderSerializer,
)

pytestmark = pytest.mark.unit


class TestCreateOrderSerializer:
    def test_valid_payload(self, order_payload):
        serializer = CreateOrderSerializer(data=order_payload)

        assert serializer.is_valid(), serializer.errors
        assert "prescription_image" not in serializer.validated_data

    @pytest.mark.parametrize("name", ["rx.jpg", "rx.JPEG", "rx.png", "rx.pdf"])
    def test_accepted_prescription_types(self, order_payload, name):
        order_payload["prescription_image"] = SimpleUploadedFile(name, b"data")

        assert CreateOrderSerializer(data=order_payload).is_valid()

    def test_rejects_unknown_extension(self, order_payload):
        order_payload["prescription_image"] = SimpleUploadedFile("rx.gif", b"data")
        serializer = CreateOrderSerializer(data=order_payload)

        assert not serializer.is_valid()
        assert serializer.errors["prescription_image"][0].code == "invalid_file_type"

    def test_rejects_oversized_upload(self, order_payload, settings):
        settings.PRESCRIPTION_MAX_UPLOAD_MB = 1
        order_payload["prescription_image"] = SimpleUploadedFile(
            "rx.png", b"x" * (1024 * 1024 + 1)
        )
        serializer = CreateOrderSerializer(data=order_payload)

        assert not serializer.is_valid()
        assert serializer.errors["prescription_image"][0].code == "file_too_large"


class TestModifyOrderSerializer:
    def test_empty_payload_is_valid(self):
        serializer = ModifyOrderSerializer(data={})

        assert serializer.is_valid()
        assert serializer.validated_data == {}

    def test_quantity_must_be_positive(self):
        assert not ModifyOrderSerializer(data={"quantity": 0}).is_valid()


class TestOutputSerializers:
    @pytest.fixture()
    def order(self, medicine) -> Order:
        return Order.objects.create(
            customer_name="Asha Patel",
            address="12 MG Road, Pune",
            phone="+919812345678",
            medicine=medicine,
            quantity=2,
            total_price=Decimal("50.00"),
        )

    def test_created_response_shape(self, order):
        data = OrderCreatedSerializer(order).data

        assert data == {
            "success": True,
            "orderId": str(order.id),
            "orderNumber": order.order_number,
            "totalPrice": "50.00",
        }

    def test_detail_joins_medicine_and_history(self, order):
        data = OrderSerializer(order).data

        assert data["medicine_name"] == "Paracetamol 500mg"
        assert data["medicine_price"] == "25.00"
        assert data["courier_id"] is None
        assert data["courier_name"] is None
        assert [row["notes"] for row in data["status_history"]] == ["Order placed"]
