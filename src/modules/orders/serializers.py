"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

import os

from django.conf import settings
from rest_framework import serializers

from modules.orders.models import Order, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


def validate_prescription_file(upload):
    """Accept JPG/PNG/PDF uploads up to ``PRESCRIPTION_MAX_UPLOAD_MB``."""
    extension = os.path.splitext(upload.name)[1].lower().lstrip(".")
    allowed = settings.PRESCRIPTION_ALLOWED_EXTENSIONS
    if extension not in allowed:
        raise serializers.ValidationError(
            f"Unsupported file type '.{extension}'. Allowed: {', '.join(allowed)}.",
            code="invalid_file_type",
        )
    max_bytes = settings.PRESCRIPTION_MAX_UPLOAD_MB * 1024 * 1024
    if upload.size > max_bytes:
        raise serializers.ValidationError(
            f"File exceeds {settings.PRESCRIPTION_MAX_UPLOAD_MB} MB.",
            code="file_too_large",
        )
    return upload


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order placement payload (JSON or multipart)."""

    customer_name = serializers.CharField(max_length=255)
    address = serializers.CharField()
    phone = serializers.CharField(max_length=32)
    medicine_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    prescription_image = serializers.FileField(
        required=False,
        allow_null=True,
        validators=[validate_prescription_file],
    )


class ModifyOrderSerializer(serializers.Serializer):
    customer_name = serializers.CharField(max_length=255, required=False)
    address = serializers.CharField(required=False)
    phone = serializers.CharField(max_length=32, required=False)
    medicine_id = serializers.UUIDField(required=False)
    quantity = serializers.IntegerField(min_value=1, required=False)


class StatusInputSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class PaymentStatusInputSerializer(serializers.Serializer):
    payment_status = serializers.CharField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Order with its joined medicine name/price, as listed on dashboards."""

    medicine_id = serializers.UUIDField(read_only=True)
    medicine_name = serializers.CharField(source="medicine.name", read_only=True)
    medicine_price = serializers.DecimalField(
        source="medicine.price", max_digits=10, decimal_places=2, read_only=True
    )
    courier_id = serializers.UUIDField(read_only=True, allow_null=True)
    courier_name = serializers.CharField(
        source="courier.name", read_only=True, default=None
    )

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "address",
            "phone",
            "medicine_id",
            "medicine_name",
            "medicine_price",
            "quantity",
            "total_price",
            "status",
            "payment_status",
            "prescription_verified",
            "prescription_image",
            "courier_id",
            "courier_name",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(OrderListSerializer):
    """Full order view, including its status history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + ["updated_at", "status_history"]
        read_only_fields = fields


class OrderCreatedSerializer(serializers.Serializer):
    """Response body of ``POST /orders/``."""

    success = serializers.SerializerMethodField()
    orderId = serializers.UUIDField(source="id")  # noqa: N815
    orderNumber = serializers.CharField(source="order_number")  # noqa: N815
    totalPrice = serializers.DecimalField(  # noqa: N815
        source="total_price", max_digits=12, decimal_places=2
    )

    def get_success(self, obj) -> bool:
        return True
