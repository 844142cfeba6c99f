"""Delivery DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.delivery.models import MAX_RATING, MIN_RATING, Courier, Feedback
from modules.orders.serializers import OrderListSerializer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class AssignOrderSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class DeliveryStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class FeedbackInputSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()
    courier_id = serializers.UUIDField(required=False)
    rating = serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)
    comment = serializers.CharField(required=False, allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CourierSerializer(serializers.ModelSerializer):
    current_order = OrderListSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Courier
        fields = ["id", "name", "phone", "current_order"]
        read_only_fields = fields


class FeedbackSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    courier_id = serializers.UUIDField(read_only=True)
    courier_name = serializers.CharField(source="courier.name", read_only=True)

    class Meta:
        model = Feedback
        fields = [
            "id",
            "order_id",
            "order_number",
            "courier_id",
            "courier_name",
            "rating",
            "comment",
            "created_at",
        ]
        read_only_fields = fields
