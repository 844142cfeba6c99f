"""Catalog DRF serializers.

Input serializers validate request shape; the view turns the validated
data into Pydantic DTOs for ``CatalogService``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Category, Medicine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CategoryInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    description = serializers.CharField(required=False, allow_blank=True)


class MedicineInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category_id = serializers.UUIDField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    stock = serializers.IntegerField(min_value=0, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    requires_prescription = serializers.BooleanField(required=False)


class MedicineQuerySerializer(serializers.Serializer):
    category = serializers.UUIDField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "description"]
        read_only_fields = fields


class MedicineSerializer(serializers.ModelSerializer):
    category_id = serializers.UUIDField(read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)

    class Meta:
        model = Medicine
        fields = [
            "id",
            "name",
            "description",
            "category_id",
            "category_name",
            "price",
            "stock",
            "requires_prescription",
        ]
        read_only_fields = fields


class AvailabilitySerializer(serializers.Serializer):
    medicine_id = serializers.UUIDField()
    available = serializers.BooleanField()
    stock = serializers.IntegerField()
