"""Catalog API views.

Browsing is public; creating and editing categories or medicines needs a
staff account.  Domain exceptions propagate to the standardized error
handler.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, BasePermission, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateMedicineDTO,
    UpdateCategoryDTO,
    UpdateMedicineDTO,
)
from modules.catalog.repositories import (
    CategoryDjangoRepository,
    MedicineDjangoRepository,
)
from modules.catalog.serializers import (
    AvailabilitySerializer,
    CategoryInputSerializer,
    CategorySerializer,
    MedicineInputSerializer,
    MedicineQuerySerializer,
    MedicineSerializer,
)
from modules.catalog.services import CatalogService

PUBLIC_ACTIONS = {"list", "retrieve", "availability"}


def build_catalog_service() -> CatalogService:
    return CatalogService(
        category_repository=CategoryDjangoRepository(),
        medicine_repository=MedicineDjangoRepository(),
    )


class _CatalogViewSet(ViewSet):
    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_catalog_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAdminUser()]


class CategoryViewSet(_CatalogViewSet):
    def list(self, request: Request) -> Response:
        """GET /api/v1/categories/"""
        categories = self._service.list_categories()
        return Response(CategorySerializer(categories, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/"""
        category = self._service.get_category(pk)
        return Response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        serializer = CategoryInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = self._service.create_category(
            CreateCategoryDTO(**serializer.validated_data)
        )
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/categories/{pk}/"""
        serializer = CategoryInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = self._service.update_category(
            pk, UpdateCategoryDTO(**serializer.validated_data)
        )
        return Response(CategorySerializer(category).data)


class MedicineViewSet(_CatalogViewSet):
    def list(self, request: Request) -> Response:
        """GET /api/v1/medicines/?category={id}"""
        query = MedicineQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        medicines = self._service.list_medicines(query.validated_data.get("category"))
        return Response(MedicineSerializer(medicines, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/medicines/{pk}/"""
        medicine = self._service.get_medicine(pk)
        return Response(MedicineSerializer(medicine).data)

    @action(detail=True, methods=["get"])
    def availability(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/medicines/{pk}/availability/"""
        availability = self._service.check_availability(pk)
        return Response(AvailabilitySerializer(availability.model_dump()).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/medicines/"""
        serializer = MedicineInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        medicine = self._service.create_medicine(
            CreateMedicineDTO(**serializer.validated_data)
        )
        return Response(MedicineSerializer(medicine).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/medicines/{pk}/

        Stock may be corrected here but never set below zero.
        """
        serializer = MedicineInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        medicine = self._service.update_medicine(
            pk, UpdateMedicineDTO(**serializer.validated_data)
        )
        return Response(MedicineSerializer(medicine).data)
