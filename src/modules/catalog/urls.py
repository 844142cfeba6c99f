"""Catalog URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.catalog.views import CategoryViewSet, MedicineViewSet

router = DefaultRouter(trailing_slash=True)
router.register("categories", CategoryViewSet, basename="category")
router.register("medicines", MedicineViewSet, basename="medicine")

urlpatterns = router.urls
