"""Order URL configuration.

``/orders/`` (POST) and ``/orders/{id}/`` (GET, PATCH, DELETE) serve the
storefront; the list and the ``status``, ``payment-status`` and
``verify-prescription`` actions serve the pharmacy staff.
"""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.orders.views import OrderViewSet

router = DefaultRouter(trailing_slash=True)
router.register("orders", OrderViewSet, basename="order")

urlpatterns = router.urls
