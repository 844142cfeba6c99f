"""Role-based permissions for the courier dashboard."""

from __future__ import annotations

from rest_framework.permissions import BasePermission

ROLE_ADMIN = "admin"
ROLE_DELIVERY = "delivery"


def role_for(user) -> str | None:
    if hasattr(user, "courier"):
        return ROLE_DELIVERY
    if user.is_staff:
        return ROLE_ADMIN
    return None


class IsCourier(BasePermission):
    """Allow authenticated users linked to a courier profile.

    When the request carries a JWT, its ``role`` claim must also be
    ``delivery``.
    """

    message = "Courier credentials required."

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not (user and user.is_authenticated and hasattr(user, "courier")):
            return False
        token = request.auth
        if token is not None and hasattr(token, "get"):
            return token.get("role") == ROLE_DELIVERY
        return True
