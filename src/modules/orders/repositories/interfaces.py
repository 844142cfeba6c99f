"""Order repository interface.

Extends ``IRepository[Order]`` with the look-ups the order use cases and
the chat bot need.  Every query ignores soft-deleted orders.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    ``save`` also writes the aggregate's pending domain events to the
    outbox and schedules their publication for after commit.
    """

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve a live order with its medicine, courier and history."""

    @abstractmethod
    def get_for_update(self, id: Any) -> Optional[Order]:
        """Retrieve a live order holding a row lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Retrieve a live order by its human-readable number."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """Live orders, newest first, with optional field filters."""

    @abstractmethod
    def list_for_phone(self, phone: str, limit: int) -> List[Order]:
        """Newest live orders placed from ``phone``."""

    @abstractmethod
    def soft_delete(self, entity: Order) -> Order:
        """Hide the order from every subsequent query."""
