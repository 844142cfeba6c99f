"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Only live
(non-deleted) orders are ever returned.

``get_for_update`` locks the order row alone: joining the nullable
courier side into a ``FOR UPDATE`` query is rejected by PostgreSQL.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import QuerySet

from modules.core.models import OutboxEvent
from modules.orders.dtos import normalize_phone
from modules.orders.models import Order
from modules.orders.repositories.interfaces import IOrderRepository
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_TOPIC = "orders"


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _queryset(self) -> QuerySet:
        return Order.objects.alive().select_related("medicine", "courier")

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent, deleted or malformed IDs.
        """
        try:
            return (
                self._queryset()
                .prefetch_related("status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        try:
            return Order.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_number(self, order_number: str) -> Optional[Order]:
        return (
            self._queryset()
            .filter(order_number__iexact=order_number.strip())
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """List orders, newest first.

        Examples of valid filters::

            {"status": "pending"}
            {"payment_status": "paid", "medicine_id": "0190..."}
        """
        queryset = self._queryset().order_by("-created_at", "-id")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_phone(self, phone: str, limit: int) -> List[Order]:
        digits = normalize_phone(phone).lstrip("+")
        return list(
            self._queryset()
            .filter(phone__in=[digits, f"+{digits}"])
            .order_by("-created_at", "-id")[:limit]
        )

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist the order and its pending domain events (Transactional Outbox)."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.record(event, topic=OUTBOX_TOPIC)
        entity.clear_domain_events()
        event_bus.publish_on_commit(events)

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def soft_delete(self, entity: Order) -> Order:
        entity.delete()
        logger.info("order.soft_deleted", order_id=str(entity.id))
        return entity
