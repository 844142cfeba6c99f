"""Django ORM implementation of the delivery repositories."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from modules.delivery.models import Courier, Feedback
from modules.delivery.repositories.interfaces import (
    ICourierRepository,
    IFeedbackRepository,
)

logger = structlog.get_logger(__name__)


class CourierDjangoRepository(ICourierRepository):
    def get_by_id(self, id: Any) -> Optional[Courier]:
        """Retrieve a courier with its current order and that order's medicine."""
        try:
            return (
                Courier.objects.select_related("current_order__medicine")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Courier]:
        try:
            return Courier.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_user(self, user: Any) -> Optional[Courier]:
        return Courier.objects.filter(user_id=user.pk).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Courier]:
        queryset = Courier.objects.select_related("current_order__medicine")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Courier) -> Courier:
        entity.save()
        logger.info(
            "courier.saved",
            courier_id=str(entity.id),
            current_order_id=str(entity.current_order_id or ""),
        )
        return entity

    def lock_for_order(self, order_id: Any, courier_id: Any = None) -> List[Courier]:
        condition = Q(current_order_id=order_id)
        if courier_id is not None:
            condition |= Q(id=courier_id)
        try:
            return list(
                Courier.objects.select_for_update().filter(condition).order_by("id")
            )
        except (ValueError, ValidationError):
            return []

    def release_order(self, order_id: Any) -> int:
        released = Courier.objects.filter(current_order_id=order_id).update(
            current_order=None, updated_at=timezone.now()
        )
        if released:
            logger.info("courier.slot_released", order_id=str(order_id))
        return released


class FeedbackDjangoRepository(IFeedbackRepository):
    @transaction.atomic
    def add(self, feedback: Feedback) -> Feedback:
        feedback.save()
        logger.info(
            "feedback.saved",
            feedback_id=str(feedback.id),
            order_id=str(feedback.order_id),
            rating=feedback.rating,
        )
        return feedback

    def list(self) -> List[Feedback]:
        return list(
            Feedback.objects.select_related("order", "courier").order_by(
                "-created_at", "-id"
            )
        )
