"""Django ORM implementation of the catalog repositories.

Lookups return ``None`` for missing or malformed ids; the service layer
decides which ``NotFound`` to raise.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.catalog.models import Category, Medicine
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IMedicineRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    def get_by_id(self, id: Any) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Category]:
        try:
            return Category.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_name(self, name: str) -> Optional[Category]:
        return Category.objects.filter(name__iexact=name.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Category]:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=str(entity.id))
        return entity


class MedicineDjangoRepository(IMedicineRepository):
    def get_by_id(self, id: Any) -> Optional[Medicine]:
        try:
            return Medicine.objects.select_related("category").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Medicine]:
        """Retrieve a medicine with a row-level lock (SELECT FOR UPDATE).

        The caller must already be inside ``transaction.atomic``.
        """
        try:
            return Medicine.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def lock_many(self, ids: Iterable[Any]) -> List[Medicine]:
        """Lock medicine rows sorted by primary key.

        Two transactions touching the same pair of medicines always lock
        them in the same order, so they cannot deadlock.
        """
        try:
            return list(
                Medicine.objects.select_for_update()
                .filter(id__in=set(ids))
                .order_by("id")
            )
        except (ValueError, ValidationError):
            return []

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Medicine]:
        """List medicines with optional Django ORM look-ups.

        Examples of valid filters::

            {"category_id": "0190..."}
            {"stock__gt": 0}
        """
        queryset = Medicine.objects.select_related("category")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Medicine) -> Medicine:
        entity.save()
        logger.info(
            "medicine.saved",
            medicine_id=str(entity.id),
            stock=entity.stock,
        )
        return entity
