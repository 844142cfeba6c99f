"""Catalog repository interfaces."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Medicine


class ICategoryRepository(IRepository["Category"]):
    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive lookup used to keep names unique."""


class IMedicineRepository(IRepository["Medicine"]):
    @abstractmethod
    def lock_many(self, ids: Iterable[Any]) -> List[Medicine]:
        """Lock several medicine rows, always in primary-key order."""
