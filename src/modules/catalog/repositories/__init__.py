"""Catalog repositories package."""

from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    MedicineDjangoRepository,
)
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IMedicineRepository,
)

__all__ = [
    "CategoryDjangoRepository",
    "ICategoryRepository",
    "IMedicineRepository",
    "MedicineDjangoRepository",
]
