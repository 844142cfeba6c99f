"""Catalog service layer (Use Cases).

Read-only lookups used by the storefront and the chat bot, plus the admin
edits to categories and medicines.  The read path has no side effects;
a lookup failure is always reported, never defaulted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.db import transaction

from modules.catalog.dtos import AvailabilityDTO
from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryNotFound,
    MedicineNotFound,
)
from modules.catalog.models import Category, Medicine

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateMedicineDTO,
        UpdateCategoryDTO,
        UpdateMedicineDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IMedicineRepository,
    )

logger = structlog.get_logger(__name__)


class CatalogService:
    """Application service for the catalog.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        category_repository: ICategoryRepository,
        medicine_repository: IMedicineRepository,
    ) -> None:
        self._category_repo = category_repository
        self._medicine_repo = medicine_repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_categories(self) -> List[Category]:
        return self._category_repo.list()

    def get_category(self, category_id: Any) -> Category:
        category = self._category_repo.get_by_id(category_id)
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found.")
        return category

    def list_medicines(self, category_id: Optional[Any] = None) -> List[Medicine]:
        """Medicines of one category, or every medicine when unfiltered.

        An unknown category yields an empty list.
        """
        if category_id is None:
            return self._medicine_repo.list()
        return self._medicine_repo.list({"category_id": category_id})

    def get_medicine(self, medicine_id: Any) -> Medicine:
        medicine = self._medicine_repo.get_by_id(medicine_id)
        if not medicine:
            raise MedicineNotFound(f"Medicine {medicine_id} not found.")
        return medicine

    def check_availability(self, medicine_id: Any) -> AvailabilityDTO:
        """Report whether at least one unit is in stock.

        Raises:
            MedicineNotFound: unknown id.
        """
        medicine = self.get_medicine(medicine_id)
        return AvailabilityDTO(
            medicine_id=medicine.id,
            available=medicine.stock > 0,
            stock=medicine.stock,
        )

    # ------------------------------------------------------------------
    # Admin commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        if self._category_repo.get_by_name(dto.name):
            raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
        category = self._category_repo.save(
            Category(name=dto.name, description=dto.description)
        )
        logger.info("category.created", category_id=str(category.id))
        return category

    @transaction.atomic
    def update_category(self, category_id: Any, dto: UpdateCategoryDTO) -> Category:
        category = self._category_repo.get_for_update(category_id)
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found.")
        if dto.name is not None:
            existing = self._category_repo.get_by_name(dto.name)
            if existing and existing.id != category.id:
                raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
            category.name = dto.name.strip()
        if dto.description is not None:
            category.description = dto.description
        category = self._category_repo.save(category)
        logger.info("category.updated", category_id=str(category.id))
        return category

    @transaction.atomic
    def create_medicine(self, dto: CreateMedicineDTO) -> Medicine:
        category = self.get_category(dto.category_id)
        medicine = self._medicine_repo.save(
            Medicine(
                name=dto.name,
                description=dto.description,
                category=category,
                price=dto.price,
                stock=dto.stock,
                requires_prescription=dto.requires_prescription,
            )
        )
        logger.info(
            "medicine.created",
            medicine_id=str(medicine.id),
            category_id=str(category.id),
        )
        return medicine

    @transaction.atomic
    def update_medicine(self, medicine_id: Any, dto: UpdateMedicineDTO) -> Medicine:
        """Apply a partial admin edit under a row lock.

        Price changes never touch existing orders: they carry a frozen total.
        """
        medicine = self._medicine_repo.get_for_update(medicine_id)
        if not medicine:
            raise MedicineNotFound(f"Medicine {medicine_id} not found.")

        if dto.category_id is not None:
            medicine.category = self.get_category(dto.category_id)
        for field in ("name", "description", "price", "stock", "requires_prescription"):
            value = getattr(dto, field)
            if value is not None:
                setattr(medicine, field, value)

        medicine = self._medicine_repo.save(medicine)
        logger.info("medicine.updated", medicine_id=str(medicine.id))
        return medicine
