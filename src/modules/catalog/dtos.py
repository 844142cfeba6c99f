"""Catalog DTOs for the Service Layer.

Pydantic v2 contracts between the DRF serializers and ``CatalogService``.
All DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


def _non_negative(value, message: str):
    if value is not None and value < 0:
        raise ValueError(message)
    return value


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Category name must not be empty.")
        return v.strip()


class UpdateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    description: str | None = None


class CreateMedicineDTO(BaseModel):
    """Validates ``price >= 0`` and ``stock >= 0``."""

    model_config = ConfigDict(frozen=True)

    name: str
    category_id: UUID
    price: Decimal
    stock: int = 0
    description: str = ""
    requires_prescription: bool = False

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal) -> Decimal:
        return _non_negative(v, "Price cannot be negative.")

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        return _non_negative(v, "Stock cannot be negative.")


class UpdateMedicineDTO(BaseModel):
    """Partial update: only supplied fields are written."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    category_id: UUID | None = None
    price: Decimal | None = None
    stock: int | None = None
    description: str | None = None
    requires_prescription: bool | None = None

    @field_validator("price")
    @classmethod
    def price_must_be_non_negative(cls, v: Decimal | None) -> Decimal | None:
        return _non_negative(v, "Price cannot be negative.")

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int | None) -> int | None:
        return _non_negative(v, "Stock cannot be negative.")


class AvailabilityDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    medicine_id: UUID
    available: bool
    stock: int
