"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF serializers, chat bot)
and ``OrderService``.  DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

import re
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator

PHONE_RE = re.compile(r"^\+?\d{7,15}$")


def normalize_phone(value: str) -> str:
    """Strip spaces, dashes and brackets; keep an optional leading ``+``."""
    return re.sub(r"[\s\-()]", "", value or "")


def _validate_phone(value: str) -> str:
    phone = normalize_phone(value)
    if not PHONE_RE.match(phone):
        raise ValueError("Phone must contain 7 to 15 digits.")
    return phone


def _validate_quantity(value: int) -> int:
    if value < 1:
        raise ValueError("Quantity must be at least 1.")
    return value


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order placement.

    ``prescription_image`` is the uploaded file object, passed through to
    the model's ``FileField`` untouched.
    """

    model_config = ConfigDict(frozen=True)

    customer_name: str
    address: str
    phone: str
    medicine_id: UUID
    quantity: int
    prescription_image: Optional[Any] = None

    @field_validator("customer_name", "address")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("This field must not be empty.")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: str) -> str:
        return _validate_phone(v)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        return _validate_quantity(v)


class ModifyOrderDTO(BaseModel):
    """Partial modification of a pending order.

    Changing ``medicine_id`` or ``quantity`` reconciles stock; the contact
    fields never touch stock.
    """

    model_config = ConfigDict(frozen=True)

    customer_name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    medicine_id: Optional[UUID] = None
    quantity: Optional[int] = None

    @field_validator("phone")
    @classmethod
    def phone_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _validate_phone(v)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: Optional[int]) -> Optional[int]:
        return None if v is None else _validate_quantity(v)
