"""Unit tests for Order DTOs.

Covers:
- CreateOrderDTO: blank fields, phone normalization, quantity validation,
  frozen immutability.
- ModifyOrderDTO: optional fields and their validation.
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.orders.dtos import CreateOrderDTO, ModifyOrderDTO, normalize_phone

pytestmark = pytest.mark.unit


def _create(**overrides) -> CreateOrderDTO:
    fields = {
        "customer_name": "Asha Patel",
        "address": "12 MG Road, Pune",
        "phone": "+91 98123-45678",
        "medicine_id": uuid4(),
        "quantity": 2,
    }
    fields.update(overrides)
    return CreateOrderDTO(**fields)


class TestCreateOrderDTO:
    def test_valid(self):
        dto = _create()

        assert dto.phone == "+919812345678"
        assert dto.prescription_image is None

    def test_names_are_stripped(self):
        assert _create(customer_name="  Asha  ").customer_name == "Asha"

    @pytest.mark.parametrize("field", ["customer_name", "address"])
    def test_blank_text_rejected(self, field):
        with pytest.raises(ValidationError):
            _create(**{field: "   "})

    @pytest.mark.parametrize("phone", ["", "12345", "phone", "+1234567890123456"])
    def test_invalid_phone_rejected(self, phone):
        with pytest.raises(ValidationError):
            _create(phone=phone)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        with pytest.raises(ValidationError):
            _create(quantity=quantity)

    def test_string_medicine_id_is_parsed(self):
        medicine_id = uuid4()
        assert _create(medicine_id=str(medicine_id)).medicine_id == medicine_id

    def test_frozen(self):
        dto = _create()
        with pytest.raises(ValidationError):
            dto.quantity = 5


class TestModifyOrderDTO:
    def test_all_fields_optional(self):
        dto = ModifyOrderDTO()

        assert dto.quantity is None
        assert dto.medicine_id is None
        assert dto.model_dump(exclude_none=True) == {}

    def test_phone_is_normalized(self):
        assert ModifyOrderDTO(phone="(0) 98123 45678").phone == "09812345678"

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            ModifyOrderDTO(quantity=0)


def test_normalize_phone_keeps_leading_plus():
    assert normalize_phone(" +91 (981) 234-5678 ") == "+919812345678"
