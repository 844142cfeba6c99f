"""Catalog domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import InvalidState, NotFound


class CategoryNotFound(NotFound):
    code = "category_not_found"
    default_message = "Category not found."


class MedicineNotFound(NotFound):
    code = "medicine_not_found"
    default_message = "Medicine not found."


class CategoryAlreadyExists(InvalidState):
    code = "category_exists"
    default_message = "A category with this name already exists."
