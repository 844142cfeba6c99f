"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
extends a base from ``shared.domain.exceptions``, which fixes its HTTP
status in the API layer.
"""

from __future__ import annotations

from modules.catalog.exceptions import MedicineNotFound
from shared.domain.exceptions import InvalidInput, InvalidState, NotFound

__all__ = [
    "InsufficientStock",
    "InvalidOrderStatus",
    "InvalidPaymentStatus",
    "MedicineNotFound",
    "OrderNotFound",
    "OrderNotModifiable",
]


class OrderNotFound(NotFound):
    """The requested order does not exist or has been deleted."""

    code = "order_not_found"
    default_message = "Order not found."


class OrderNotModifiable(InvalidState):
    """Only pending orders can be modified; delivered orders cannot be deleted."""

    code = "order_not_modifiable"
    default_message = "Order can no longer be modified."


class InsufficientStock(InvalidState):
    """The requested quantity exceeds the medicine's stock."""

    code = "insufficient_stock"
    default_message = "Not enough stock for this order."


class InvalidOrderStatus(InvalidInput):
    code = "invalid_order_status"
    default_message = "Unknown order status."


class InvalidPaymentStatus(InvalidInput):
    code = "invalid_payment_status"
    default_message = "Payment status must be 'pending' or 'paid'."
