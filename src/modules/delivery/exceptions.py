"""Delivery domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import InvalidState, NotFound, PaymentRequired

__all__ = [
    "CourierBusy",
    "CourierNotFound",
    "FeedbackNotAllowed",
    "OrderNotAssignable",
    "OrderNotAssigned",
    "PaymentRequired",
]


class CourierNotFound(NotFound):
    code = "courier_not_found"
    default_message = "Courier not found."


class CourierBusy(InvalidState):
    """The courier already holds another open order."""

    code = "courier_busy"
    default_message = "Courier already has an active order."


class OrderNotAssignable(InvalidState):
    """Delivered or cancelled orders cannot be dispatched again."""

    code = "order_not_assignable"
    default_message = "Order is closed and cannot be dispatched."


class OrderNotAssigned(InvalidState):
    """The courier acted on an order that is not assigned to them."""

    code = "order_not_assigned"
    default_message = "Order is not assigned to this courier."


class FeedbackNotAllowed(InvalidState):
    code = "feedback_not_allowed"
    default_message = "Feedback can only be left for delivered orders."
