"""Customer-facing message texts for order notifications."""

from __future__ import annotations

from typing import Any, Mapping

from modules.notifications.client import Content, button_message, text_message

RATING_BUTTONS = [
    ("rate:5", "Excellent (5)"),
    ("rate:3", "Okay (3)"),
    ("rate:1", "Poor (1)"),
]


def order_confirmation(payload: Mapping[str, Any]) -> Content:
    return text_message(
        f"Hi {payload['customer_name']}, your order {payload['order_number']} "
        f"for {payload['quantity']} x {payload['medicine_name']} is placed. "
        f"Total: {payload['total_price']}."
    )


def order_dispatched(payload: Mapping[str, Any]) -> Content:
    return text_message(
        f"Your order {payload['order_number']} is on its way with "
        f"{payload['courier_name']} ({payload['courier_phone']})."
    )


def order_cancelled(payload: Mapping[str, Any]) -> Content:
    return text_message(f"Your order {payload['order_number']} has been cancelled.")


def feedback_request(order_number: str, customer_name: str) -> Content:
    return button_message(
        f"Hi {customer_name}, your order {order_number} was delivered. "
        "How was the delivery?",
        [(f"{button_id}:{order_number}", title) for button_id, title in RATING_BUTTONS],
    )
