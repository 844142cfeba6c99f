"""Celery tasks delivering WhatsApp messages outside any transaction.

Failures are logged and swallowed: the order mutation that triggered the
message has already committed and must not be reported as failed.
"""

from __future__ import annotations

from typing import Any, Dict

import structlog
from celery import shared_task

from modules.notifications.client import WhatsAppClient
from modules.notifications.exceptions import NotificationError
from modules.notifications.messages import feedback_request

logger = structlog.get_logger(__name__)


def _deliver(recipient: str, content: Dict[str, Any], kind: str) -> bool:
    client = WhatsAppClient.from_settings()
    if not client.is_configured:
        logger.info("notification.skipped", kind=kind, reason="not_configured")
        return False
    try:
        client.send(recipient, content)
    except NotificationError as exc:
        logger.warning("notification.failed", kind=kind, error=str(exc))
        return False
    return True


@shared_task(name="notifications.send_message")
def send_message(recipient: str, content: Dict[str, Any]) -> bool:
    """Send a prebuilt message (chat bot replies, order updates)."""
    return _deliver(recipient, content, kind="message")


@shared_task(name="notifications.send_feedback_request")
def send_feedback_request(recipient: str, order_number: str, customer_name: str) -> bool:
    """Ask the customer to rate a delivery."""
    return _deliver(
        recipient,
        feedback_request(order_number, customer_name),
        kind="feedback_request",
    )
