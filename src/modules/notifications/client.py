"""WhatsApp Cloud API sender.

``WhatsAppClient.send(recipient, content)`` posts one message to
``{api_url}/{phone_number_id}/messages``.  ``content`` is built with one of
the helpers below and carries everything except the recipient.

The call is bounded by ``timeout`` and raises ``NotificationError`` for
transport errors and non-2xx answers.  It must never run inside a
database transaction: callers go through the Celery tasks in ``tasks.py``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import requests
import structlog
from django.conf import settings

from modules.notifications.exceptions import NotificationError

logger = structlog.get_logger(__name__)

MAX_REPLY_BUTTONS = 3
MAX_LIST_ROWS = 10
BUTTON_TITLE_LIMIT = 20
ROW_TITLE_LIMIT = 24
ROW_DESCRIPTION_LIMIT = 72

Content = Dict[str, Any]


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------


def text_message(body: str) -> Content:
    return {"type": "text", "text": {"preview_url": False, "body": body}}


def button_message(body: str, buttons: Sequence[Tuple[str, str]]) -> Content:
    """Interactive message with up to three reply buttons ``(id, title)``."""
    if not 0 < len(buttons) <= MAX_REPLY_BUTTONS:
        raise ValueError(f"WhatsApp allows 1 to {MAX_REPLY_BUTTONS} reply buttons.")
    return {
        "type": "interactive",
        "interactive": {
            "type": "button",
            "body": {"text": body},
            "action": {
                "buttons": [
                    {
                        "type": "reply",
                        "reply": {"id": button_id, "title": title[:BUTTON_TITLE_LIMIT]},
                    }
                    for button_id, title in buttons
                ]
            },
        },
    }


def list_message(
    body: str,
    button_label: str,
    rows: Iterable[Tuple[str, str, str]],
    section_title: str = "Options",
) -> Content:
    """Interactive list with up to ten rows ``(id, title, description)``."""
    rows = list(rows)
    if not 0 < len(rows) <= MAX_LIST_ROWS:
        raise ValueError(f"WhatsApp lists hold 1 to {MAX_LIST_ROWS} rows.")
    return {
        "type": "interactive",
        "interactive": {
            "type": "list",
            "body": {"text": body},
            "action": {
                "button": button_label[:BUTTON_TITLE_LIMIT],
                "sections": [
                    {
                        "title": section_title[:ROW_TITLE_LIMIT],
                        "rows": [
                            {
                                "id": row_id,
                                "title": title[:ROW_TITLE_LIMIT],
                                "description": description[:ROW_DESCRIPTION_LIMIT],
                            }
                            for row_id, title, description in rows
                        ],
                    }
                ],
            },
        },
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class WhatsAppClient:
    def __init__(
        self,
        api_url: str,
        access_token: str,
        phone_number_id: str,
        timeout: float = 10.0,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._access_token = access_token
        self._phone_number_id = phone_number_id
        self._timeout = timeout

    @classmethod
    def from_settings(cls) -> WhatsAppClient:
        return cls(
            api_url=settings.WHATSAPP_API_URL,
            access_token=settings.WHATSAPP_ACCESS_TOKEN,
            phone_number_id=settings.WHATSAPP_PHONE_NUMBER_ID,
            timeout=settings.NOTIFICATION_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._access_token and self._phone_number_id)

    @property
    def messages_url(self) -> str:
        return f"{self._api_url}/{self._phone_number_id}/messages"

    def send(self, recipient: str, content: Content) -> Optional[Dict[str, Any]]:
        """Send ``content`` to ``recipient``; returns the provider's JSON answer.

        Raises:
            NotificationError: timeout, connection error or non-2xx status.
        """
        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": recipient,
            **content,
        }
        log = logger.bind(recipient=recipient, message_type=content.get("type"))
        try:
            response = requests.post(
                self.messages_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            log.warning("notification.transport_error", error=str(exc))
            raise NotificationError(f"WhatsApp API unreachable: {exc}") from exc

        if not response.ok:
            log.warning(
                "notification.rejected",
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise NotificationError(
                f"WhatsApp API answered {response.status_code}."
            )

        log.info("notification.sent")
        try:
            return response.json()
        except ValueError:
            return None
