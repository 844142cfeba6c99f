"""Unit tests for webhook payload parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.chatbot.dtos import WebhookPayload

pytestmark = pytest.mark.unit


def _payload(message: dict) -> dict:
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "WABA",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": "1234567890"},
                            "contacts": [{"wa_id": "919812345678", "profile": {"name": "Asha"}}],
                            "messages": [message],
                        },
                    }
                ],
            }
        ],
    }


def test_text_message_content():
    payload = WebhookPayload.model_validate(
        _payload({"from": "919812345678", "id": "wamid.1", "type": "text", "text": {"body": "  Hi "}})
    )
    [message] = payload.messages()
    assert message.sender == "919812345678"
    assert message.content == "Hi"


def test_button_reply_content_is_reply_id():
    payload = WebhookPayload.model_validate(
        _payload(
            {
                "from": "919812345678",
                "id": "wamid.2",
                "type": "interactive",
                "interactive": {
                    "type": "button_reply",
                    "button_reply": {"id": "my_orders", "title": "My orders"},
                },
            }
        )
    )
    assert payload.messages()[0].content == "my_orders"


def test_list_reply_content_is_row_id():
    payload = WebhookPayload.model_validate(
        _payload(
            {
                "from": "919812345678",
                "id": "wamid.3",
                "type": "interactive",
                "interactive": {
                    "type": "list_reply",
                    "list_reply": {"id": "cat:abc", "title": "Vitamins"},
                },
            }
        )
    )
    assert payload.messages()[0].content == "cat:abc"


def test_status_only_delivery_has_no_messages():
    payload = WebhookPayload.model_validate(
        {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"field": "messages", "value": {"statuses": [{"id": "x"}]}}]}],
        }
    )
    assert payload.messages() == []


def test_message_without_sender_is_rejected():
    with pytest.raises(ValidationError):
        WebhookPayload.model_validate(_payload({"id": "wamid.4", "type": "text"}))


@pytest.mark.parametrize(
    "message, expected",
    [
        ({"type": "text", "text": {"body": "ord: Flat 4"}}, False),
        (
            {
                "type": "interactive",
                "interactive": {"type": "list_reply", "list_reply": {"id": "cat:abc", "title": "Vitamins"}},
            },
            True,
        ),
        ({"type": "button", "button": {"payload": "rate:5:ORD-20260101-ABC123", "text": "5"}}, True),
    ],
)
def test_is_reply_distinguishes_picks_from_typed_text(message, expected):
    payload = WebhookPayload.model_validate(
        _payload({"from": "919812345678", "id": "wamid.9", **message})
    )
    assert payload.messages()[0].is_reply is expected
