"""Unit tests for the WhatsApp Cloud API sender and message builders."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from modules.notifications.client import (
    WhatsAppClient,
    button_message,
    list_message,
    text_message,
)
from modules.notifications.exceptions import NotificationError
from modules.notifications.messages import feedback_request

pytestmark = pytest.mark.unit


@pytest.fixture()
def client():
    return WhatsAppClient(
        api_url="https://graph.example.com/v21.0/",
        access_token="token-123",
        phone_number_id="555",
        timeout=3.0,
    )


class TestBuilders:
    def test_text_message(self):
        assert text_message("hello") == {
            "type": "text",
            "text": {"preview_url": False, "body": "hello"},
        }

    def test_button_titles_are_truncated(self):
        content = button_message("Pick", [("a", "A very long button title here")])
        button = content["interactive"]["action"]["buttons"][0]
        assert button["reply"] == {"id": "a", "title": "A very long button t"}

    def test_more_than_three_buttons_rejected(self):
        with pytest.raises(ValueError):
            button_message("Pick", [(str(i), str(i)) for i in range(4)])

    def test_list_rows(self):
        content = list_message("Pick", "Open", [("r1", "Row", "Desc")])
        rows = content["interactive"]["action"]["sections"][0]["rows"]
        assert rows == [{"id": "r1", "title": "Row", "description": "Desc"}]

    def test_empty_list_rejected(self):
        with pytest.raises(ValueError):
            list_message("Pick", "Open", [])

    def test_feedback_request_buttons_carry_order_number(self):
        content = feedback_request("ORD-20260101-ABC123", "Asha")
        ids = [b["reply"]["id"] for b in content["interactive"]["action"]["buttons"]]
        assert ids == [
            "rate:5:ORD-20260101-ABC123",
            "rate:3:ORD-20260101-ABC123",
            "rate:1:ORD-20260101-ABC123",
        ]


class TestSend:
    def test_posts_to_messages_endpoint(self, client, whatsapp_post):
        result = client.send("919812345678", text_message("hi"))

        assert result == {"messages": [{"id": "wamid.test"}]}
        args, kwargs = whatsapp_post.call_args
        assert args[0] == "https://graph.example.com/v21.0/555/messages"
        assert kwargs["timeout"] == 3.0
        assert kwargs["headers"]["Authorization"] == "Bearer token-123"
        assert kwargs["json"]["to"] == "919812345678"
        assert kwargs["json"]["messaging_product"] == "whatsapp"
        assert kwargs["json"]["type"] == "text"

    def test_transport_error_raises_notification_error(self, client, whatsapp_post):
        whatsapp_post.side_effect = requests.Timeout("timed out")

        with pytest.raises(NotificationError):
            client.send("919812345678", text_message("hi"))

    def test_rejected_answer_raises_notification_error(self, client, whatsapp_post):
        whatsapp_post.return_value = MagicMock(ok=False, status_code=401, text="bad token")

        with pytest.raises(NotificationError):
            client.send("919812345678", text_message("hi"))

    def test_is_configured(self):
        assert not WhatsAppClient("https://x", "", "555").is_configured
        assert WhatsAppClient("https://x", "t", "555").is_configured
