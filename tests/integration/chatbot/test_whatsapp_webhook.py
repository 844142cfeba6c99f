"""Integration tests for the WhatsApp webhook (/webhook/whatsapp)."""

from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/webhook/whatsapp"
SENDER = "919812345678"


def _delivery(*contents: str, sender: str = SENDER, typed: bool = False) -> dict:
    """A webhook body carrying one message per ``content``.

    Contents containing ``:`` or matching a menu id are sent as button
    replies, the rest as typed text.  ``typed`` sends everything as text.
    """
    messages = []
    for index, content in enumerate(contents):
        message = {"from": sender, "id": f"wamid.{index}", "timestamp": "1700000000"}
        if typed:
            message["type"] = "text"
            message["text"] = {"body": content}
        elif ":" in content or content in {"order", "my_orders", "support", "confirm", "discard"}:
            message["type"] = "interactive"
            message["interactive"] = {
                "type": "button_reply",
                "button_reply": {"id": content, "title": content},
            }
        else:
            message["type"] = "text"
            message["text"] = {"body": content}
        messages.append(message)
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
                            "contacts": [{"wa_id": sender, "profile": {"name": "Asha"}}],
                            "messages": messages,
                        },
                    }
                ],
            }
        ],
    }


def _sent(whatsapp_post) -> list[dict]:
    return [call.kwargs["json"] for call in whatsapp_post.call_args_list]


def _body(message: dict) -> str:
    if message["type"] == "text":
        return message["text"]["body"]
    return message["interactive"]["body"]["text"]


class TestVerification:
    def test_handshake_echoes_challenge(self, api_client):
        response = api_client.get(
            URL,
            {"hub.mode": "subscribe", "hub.verify_token": "test-verify-token", "hub.challenge": "4242"},
        )

        assert response.status_code == 200
        assert response.content == b"4242"

    def test_wrong_token_is_forbidden(self, api_client):
        response = api_client.get(
            URL,
            {"hub.mode": "subscribe", "hub.verify_token": "guess", "hub.challenge": "4242"},
        )

        assert response.status_code == 403


class TestDelivery:
    def test_greeting_is_answered_with_menu(self, api_client, whatsapp_post):
        response = api_client.post(URL, _delivery("hi"), format="json")

        assert response.status_code == 200
        assert response.json() == {"status": "received"}
        [reply] = _sent(whatsapp_post)
        assert reply["to"] == SENDER
        assert _body(reply).startswith("Hello Asha!")

    def test_status_callbacks_are_acknowledged(self, api_client, whatsapp_post):
        payload = {
            "object": "whatsapp_business_account",
            "entry": [{"changes": [{"field": "messages", "value": {"statuses": [{"id": "x"}]}}]}],
        }

        response = api_client.post(URL, payload, format="json")

        assert response.status_code == 200
        whatsapp_post.assert_not_called()

    def test_malformed_payload_returns_400(self, api_client, whatsapp_post):
        payload = {"entry": [{"changes": [{"value": {"messages": [{"id": "wamid.1"}]}}]}]}

        response = api_client.post(URL, payload, format="json")

        assert response.status_code == 400
        whatsapp_post.assert_not_called()

    def test_rejected_intent_is_still_acknowledged(self, api_client, whatsapp_post):
        response = api_client.post(URL, _delivery("track:ORD-20240101-ABCDEF"), format="json")

        assert response.status_code == 200
        assert _body(_sent(whatsapp_post)[0]) == "Order ORD-20240101-ABCDEF not found."


class TestSignature:
    @pytest.fixture(autouse=True)
    def app_secret(self, settings):
        settings.WHATSAPP_APP_SECRET = "app-secret"
        return "app-secret"

    def _post(self, api_client, raw: bytes, signature: str):
        return api_client.post(
            URL,
            data=raw,
            content_type="application/json",
            HTTP_X_HUB_SIGNATURE_256=signature,
        )

    def test_valid_signature_is_accepted(self, api_client, app_secret):
        raw = json.dumps(_delivery("hi")).encode()
        digest = hmac.new(app_secret.encode(), raw, hashlib.sha256).hexdigest()

        response = self._post(api_client, raw, f"sha256={digest}")

        assert response.status_code == 200

    def test_invalid_signature_is_forbidden(self, api_client, whatsapp_post):
        raw = json.dumps(_delivery("hi")).encode()

        response = self._post(api_client, raw, "sha256=deadbeef")

        assert response.status_code == 403
        whatsapp_post.assert_not_called()

    def test_missing_signature_is_forbidden(self, api_client):
        response = api_client.post(URL, _delivery("hi"), format="json")

        assert response.status_code == 403


class TestOrderingConversation:
    def _say(self, api_client, content: str) -> None:
        response = api_client.post(URL, _delivery(content), format="json")
        assert response.status_code == 200

    def test_places_order_end_to_end(self, api_client, whatsapp_post, category, medicine):
        for content in (
            "hi",
            "order",
            f"cat:{category.id}",
            f"med:{medicine.id}",
            "3",
            "Asha Patel",
            "12 MG Road, Pune",
            "confirm",
        ):
            self._say(api_client, content)

        order = Order.objects.get()
        assert order.phone == SENDER
        assert order.quantity == 3
        assert order.customer_name == "Asha Patel"
        assert order.total_price == Decimal("75.00")
        medicine.refresh_from_db()
        assert medicine.stock == 7
        assert _body(_sent(whatsapp_post)[-1]).startswith(f"Order {order.order_number} placed.")

    def test_typed_address_with_colon_keeps_the_draft(
        self, api_client, whatsapp_post, category, medicine
    ):
        for content in ("order", f"cat:{category.id}", f"med:{medicine.id}"):
            self._say(api_client, content)
        for content in ("2", "Asha Patel", "ord: Flat 4, MG Road"):
            response = api_client.post(URL, _delivery(content, typed=True), format="json")
            assert response.status_code == 200
        self._say(api_client, "confirm")

        order = Order.objects.get()
        assert order.address == "ord: Flat 4, MG Road"
        assert order.quantity == 2

    def test_tracks_and_cancels_own_order(self, api_client, whatsapp_post, medicine):
        order = Order.objects.create(
            customer_name="Asha Patel",
            address="12 MG Road, Pune",
            phone=f"+{SENDER}",
            medicine=medicine,
            quantity=2,
            total_price=Decimal("50.00"),
        )
        medicine.stock = 8
        medicine.save()

        self._say(api_client, order.order_number)
        assert "Status: pending" in _body(_sent(whatsapp_post)[-1])

        self._say(api_client, f"cancel_yes:{order.order_number}")

        order = Order.objects.get(id=order.id)
        assert order.status == OrderStatus.CANCELLED
        assert order.is_deleted
        medicine.refresh_from_db()
        assert medicine.stock == 10

    def test_cannot_cancel_someone_elses_order(self, api_client, whatsapp_post, medicine):
        order = Order.objects.create(
            customer_name="Ravi Kumar",
            address="8 Ring Road",
            phone="+919899999999",
            medicine=medicine,
            quantity=1,
            total_price=Decimal("25.00"),
        )

        self._say(api_client, f"cancel_yes:{order.order_number}")

        order.refresh_from_db()
        assert order.status == OrderStatus.PENDING
        assert _body(_sent(whatsapp_post)[-1]).endswith("not found.")
