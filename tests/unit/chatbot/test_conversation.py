"""Unit tests for the chat bot conversation flow (services mocked)."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.catalog.dtos import AvailabilityDTO
from modules.catalog.models import Category, Medicine
from modules.chatbot.conversation import FALLBACK_TEXT, ConversationHandler
from modules.chatbot.sessions import ChatState, SessionStore
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import InsufficientStock

pytestmark = pytest.mark.unit

SENDER = "919812345678"
ORDER_NUMBER = "ORD-20260101-ABC123"


def _body(reply: dict) -> str:
    if reply["type"] == "text":
        return reply["text"]["body"]
    return reply["interactive"]["body"]["text"]


def _reply_ids(reply: dict) -> list[str]:
    action = reply["interactive"]["action"]
    if "buttons" in action:
        return [button["reply"]["id"] for button in action["buttons"]]
    return [row["id"] for section in action["sections"] for row in section["rows"]]


def _order(phone: str = SENDER, status: str = OrderStatus.PENDING) -> MagicMock:
    order = MagicMock()
    order.id = uuid4()
    order.order_number = ORDER_NUMBER
    order.phone = phone
    order.status = status
    order.is_modifiable = status == OrderStatus.PENDING
    order.quantity = 2
    order.total_price = Decimal("50.00")
    order.payment_status = "pending"
    order.medicine.name = "Paracetamol 500mg"
    return order


@pytest.fixture()
def catalog():
    category = Category(id=uuid4(), name="Pain Relief")
    medicine = Medicine(
        id=uuid4(),
        name="Paracetamol 500mg",
        category=category,
        price=Decimal("25.00"),
        stock=5,
    )
    service = MagicMock()
    service.list_categories.return_value = [category]
    service.get_category.return_value = category
    service.list_medicines.return_value = [medicine]
    service.get_medicine.return_value = medicine
    service.check_availability.return_value = AvailabilityDTO(
        medicine_id=medicine.id, available=True, stock=5
    )
    service.category, service.medicine = category, medicine
    return service


@pytest.fixture()
def orders():
    return MagicMock()


@pytest.fixture()
def delivery():
    return MagicMock()


@pytest.fixture()
def sessions():
    return SessionStore()


@pytest.fixture()
def bot(orders, catalog, delivery, sessions):
    return ConversationHandler(orders, catalog, delivery, sessions)


class TestMenu:
    def test_greeting_shows_main_menu(self, bot):
        replies = bot.handle(SENDER, "Hi", profile_name="Asha")

        assert len(replies) == 1
        assert "Hello Asha!" in _body(replies[0])
        assert _reply_ids(replies[0]) == ["order", "my_orders", "support"]

    def test_unknown_input_gets_fallback(self, bot):
        replies = bot.handle(SENDER, "what is this")
        assert _body(replies[0]) == FALLBACK_TEXT

    def test_support_shows_contact(self, bot, settings):
        settings.SUPPORT_CONTACT = "help@pharmacy.test"
        replies = bot.handle(SENDER, "2")
        assert "help@pharmacy.test" in _body(replies[0])


class TestPlaceOrder:
    def _walk_to_confirmation(self, bot, catalog):
        bot.handle(SENDER, "order")
        bot.handle(SENDER, f"cat:{catalog.category.id}")
        bot.handle(SENDER, f"med:{catalog.medicine.id}")
        bot.handle(SENDER, "2")
        bot.handle(SENDER, "Asha Patel")
        return bot.handle(SENDER, "12 MG Road, Pune")

    def test_category_and_medicine_lists(self, bot, catalog):
        categories = bot.handle(SENDER, "order")
        assert _reply_ids(categories[0]) == [f"cat:{catalog.category.id}"]

        medicines = bot.handle(SENDER, f"cat:{catalog.category.id}")
        assert _reply_ids(medicines[0]) == [f"med:{catalog.medicine.id}"]
        catalog.list_medicines.assert_called_once_with(catalog.category.id)

    def test_full_flow_places_order_for_sender(self, bot, catalog, orders, sessions):
        orders.create_order.return_value = _order()

        confirmation = self._walk_to_confirmation(bot, catalog)
        assert _reply_ids(confirmation[0]) == ["confirm", "discard"]

        replies = bot.handle(SENDER, "confirm")

        dto = orders.create_order.call_args.args[0]
        assert dto.phone == SENDER
        assert dto.medicine_id == catalog.medicine.id
        assert dto.quantity == 2
        assert dto.customer_name == "Asha Patel"
        assert dto.address == "12 MG Road, Pune"
        assert ORDER_NUMBER in _body(replies[0])
        assert sessions.load(SENDER).state == ChatState.IDLE

    def test_quantity_above_stock_is_asked_again(self, bot, catalog, sessions):
        bot.handle(SENDER, "order")
        bot.handle(SENDER, f"cat:{catalog.category.id}")
        bot.handle(SENDER, f"med:{catalog.medicine.id}")

        replies = bot.handle(SENDER, "9")

        assert "Only 5 units" in _body(replies[0])
        assert sessions.load(SENDER).state == ChatState.ENTER_QUANTITY

    def test_numeric_reply_during_quantity_step_is_a_quantity(self, bot, catalog, sessions):
        bot.handle(SENDER, "order")
        bot.handle(SENDER, f"cat:{catalog.category.id}")
        bot.handle(SENDER, f"med:{catalog.medicine.id}")

        bot.handle(SENDER, "1")

        session = sessions.load(SENDER)
        assert session.state == ChatState.ENTER_NAME
        assert session.data["quantity"] == 1

    def test_discard_clears_session(self, bot, catalog, orders, sessions):
        self._walk_to_confirmation(bot, catalog)

        bot.handle(SENDER, "discard")

        orders.create_order.assert_not_called()
        assert sessions.load(SENDER).state == ChatState.IDLE

    def test_typed_address_with_reply_prefix_stays_input(self, bot, catalog, orders, sessions):
        orders.create_order.return_value = _order()
        bot.handle(SENDER, "order")
        bot.handle(SENDER, f"cat:{catalog.category.id}")
        bot.handle(SENDER, f"med:{catalog.medicine.id}")
        bot.handle(SENDER, "2", is_reply=False)
        bot.handle(SENDER, "cat: Asha Patel", is_reply=False)
        bot.handle(SENDER, "ord: Flat 4, MG Road", is_reply=False)

        assert sessions.load(SENDER).state == ChatState.CONFIRM_ORDER
        bot.handle(SENDER, "confirm")

        orders.get_order_by_number.assert_not_called()
        dto = orders.create_order.call_args.args[0]
        assert dto.customer_name == "cat: Asha Patel"
        assert dto.address == "ord: Flat 4, MG Road"

    def test_domain_error_is_reported_and_resets(self, bot, catalog, orders, sessions):
        orders.create_order.side_effect = InsufficientStock("Paracetamol 500mg: requested 2, available 1.")
        self._walk_to_confirmation(bot, catalog)

        replies = bot.handle(SENDER, "confirm")

        assert "available 1" in _body(replies[0])
        assert sessions.load(SENDER).state == ChatState.IDLE


class TestExistingOrders:
    def test_my_orders_lists_sender_orders(self, bot, orders):
        orders.list_orders_for_phone.return_value = [_order()]

        replies = bot.handle(SENDER, "my_orders")

        orders.list_orders_for_phone.assert_called_once_with(SENDER, 10)
        assert _reply_ids(replies[0]) == [f"ord:{ORDER_NUMBER}"]

    def test_no_orders(self, bot, orders):
        orders.list_orders_for_phone.return_value = []
        replies = bot.handle(SENDER, "my_orders")
        assert _body(replies[0]) == "You have no orders yet."

    def test_track_pending_order_offers_actions(self, bot, orders):
        orders.get_order_by_number.return_value = _order()

        replies = bot.handle(SENDER, f"ord:{ORDER_NUMBER}")

        assert "Status: pending" in _body(replies[0])
        assert _reply_ids(replies[0]) == [
            f"modify:{ORDER_NUMBER}",
            f"cancel:{ORDER_NUMBER}",
            "menu",
        ]

    def test_typed_order_number_tracks(self, bot, orders):
        orders.get_order_by_number.return_value = _order(status=OrderStatus.DISPATCHED)

        replies = bot.handle(SENDER, ORDER_NUMBER.lower())

        orders.get_order_by_number.assert_called_once_with(ORDER_NUMBER)
        assert replies[0]["type"] == "text"

    def test_foreign_order_is_not_found(self, bot, orders):
        orders.get_order_by_number.return_value = _order(phone="+910000000000")

        replies = bot.handle(SENDER, f"cancel_yes:{ORDER_NUMBER}")

        orders.delete_order.assert_not_called()
        assert "not found" in _body(replies[0])

    def test_sender_matches_order_phone_with_plus_prefix(self, bot, orders):
        order = _order(phone=f"+{SENDER}")
        orders.get_order_by_number.return_value = order

        bot.handle(SENDER, f"cancel_yes:{ORDER_NUMBER}")

        orders.delete_order.assert_called_once_with(order.id)

    def test_modify_quantity(self, bot, orders, sessions):
        order = _order()
        orders.get_order_by_number.return_value = order
        orders.modify_order.return_value = order

        bot.handle(SENDER, f"modify:{ORDER_NUMBER}")
        assert sessions.load(SENDER).state == ChatState.MODIFY_QUANTITY
        bot.handle(SENDER, "3")

        order_id, dto = orders.modify_order.call_args.args
        assert order_id == order.id
        assert dto.quantity == 3
        assert sessions.load(SENDER).state == ChatState.IDLE


class TestFeedback:
    def test_rating_button_submits_feedback(self, bot, orders, delivery):
        order = _order(status=OrderStatus.DELIVERED)
        orders.get_order_by_number.return_value = order

        replies = bot.handle(SENDER, f"rate:5:{ORDER_NUMBER}")

        dto = delivery.submit_feedback.call_args.args[0]
        assert dto.order_id == order.id
        assert dto.rating == 5
        assert "Thank you" in _body(replies[0])

    def test_out_of_range_rating(self, bot, orders, delivery):
        orders.get_order_by_number.return_value = _order(status=OrderStatus.DELIVERED)

        bot.handle(SENDER, f"rate:9:{ORDER_NUMBER}")

        delivery.submit_feedback.assert_not_called()
