"""WhatsApp conversation flow.

``ConversationHandler.handle(sender, content)`` advances the sender's
session by one step and returns the replies to send back.  Order intents go
through ``OrderService``; the handler never touches the ORM itself.

Reply ids used by the interactive menus::

    menu | order | my_orders | support
    cat:<category id>   med:<medicine id>   confirm | discard
    ord:<order number>  modify:<number>     cancel:<number>   cancel_yes:<number>
    rate:<1-5>:<order number>
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

import structlog
from django.conf import settings
from pydantic import ValidationError

from modules.chatbot.sessions import ChatSession, ChatState, SessionStore
from modules.delivery.dtos import FeedbackDTO
from modules.notifications.client import (
    MAX_LIST_ROWS,
    Content,
    button_message,
    list_message,
    text_message,
)
from modules.orders.dtos import CreateOrderDTO, ModifyOrderDTO, normalize_phone
from modules.orders.exceptions import OrderNotFound
from shared.domain.exceptions import DomainError

if TYPE_CHECKING:
    from modules.catalog.services import CatalogService
    from modules.delivery.services import DeliveryService
    from modules.orders.models import Order
    from modules.orders.services import OrderService

logger = structlog.get_logger(__name__)

GREETINGS = {"hi", "hello", "hey", "menu", "start"}
MY_ORDERS_LIMIT = 10
ORDER_NUMBER_RE = re.compile(r"^ORD-\d{8}-[0-9A-F]{6}$", re.IGNORECASE)

Handler = Callable[[str, str, ChatSession], List[Content]]

MAIN_MENU_BUTTONS = [
    ("order", "Order medicine"),
    ("my_orders", "My orders"),
    ("support", "Support"),
]

# Numeric shortcuts accepted from plain-text menus.
TEXT_SHORTCUTS = {"1": "order", "2": "support", "3": "my_orders"}

FALLBACK_TEXT = (
    "Sorry, I did not understand that. Please reply with \"Hi\" to see the menu."
)


def _same_phone(left: str, right: str) -> bool:
    return normalize_phone(left).lstrip("+") == normalize_phone(right).lstrip("+")


def _parse_quantity(text: str) -> Optional[int]:
    try:
        quantity = int(text)
    except ValueError:
        return None
    return quantity if quantity > 0 else None


class ConversationHandler:
    """One step of the chat bot state machine per inbound message."""

    def __init__(
        self,
        order_service: OrderService,
        catalog_service: CatalogService,
        delivery_service: DeliveryService,
        sessions: SessionStore,
    ) -> None:
        self._orders = order_service
        self._catalog = catalog_service
        self._delivery = delivery_service
        self._sessions = sessions

    def handle(
        self,
        sender: str,
        content: str,
        profile_name: str = "",
        is_reply: bool = True,
    ) -> List[Content]:
        """Advance the session by one message.

        ``intent:argument`` ids are only routed for button or list picks
        (``is_reply``); typed text is never read as one, so a name or
        address containing a colon stays step input.
        """
        content = (content or "").strip()
        session = self._sessions.load(sender)
        log = logger.bind(state=session.state)
        log.info("chatbot.message_received")

        try:
            replies = self._dispatch(sender, content, session, profile_name, is_reply)
        except DomainError as exc:
            log.info("chatbot.request_rejected", code=exc.code)
            session = ChatSession()
            replies = [text_message(str(exc))]

        if session.state == ChatState.IDLE:
            self._sessions.clear(sender)
        else:
            self._sessions.save(sender, session)
        return replies

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _dispatch(
        self,
        sender: str,
        content: str,
        session: ChatSession,
        profile_name: str,
        is_reply: bool,
    ) -> List[Content]:
        if content.lower() in GREETINGS:
            session.state, session.data = ChatState.IDLE, {}
            return [self._main_menu(profile_name)]

        # Picked reply ids win over free-text steps.
        intent, _, argument = content.partition(":")
        handler = self._argument_handlers().get(intent) if is_reply else None
        if handler is not None and argument:
            return handler(sender, argument.strip(), session)

        step = self._step_handlers().get(session.state)
        if step is not None:
            return step(sender, content, session)

        keyword = TEXT_SHORTCUTS.get(content, content.lower())
        handler = self._menu_handlers().get(keyword)
        if handler is not None:
            return handler(sender, "", session)

        if ORDER_NUMBER_RE.match(content):
            return self._track_order(sender, content, session)
        return [text_message(FALLBACK_TEXT)]

    def _menu_handlers(self) -> Dict[str, Handler]:
        return {
            "order": self._start_order,
            "my_orders": self._my_orders,
            "support": self._support,
            "confirm": self._confirm_order,
            "discard": self._discard_order,
        }

    def _argument_handlers(self) -> Dict[str, Handler]:
        return {
            "cat": self._choose_category,
            "med": self._choose_medicine,
            "ord": self._track_order,
            "track": self._track_order,
            "modify": self._start_modify,
            "cancel": self._ask_cancel,
            "cancel_yes": self._cancel_order,
            "rate": self._rate_delivery,
        }

    def _step_handlers(self) -> Dict[str, Handler]:
        return {
            ChatState.ENTER_QUANTITY: self._enter_quantity,
            ChatState.ENTER_NAME: self._enter_name,
            ChatState.ENTER_ADDRESS: self._enter_address,
            ChatState.MODIFY_QUANTITY: self._enter_new_quantity,
        }

    # ------------------------------------------------------------------
    # Menu
    # ------------------------------------------------------------------

    def _main_menu(self, profile_name: str = "") -> Content:
        greeting = f"Hello {profile_name}!" if profile_name else "Hello!"
        return button_message(
            f"{greeting} Welcome to the pharmacy. What would you like to do?",
            MAIN_MENU_BUTTONS,
        )

    def _support(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        session.state, session.data = ChatState.IDLE, {}
        return [text_message(f"You can reach our team at {settings.SUPPORT_CONTACT}.")]

    # ------------------------------------------------------------------
    # Place order
    # ------------------------------------------------------------------

    def _start_order(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        categories = self._catalog.list_categories()[:MAX_LIST_ROWS]
        if not categories:
            session.state = ChatState.IDLE
            return [text_message("Our catalog is empty right now. Please try later.")]
        session.state, session.data = ChatState.CHOOSING_CATEGORY, {}
        rows = [
            (f"cat:{category.id}", category.name, category.description or "")
            for category in categories
        ]
        return [list_message("Choose a category.", "Categories", rows, "Categories")]

    def _choose_category(
        self, sender: str, category_id: str, session: ChatSession
    ) -> List[Content]:
        category = self._catalog.get_category(category_id)
        medicines = [
            medicine
            for medicine in self._catalog.list_medicines(category.id)
            if medicine.stock > 0
        ][:MAX_LIST_ROWS]
        if not medicines:
            return [
                text_message("No medicines are available in this category."),
                self._main_menu(),
            ]
        session.state = ChatState.CHOOSING_MEDICINE
        rows = [
            (
                f"med:{medicine.id}",
                medicine.name,
                f"Price {medicine.price} | In stock {medicine.stock}",
            )
            for medicine in medicines
        ]
        return [list_message("Choose a medicine.", "Medicines", rows, "Medicines")]

    def _choose_medicine(
        self, sender: str, medicine_id: str, session: ChatSession
    ) -> List[Content]:
        medicine = self._catalog.get_medicine(medicine_id)
        if medicine.stock < 1:
            return [text_message(f"{medicine.name} is out of stock."), self._main_menu()]

        session.state = ChatState.ENTER_QUANTITY
        session.data = {"medicine_id": str(medicine.id), "medicine_name": medicine.name}
        prompt = f"How many units of {medicine.name} do you need? ({medicine.stock} in stock)"
        if medicine.requires_prescription:
            prompt += (
                "\nThis medicine needs a prescription; our pharmacist will "
                "contact you to verify it."
            )
        return [text_message(prompt)]

    def _enter_quantity(self, sender: str, text: str, session: ChatSession) -> List[Content]:
        quantity = _parse_quantity(text)
        if quantity is None:
            return [text_message("Please send the quantity as a whole number, e.g. 2.")]
        availability = self._catalog.check_availability(session.data["medicine_id"])
        if quantity > availability.stock:
            return [
                text_message(
                    f"Only {availability.stock} units are available. "
                    "Please send a smaller quantity."
                )
            ]
        session.data["quantity"] = quantity
        session.state = ChatState.ENTER_NAME
        return [text_message("Please send the patient's full name.")]

    def _enter_name(self, sender: str, text: str, session: ChatSession) -> List[Content]:
        if not text:
            return [text_message("Please send the patient's full name.")]
        session.data["customer_name"] = text
        session.state = ChatState.ENTER_ADDRESS
        return [text_message("Please send the delivery address.")]

    def _enter_address(self, sender: str, text: str, session: ChatSession) -> List[Content]:
        if not text:
            return [text_message("Please send the delivery address.")]
        session.data["address"] = text
        session.state = ChatState.CONFIRM_ORDER
        data = session.data
        return [
            button_message(
                f"Please confirm your order:\n"
                f"{data['quantity']} x {data['medicine_name']}\n"
                f"Name: {data['customer_name']}\n"
                f"Address: {data['address']}",
                [("confirm", "Confirm"), ("discard", "Discard")],
            )
        ]

    def _confirm_order(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        if session.state != ChatState.CONFIRM_ORDER:
            return [text_message(FALLBACK_TEXT)]
        data = session.data
        session.state, session.data = ChatState.IDLE, {}
        try:
            dto = CreateOrderDTO(
                customer_name=data["customer_name"],
                address=data["address"],
                phone=sender,
                medicine_id=data["medicine_id"],
                quantity=data["quantity"],
            )
        except ValidationError:
            return [
                text_message("Some order details were invalid. Please start again."),
                self._main_menu(),
            ]

        order = self._orders.create_order(dto)
        logger.info("chatbot.order_placed", order_id=str(order.id))
        return [
            text_message(
                f"Order {order.order_number} placed. Total: {order.total_price}. "
                "We will notify you when it is on its way."
            )
        ]

    def _discard_order(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        session.state, session.data = ChatState.IDLE, {}
        return [text_message("Order discarded."), self._main_menu()]

    # ------------------------------------------------------------------
    # Existing orders
    # ------------------------------------------------------------------

    def _owned_order(self, sender: str, order_number: str) -> Order:
        """Look up an order the sender placed.

        Orders of other phone numbers are reported as not found.
        """
        order = self._orders.get_order_by_number(order_number.strip().upper())
        if not _same_phone(order.phone, sender):
            logger.warning("chatbot.foreign_order_access", order_id=str(order.id))
            raise OrderNotFound(f"Order {order_number} not found.")
        return order

    def _my_orders(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        session.state, session.data = ChatState.IDLE, {}
        orders = self._orders.list_orders_for_phone(sender, MY_ORDERS_LIMIT)
        if not orders:
            return [text_message("You have no orders yet."), self._main_menu()]
        rows = [
            (
                f"ord:{order.order_number}",
                order.order_number,
                f"{order.status} | {order.quantity} x {order.medicine.name}",
            )
            for order in orders
        ]
        return [list_message("Your recent orders.", "View orders", rows, "Orders")]

    def _track_order(self, sender: str, order_number: str, session: ChatSession) -> List[Content]:
        session.state, session.data = ChatState.IDLE, {}
        order = self._owned_order(sender, order_number)
        summary = (
            f"Order {order.order_number}\n"
            f"{order.quantity} x {order.medicine.name}\n"
            f"Total: {order.total_price}\n"
            f"Status: {order.status}\n"
            f"Payment: {order.payment_status}"
        )
        if order.is_modifiable:
            return [
                button_message(
                    summary,
                    [
                        (f"modify:{order.order_number}", "Change quantity"),
                        (f"cancel:{order.order_number}", "Cancel order"),
                        ("menu", "Main menu"),
                    ],
                )
            ]
        return [text_message(summary)]

    def _start_modify(self, sender: str, order_number: str, session: ChatSession) -> List[Content]:
        order = self._owned_order(sender, order_number)
        if not order.is_modifiable:
            return [text_message(f"Order {order.order_number} can no longer be changed.")]
        session.state = ChatState.MODIFY_QUANTITY
        session.data = {"order_number": order.order_number}
        return [text_message(f"Send the new quantity for {order.medicine.name}.")]

    def _enter_new_quantity(self, sender: str, text: str, session: ChatSession) -> List[Content]:
        quantity = _parse_quantity(text)
        if quantity is None:
            return [text_message("Please send the quantity as a whole number, e.g. 2.")]
        order = self._owned_order(sender, session.data["order_number"])
        session.state, session.data = ChatState.IDLE, {}
        order = self._orders.modify_order(order.id, ModifyOrderDTO(quantity=quantity))
        return [
            text_message(
                f"Order {order.order_number} updated: {order.quantity} units, "
                f"total {order.total_price}."
            )
        ]

    def _ask_cancel(self, sender: str, order_number: str, session: ChatSession) -> List[Content]:
        order = self._owned_order(sender, order_number)
        return [
            button_message(
                f"Cancel order {order.order_number}?",
                [
                    (f"cancel_yes:{order.order_number}", "Yes, cancel"),
                    ("menu", "Keep order"),
                ],
            )
        ]

    def _cancel_order(self, sender: str, order_number: str, session: ChatSession) -> List[Content]:
        session.state, session.data = ChatState.IDLE, {}
        order = self._owned_order(sender, order_number)
        self._orders.delete_order(order.id)
        return [text_message(f"Order {order.order_number} has been cancelled.")]

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    def _rate_delivery(self, sender: str, argument: str, session: ChatSession) -> List[Content]:
        rating, _, order_number = argument.partition(":")
        if not rating.isdigit() or not order_number:
            return [text_message(FALLBACK_TEXT)]
        order = self._owned_order(sender, order_number)
        try:
            dto = FeedbackDTO(order_id=order.id, rating=int(rating))
        except ValidationError:
            return [text_message("Please rate the delivery from 1 to 5.")]
        self._delivery.submit_feedback(dto)
        return [text_message("Thank you for your feedback!")]
