"""Per-sender conversation state kept in the Django cache (Redis)."""

from __future__ import annotations

from typing import Any, Dict

from django.conf import settings
from django.core.cache import cache
from pydantic import BaseModel


class ChatState:
    IDLE = "idle"
    CHOOSING_CATEGORY = "choosing_category"
    CHOOSING_MEDICINE = "choosing_medicine"
    ENTER_QUANTITY = "enter_quantity"
    ENTER_NAME = "enter_name"
    ENTER_ADDRESS = "enter_address"
    CONFIRM_ORDER = "confirm_order"
    MODIFY_QUANTITY = "modify_quantity"


class ChatSession(BaseModel):
    state: str = ChatState.IDLE
    data: Dict[str, Any] = {}


class SessionStore:
    """Load and save ``ChatSession`` objects keyed by the sender's number.

    Sessions expire after ``CHATBOT_SESSION_TTL_SECONDS`` of inactivity.
    """

    key_prefix = "chatbot:session:"

    def __init__(self, backend=None, ttl: int | None = None) -> None:
        self._cache = backend or cache
        self._ttl = ttl or settings.CHATBOT_SESSION_TTL_SECONDS

    def _key(self, sender: str) -> str:
        return f"{self.key_prefix}{sender}"

    def load(self, sender: str) -> ChatSession:
        raw = self._cache.get(self._key(sender))
        if raw is None:
            return ChatSession()
        return ChatSession.model_validate(raw)

    def save(self, sender: str, session: ChatSession) -> None:
        self._cache.set(self._key(sender), session.model_dump(), self._ttl)

    def clear(self, sender: str) -> None:
        self._cache.delete(self._key(sender))
