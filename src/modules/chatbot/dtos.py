"""Pydantic models for the WhatsApp Cloud API webhook payload.

Only the fields the bot reads are declared; everything else the provider
sends is ignored.  Shape::

    {"object": "whatsapp_business_account",
     "entry": [{"changes": [{"field": "messages",
                             "value": {"contacts": [...], "messages": [...]}}]}]}
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class TextBody(_Payload):
    body: str = ""


class Reply(_Payload):
    id: str
    title: str = ""


class Interactive(_Payload):
    type: str
    button_reply: Optional[Reply] = None
    list_reply: Optional[Reply] = None


class QuickReplyButton(_Payload):
    payload: str = ""
    text: str = ""


class InboundMessage(_Payload):
    sender: str = Field(alias="from")
    id: str
    timestamp: Optional[str] = None
    type: str
    text: Optional[TextBody] = None
    interactive: Optional[Interactive] = None
    button: Optional[QuickReplyButton] = None

    @property
    def is_reply(self) -> bool:
        """True for button and list picks, False for typed text."""
        if self.interactive is not None:
            return (self.interactive.button_reply or self.interactive.list_reply) is not None
        return self.button is not None

    @property
    def content(self) -> str:
        """What the user picked or typed: a reply id, or the text body."""
        if self.interactive is not None:
            reply = self.interactive.button_reply or self.interactive.list_reply
            if reply is not None:
                return reply.id
        if self.button is not None:
            return self.button.payload or self.button.text
        if self.text is not None:
            return self.text.body.strip()
        return ""


class Profile(_Payload):
    name: str = ""


class Contact(_Payload):
    wa_id: str
    profile: Optional[Profile] = None


class ChangeValue(_Payload):
    messaging_product: Optional[str] = None
    contacts: List[Contact] = []
    messages: List[InboundMessage] = []


class Change(_Payload):
    field: Optional[str] = None
    value: ChangeValue


class Entry(_Payload):
    id: Optional[str] = None
    changes: List[Change] = []


class WebhookPayload(_Payload):
    object: Optional[str] = None
    entry: List[Entry] = []

    def messages(self) -> List[InboundMessage]:
        return [
            message
            for entry in self.entry
            for change in entry.changes
            for message in change.value.messages
        ]
