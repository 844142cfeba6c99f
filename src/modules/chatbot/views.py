"""WhatsApp Cloud API webhook.

GET answers Meta's subscription handshake; POST receives message
deliveries.  Every well-formed delivery is acknowledged with 200, even when
an individual message is rejected by the conversation flow, otherwise the
provider keeps retrying it.
"""

from __future__ import annotations

import hashlib
import hmac

import structlog
from django.conf import settings
from django.http import HttpResponse
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from modules.catalog.views import build_catalog_service
from modules.chatbot.conversation import ConversationHandler
from modules.chatbot.dtos import WebhookPayload
from modules.chatbot.sessions import SessionStore
from modules.delivery.views import build_delivery_service
from modules.notifications.tasks import send_message
from modules.orders.views import build_order_service

logger = structlog.get_logger(__name__)

SIGNATURE_HEADER = "HTTP_X_HUB_SIGNATURE_256"


def build_conversation_handler() -> ConversationHandler:
    return ConversationHandler(
        order_service=build_order_service(),
        catalog_service=build_catalog_service(),
        delivery_service=build_delivery_service(),
        sessions=SessionStore(),
    )


def signature_is_valid(body: bytes, header: str, secret: str) -> bool:
    """Check ``X-Hub-Signature-256: sha256=<hex hmac of the raw body>``."""
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", header or "")


class WhatsAppWebhookView(APIView):
    authentication_classes: list = []
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "webhook"

    def get(self, request: Request) -> HttpResponse:
        """GET /webhook/whatsapp (subscription handshake)"""
        mode = request.query_params.get("hub.mode")
        token = request.query_params.get("hub.verify_token", "")
        challenge = request.query_params.get("hub.challenge", "")
        verify_token = settings.WHATSAPP_VERIFY_TOKEN

        if mode == "subscribe" and verify_token and hmac.compare_digest(token, verify_token):
            logger.info("webhook.verified")
            return HttpResponse(challenge, content_type="text/plain")
        logger.warning("webhook.verification_failed", mode=mode)
        raise PermissionDenied("Webhook verification failed.")

    def post(self, request: Request) -> Response:
        """POST /webhook/whatsapp (message deliveries)"""
        # The raw body must be read before DRF parses the stream.
        body = request.body
        secret = settings.WHATSAPP_APP_SECRET
        if secret and not signature_is_valid(body, request.META.get(SIGNATURE_HEADER, ""), secret):
            logger.warning("webhook.signature_rejected")
            raise PermissionDenied("Invalid webhook signature.")

        payload = WebhookPayload.model_validate(request.data)
        profiles = {
            contact.wa_id: contact.profile.name
            for entry in payload.entry
            for change in entry.changes
            for contact in change.value.contacts
            if contact.profile is not None
        }

        handler = build_conversation_handler()
        messages = payload.messages()
        for message in messages:
            replies = handler.handle(
                message.sender,
                message.content,
                profile_name=profiles.get(message.sender, ""),
                is_reply=message.is_reply,
            )
            for reply in replies:
                send_message.delay(message.sender, reply)

        logger.info("webhook.processed", messages=len(messages))
        return Response({"status": "received"})
