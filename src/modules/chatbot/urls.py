"""Chat bot webhook URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.chatbot.views import WhatsAppWebhookView

urlpatterns = [
    path("webhook/whatsapp", WhatsAppWebhookView.as_view(), name="whatsapp-webhook"),
]
