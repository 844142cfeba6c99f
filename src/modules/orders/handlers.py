"""Event handlers for Orders domain events.

Handlers run after the order transaction commits.  Each one queues a
WhatsApp message through Celery and marks the matching outbox row as
published (or failed, when the broker refuses the task).
"""

from __future__ import annotations

import structlog

from modules.core.models import OutboxEvent
from modules.notifications import messages
from modules.notifications.tasks import send_feedback_request, send_message
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderDelivered,
    OrderDispatched,
)
from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class _OutboxTrackingHandler:
    def handle(self, event: DomainEvent) -> None:
        outbox = OutboxEvent.objects.filter(id=event.event_id).first()
        try:
            self.dispatch(event)
        except Exception as exc:
            if outbox is not None:
                outbox.mark_as_failed(str(exc))
            raise
        if outbox is not None:
            outbox.mark_as_published()
        logger.info(
            "order.event_dispatched",
            event_name=event.event_name,
            order_id=str(event.aggregate_id),
        )

    def dispatch(self, event: DomainEvent) -> None:
        raise NotImplementedError


class OrderCreatedHandler(_OutboxTrackingHandler, IEventHandler[OrderCreated]):
    def dispatch(self, event: OrderCreated) -> None:
        send_message.delay(event.payload["phone"], messages.order_confirmation(event.payload))


class OrderDispatchedHandler(_OutboxTrackingHandler, IEventHandler[OrderDispatched]):
    def dispatch(self, event: OrderDispatched) -> None:
        send_message.delay(event.payload["phone"], messages.order_dispatched(event.payload))


class OrderCancelledHandler(_OutboxTrackingHandler, IEventHandler[OrderCancelled]):
    def dispatch(self, event: OrderCancelled) -> None:
        send_message.delay(event.payload["phone"], messages.order_cancelled(event.payload))


class OrderDeliveredHandler(_OutboxTrackingHandler, IEventHandler[OrderDelivered]):
    def dispatch(self, event: OrderDelivered) -> None:
        send_feedback_request.delay(
            event.payload["phone"],
            event.payload["order_number"],
            event.payload["customer_name"],
        )


order_created_handler = OrderCreatedHandler()
order_dispatched_handler = OrderDispatchedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_delivered_handler = OrderDeliveredHandler()
