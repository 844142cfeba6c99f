from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.orders"
    label = "orders"

    def ready(self) -> None:
        from modules.orders import signals  # noqa: F401
        from modules.orders.events import (
            OrderCancelled,
            OrderCreated,
            OrderDelivered,
            OrderDispatched,
        )
        from modules.orders.handlers import (
            order_cancelled_handler,
            order_created_handler,
            order_delivered_handler,
            order_dispatched_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(OrderCreated, order_created_handler)
        event_bus.subscribe(OrderDispatched, order_dispatched_handler)
        event_bus.subscribe(OrderCancelled, order_cancelled_handler)
        event_bus.subscribe(OrderDelivered, order_delivered_handler)
