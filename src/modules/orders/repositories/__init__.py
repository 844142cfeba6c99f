"""Order repositories package.

``OUTBOX_TOPIC`` is the topic stamped on every outbox row an order write
produces.
"""

from modules.orders.repositories.django_repository import (
    OUTBOX_TOPIC,
    OrderDjangoRepository,
)
from modules.orders.repositories.interfaces import IOrderRepository

__all__ = ["OUTBOX_TOPIC", "IOrderRepository", "OrderDjangoRepository"]
