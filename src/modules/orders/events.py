"""Domain events for the Orders bounded context.

``payload`` carries ``order_number`` and ``phone`` so notification
handlers can message the customer without reloading the order.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is placed and its stock reserved."""


@dataclass(frozen=True)
class OrderModified(DomainEvent):
    """Raised when a pending order's medicine, quantity or contact data changes."""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled, by delete or by status flip."""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every status write."""


@dataclass(frozen=True)
class OrderDispatched(DomainEvent):
    """Raised when an order is handed to a courier."""


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Raised when a courier completes a paid delivery."""
