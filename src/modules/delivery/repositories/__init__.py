"""Delivery repositories package."""

from modules.delivery.repositories.django_repository import (
    CourierDjangoRepository,
    FeedbackDjangoRepository,
)
from modules.delivery.repositories.interfaces import (
    ICourierRepository,
    IFeedbackRepository,
)

__all__ = [
    "CourierDjangoRepository",
    "FeedbackDjangoRepository",
    "ICourierRepository",
    "IFeedbackRepository",
]
