"""Delivery repository interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.delivery.models import Courier, Feedback


class ICourierRepository(IRepository["Courier"]):
    @abstractmethod
    def get_by_user(self, user: Any) -> Optional[Courier]:
        """The courier profile linked to a login, if any."""

    @abstractmethod
    def lock_for_order(self, order_id: Any, courier_id: Any = None) -> List[Courier]:
        """Row-lock ``courier_id`` and every courier holding ``order_id``, in pk order."""

    @abstractmethod
    def release_order(self, order_id: Any) -> int:
        """Clear every courier slot currently holding ``order_id``."""


class IFeedbackRepository(ABC):
    @abstractmethod
    def add(self, feedback: Feedback) -> Feedback:
        """Append a feedback row."""

    @abstractmethod
    def list(self) -> List[Feedback]:
        """Every feedback row, newest first."""
