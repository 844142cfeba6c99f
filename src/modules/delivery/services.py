"""Assignment and delivery use cases.

Couriers are row-locked before orders, in primary-key order, and the lock
set includes whichever courier currently holds the order.  The same order
is used by ``OrderService``, so every path that touches both tables
serializes instead of deadlocking.  The post-delivery feedback request is
queued after commit and can never roll back the delivery itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

import structlog
from django.db import transaction

from modules.delivery.exceptions import (
    CourierBusy,
    CourierNotFound,
    FeedbackNotAllowed,
    OrderNotAssignable,
    OrderNotAssigned,
    PaymentRequired,
)
from modules.delivery.models import Courier, Feedback
from modules.orders.constants import DELIVERY_STATUSES, OrderStatus, PaymentStatus
from modules.orders.events import OrderDelivered, OrderDispatched, OrderStatusChanged
from modules.orders.exceptions import InvalidOrderStatus, OrderNotFound

if TYPE_CHECKING:
    from modules.delivery.dtos import FeedbackDTO
    from modules.delivery.repositories.interfaces import (
        ICourierRepository,
        IFeedbackRepository,
    )
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class DeliveryService:
    """Application service binding orders to couriers.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        courier_repository: ICourierRepository,
        feedback_repository: IFeedbackRepository,
    ) -> None:
        self._order_repo = order_repository
        self._courier_repo = courier_repository
        self._feedback_repo = feedback_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def assign_order(self, courier_id: Any, order_id: Any) -> Order:
        """Hand an open order to a courier and mark it ``dispatched``.

        Both the courier slot and the order row change in one transaction.
        Any courier previously holding the order is released.

        Raises:
            CourierNotFound / OrderNotFound: unknown ids.
            OrderNotAssignable: the order is delivered or cancelled.
            CourierBusy: the courier holds a different open order.
        """
        self._courier_repo.lock_for_order(order_id, courier_id)
        courier = self._lock_courier(courier_id)
        order = self._lock_order(order_id)
        log = logger.bind(courier_id=str(courier.id), order_id=str(order.id))

        if order.is_terminal:
            log.warning("delivery.assign_rejected", status=order.status)
            raise OrderNotAssignable(
                f"Order {order.order_number} is {order.status} and cannot be dispatched."
            )

        if courier.current_order_id and courier.current_order_id != order.id:
            current = self._order_repo.get_by_id(courier.current_order_id)
            if current is not None and not current.is_terminal:
                log.warning("delivery.courier_busy", current_order_id=str(current.id))
                raise CourierBusy(
                    f"{courier.name} is already delivering {current.order_number}."
                )

        self._courier_repo.release_order(order.id)
        courier.current_order = order
        self._courier_repo.save(courier)

        old_status = order.status
        order.courier = courier
        order.status = OrderStatus.DISPATCHED
        order._status_change_notes = f"Assigned to {courier.name}"
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                payload=order.event_payload(old_status=old_status),
            )
        )
        order.add_domain_event(
            OrderDispatched(
                aggregate_id=order.id,
                payload=order.event_payload(
                    courier_id=str(courier.id),
                    courier_name=courier.name,
                    courier_phone=courier.phone,
                ),
            )
        )
        self._order_repo.save(order)

        log.info("delivery.assigned")
        return order

    @transaction.atomic
    def update_delivery_status(
        self,
        order_id: Any,
        new_status: str,
        courier: Optional[Courier] = None,
    ) -> Order:
        """Move an order to ``dispatched`` or ``delivered``.

        ``delivered`` needs a ``paid`` order; it frees the courier slot and
        queues a feedback request to the customer once the transaction
        commits.  When ``courier`` is given, the order must be assigned
        to that courier.

        Raises:
            InvalidOrderStatus: target outside ``{dispatched, delivered}``.
            OrderNotFound: unknown order.
            OrderNotAssigned: the order belongs to another courier.
            OrderNotAssignable: the order is already closed.
            PaymentRequired: delivering an unpaid order.
        """
        if new_status not in DELIVERY_STATUSES:
            raise InvalidOrderStatus(
                f"Couriers can only set {sorted(DELIVERY_STATUSES)}, not '{new_status}'."
            )

        self._courier_repo.lock_for_order(
            order_id, courier.id if courier is not None else None
        )
        if courier is not None:
            courier = self._lock_courier(courier.id)
        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), new_status=new_status)

        if courier is not None and order.courier_id != courier.id:
            raise OrderNotAssigned(
                f"Order {order.order_number} is not assigned to {courier.name}."
            )
        if order.is_terminal:
            raise OrderNotAssignable(f"Order {order.order_number} is {order.status}.")
        if new_status == OrderStatus.DELIVERED and not order.is_paid:
            log.warning("delivery.payment_required")
            raise PaymentRequired(
                f"Collect payment for {order.order_number} before delivering it."
            )

        old_status = order.status
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                payload=order.event_payload(old_status=old_status),
            )
        )
        if new_status == OrderStatus.DELIVERED:
            self._courier_repo.release_order(order.id)
            order.add_domain_event(
                OrderDelivered(
                    aggregate_id=order.id,
                    payload=order.event_payload(
                        courier_id=str(order.courier_id or ""),
                    ),
                )
            )
        self._order_repo.save(order)

        log.info("delivery.status_updated", old_status=old_status)
        return order

    @transaction.atomic
    def record_payment(self, order_id: Any, courier: Courier) -> Order:
        """Courier collected cash on delivery: mark the order ``paid``."""
        order = self._lock_order(order_id)
        if order.courier_id != courier.id:
            raise OrderNotAssigned(
                f"Order {order.order_number} is not assigned to {courier.name}."
            )
        if order.status == OrderStatus.CANCELLED:
            raise OrderNotAssignable(f"Order {order.order_number} was cancelled.")

        order.payment_status = PaymentStatus.PAID
        self._order_repo.save(order)
        logger.info(
            "delivery.payment_recorded",
            order_id=str(order.id),
            courier_id=str(courier.id),
        )
        return order

    @transaction.atomic
    def submit_feedback(self, dto: FeedbackDTO) -> Feedback:
        """Append feedback for a delivered order.

        Raises:
            OrderNotFound / CourierNotFound: unknown ids.
            FeedbackNotAllowed: the order is not delivered yet.
        """
        order = self._order_repo.get_by_id(dto.order_id)
        if not order:
            raise OrderNotFound(f"Order {dto.order_id} not found.")
        if order.status != OrderStatus.DELIVERED:
            raise FeedbackNotAllowed(
                f"Order {order.order_number} is {order.status}, not delivered."
            )

        courier_id = dto.courier_id or order.courier_id
        courier = self._courier_repo.get_by_id(courier_id) if courier_id else None
        if not courier:
            raise CourierNotFound(f"Courier {courier_id} not found.")

        feedback = self._feedback_repo.add(
            Feedback(
                order=order,
                courier=courier,
                rating=dto.rating,
                comment=dto.comment,
            )
        )
        logger.info(
            "feedback.submitted",
            order_id=str(order.id),
            courier_id=str(courier.id),
            rating=dto.rating,
        )
        return feedback

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_courier(self, courier_id: Any) -> Courier:
        courier = self._courier_repo.get_by_id(courier_id)
        if not courier:
            raise CourierNotFound(f"Courier {courier_id} not found.")
        return courier

    def get_courier_for_user(self, user: Any) -> Courier:
        courier = self._courier_repo.get_by_user(user)
        if not courier:
            raise CourierNotFound("No courier profile is linked to this account.")
        return courier

    def get_current_order(self, courier_id: Any) -> Optional[Order]:
        """The courier's live assignment with its medicine, or ``None``."""
        return self.get_courier(courier_id).current_order

    def list_feedback(self) -> List[Feedback]:
        return self._feedback_repo.list()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_courier(self, courier_id: Any) -> Courier:
        courier = self._courier_repo.get_for_update(courier_id)
        if not courier:
            raise CourierNotFound(f"Courier {courier_id} not found.")
        return courier

    def _lock_order(self, order_id: Any) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order
