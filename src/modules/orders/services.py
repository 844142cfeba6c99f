"""Order service layer (Use Cases).

Orchestrates order placement, modification, cancellation and the admin
status/payment/prescription updates.  Every write runs in one
``transaction.atomic`` block: the service defines the unit of work.

Stock rules enforced:
- Placing an order locks the medicine row, rejects ``quantity > stock``
  and decrements stock in the same transaction as the order insert.
- Modifying medicine or quantity restores the old reservation and takes
  the new one under row locks acquired in primary-key order.
- Delete-cancel restores exactly the order's quantity.  The admin
  status-flip cancel leaves stock untouched.
- Paths that may free a courier slot lock the holding courier before the
  order, matching the lock order of ``DeliveryService``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.events import (
    OrderCancelled,
    OrderCreated,
    OrderModified,
    OrderStatusChanged,
)
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    InvalidPaymentStatus,
    MedicineNotFound,
    OrderNotFound,
    OrderNotModifiable,
)
from modules.orders.models import Order

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.catalog.models import Medicine
    from modules.catalog.repositories.interfaces import IMedicineRepository
    from modules.delivery.repositories.interfaces import ICourierRepository
    from modules.orders.dtos import CreateOrderDTO, ModifyOrderDTO
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        medicine_repository: IMedicineRepository,
        courier_repository: ICourierRepository,
    ) -> None:
        self._order_repo = order_repository
        self._medicine_repo = medicine_repository
        self._courier_repo = courier_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Place an order and reserve its stock atomically.

        Raises:
            MedicineNotFound: unknown medicine.
            InsufficientStock: ``quantity`` exceeds the current stock.
        """
        log = logger.bind(medicine_id=str(dto.medicine_id), quantity=dto.quantity)
        log.info("order.creation_started")

        medicine = self._medicine_repo.get_for_update(dto.medicine_id)
        if not medicine:
            raise MedicineNotFound(f"Medicine {dto.medicine_id} not found.")

        self._take_stock(medicine, dto.quantity)

        order = Order(
            customer_name=dto.customer_name,
            address=dto.address,
            phone=dto.phone,
            medicine=medicine,
            quantity=dto.quantity,
            total_price=medicine.price * dto.quantity,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            prescription_verified=False,
        )
        if dto.prescription_image is not None:
            order.prescription_image = dto.prescription_image
        self._order_repo.save(order)

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                payload=order.event_payload(
                    medicine_name=medicine.name,
                    quantity=order.quantity,
                    total_price=str(order.total_price),
                ),
            )
        )
        self._order_repo.save(order)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_price=str(order.total_price),
        )
        return order

    @transaction.atomic
    def modify_order(self, order_id: Any, dto: ModifyOrderDTO) -> Order:
        """Modify a pending order, reconciling stock when the line changes.

        The total is recomputed from the medicine's current price only when
        the medicine or the quantity actually changes.

        Raises:
            OrderNotFound: order does not exist or was deleted.
            OrderNotModifiable: order is no longer ``pending``.
            MedicineNotFound: the new medicine does not exist.
            InsufficientStock: the new quantity exceeds the available stock.
        """
        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), status=order.status)

        if not order.is_modifiable:
            log.warning("order.modify_rejected")
            raise OrderNotModifiable(
                f"Order {order.order_number} is {order.status}; "
                "only pending orders can be modified."
            )

        new_medicine_id = dto.medicine_id or order.medicine_id
        new_quantity = dto.quantity or order.quantity
        line_changed = (
            new_medicine_id != order.medicine_id or new_quantity != order.quantity
        )

        if line_changed:
            self._move_reservation(order, new_medicine_id, new_quantity)
            log.info(
                "order.line_changed",
                medicine_id=str(new_medicine_id),
                quantity=new_quantity,
                total_price=str(order.total_price),
            )

        for field in ("customer_name", "address", "phone"):
            value = getattr(dto, field)
            if value is not None:
                setattr(order, field, value)

        order.add_domain_event(
            OrderModified(
                aggregate_id=order.id,
                payload=order.event_payload(
                    quantity=order.quantity,
                    total_price=str(order.total_price),
                ),
            )
        )
        self._order_repo.save(order)
        log.info("order.modified")
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def delete_order(self, order_id: Any) -> Order:
        """Customer cancel-by-delete.

        Restores stock by the order's quantity, marks it ``cancelled``,
        frees the courier slot it may occupy and soft-deletes the row.

        Raises:
            OrderNotFound: order does not exist or was already deleted.
            OrderNotModifiable: order was already delivered.
        """
        self._courier_repo.lock_for_order(order_id)
        order = self._lock_order(order_id)
        log = logger.bind(order_id=str(order.id), status=order.status)

        if order.status == OrderStatus.DELIVERED:
            log.warning("order.delete_rejected")
            raise OrderNotModifiable(
                f"Order {order.order_number} was delivered and cannot be cancelled."
            )

        medicine = self._medicine_repo.get_for_update(order.medicine_id)
        medicine.stock += order.quantity
        self._medicine_repo.save(medicine)
        log.info(
            "order.stock_released",
            medicine_id=str(medicine.id),
            quantity=order.quantity,
            restored_stock=medicine.stock,
        )

        self._courier_repo.release_order(order.id)

        order.status = OrderStatus.CANCELLED
        order._status_change_notes = "Cancelled by customer"
        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                payload=order.event_payload(restocked=True),
            )
        )
        self._order_repo.save(order)
        self._order_repo.soft_delete(order)

        log.info("order.deleted")
        return order

    @transaction.atomic
    def update_status(self, order_id: Any, new_status: str, notes: str = "") -> Order:
        """Write ``new_status`` unconditionally.

        Any status may follow any status.  Setting ``cancelled`` here does
        not restock; reaching a terminal status frees the courier slot.

        Raises:
            InvalidOrderStatus: value outside the status domain.
            OrderNotFound: order does not exist.
        """
        if new_status not in OrderStatus.values:
            raise InvalidOrderStatus(f"'{new_status}' is not a valid order status.")

        self._courier_repo.lock_for_order(order_id)
        order = self._lock_order(order_id)
        old_status = order.status
        order.status = new_status
        order._status_change_notes = notes

        if order.is_terminal:
            self._courier_repo.release_order(order.id)

        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                payload=order.event_payload(old_status=old_status),
            )
        )
        if new_status == OrderStatus.CANCELLED and old_status != OrderStatus.CANCELLED:
            order.add_domain_event(
                OrderCancelled(
                    aggregate_id=order.id,
                    payload=order.event_payload(restocked=False),
                )
            )
        self._order_repo.save(order)

        logger.info(
            "order.status_updated",
            order_id=str(order.id),
            old_status=old_status,
            new_status=new_status,
        )
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def verify_prescription(self, order_id: Any) -> Order:
        order = self._lock_order(order_id)
        order.prescription_verified = True
        self._order_repo.save(order)
        logger.info("order.prescription_verified", order_id=str(order.id))
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def set_payment_status(self, order_id: Any, payment_status: str) -> Order:
        """Raises ``InvalidPaymentStatus`` unless the value is ``pending`` or ``paid``."""
        if payment_status not in PaymentStatus.values:
            raise InvalidPaymentStatus(
                f"'{payment_status}' is not a valid payment status."
            )
        order = self._lock_order(order_id)
        order.payment_status = payment_status
        self._order_repo.save(order)
        logger.info(
            "order.payment_status_updated",
            order_id=str(order.id),
            payment_status=payment_status,
        )
        return self._order_repo.get_by_id(order.id) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any) -> Order:
        """Raises ``OrderNotFound`` for unknown or deleted orders."""
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_order_by_number(self, order_number: str) -> Order:
        order = self._order_repo.get_by_number(order_number)
        if not order:
            raise OrderNotFound(f"Order {order_number} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        return self._order_repo.list(filters)

    def list_orders_for_phone(self, phone: str, limit: int = 5) -> List[Order]:
        return self._order_repo.list_for_phone(phone, limit)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: Any) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _take_stock(self, medicine: Medicine, quantity: int) -> None:
        if quantity > medicine.stock:
            logger.warning(
                "order.insufficient_stock",
                medicine_id=str(medicine.id),
                requested=quantity,
                available=medicine.stock,
            )
            raise InsufficientStock(
                f"{medicine.name}: requested {quantity}, available {medicine.stock}."
            )
        medicine.stock -= quantity
        self._medicine_repo.save(medicine)
        logger.info(
            "order.stock_reserved",
            medicine_id=str(medicine.id),
            quantity=quantity,
            remaining=medicine.stock,
        )

    def _move_reservation(
        self, order: Order, new_medicine_id: Any, new_quantity: int
    ) -> None:
        """Give back the old reservation, then take the new one."""
        locked = {
            medicine.id: medicine
            for medicine in self._medicine_repo.lock_many(
                {order.medicine_id, new_medicine_id}
            )
        }
        new_medicine = locked.get(new_medicine_id)
        if new_medicine is None:
            raise MedicineNotFound(f"Medicine {new_medicine_id} not found.")

        old_medicine = locked[order.medicine_id]
        old_medicine.stock += order.quantity
        if old_medicine is not new_medicine:
            self._medicine_repo.save(old_medicine)

        self._take_stock(new_medicine, new_quantity)

        order.medicine = new_medicine
        order.quantity = new_quantity
        order.total_price = new_medicine.price * new_quantity
