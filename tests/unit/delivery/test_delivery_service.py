"""Unit tests for DeliveryService with mocked repositories."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock, call
from uuid import uuid4

import pytest

from modules.catalog.models import Category, Medicine
from modules.delivery.dtos import FeedbackDTO
from modules.delivery.exceptions import (
    CourierBusy,
    FeedbackNotAllowed,
    OrderNotAssignable,
    OrderNotAssigned,
    PaymentRequired,
)
from modules.delivery.models import Courier
from modules.delivery.services import DeliveryService
from modules.orders.constants import OrderStatus, PaymentStatus
from modules.orders.events import OrderDelivered, OrderDispatched
from modules.orders.exceptions import InvalidOrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.unit


def _order(status: str = OrderStatus.PENDING, payment_status: str = PaymentStatus.PENDING) -> Order:
    medicine = Medicine(
        id=uuid4(),
        name="Amoxicillin 500mg",
        category=Category(id=uuid4(), name="Antibiotics"),
        price=Decimal("120.00"),
        stock=10,
    )
    return Order(
        id=uuid4(),
        order_number="ORD-20260101-0A1B2C",
        customer_name="Ravi Menon",
        address="3 Lake View",
        phone="919800011122",
        medicine=medicine,
        quantity=1,
        total_price=Decimal("120.00"),
        status=status,
        payment_status=payment_status,
    )


def _courier() -> Courier:
    return Courier(id=uuid4(), name="Priya Sharma", phone="+919800000002")


@pytest.fixture()
def service_and_repos():
    order_repo = MagicMock()
    courier_repo = MagicMock()
    feedback_repo = MagicMock()
    service = DeliveryService(order_repo, courier_repo, feedback_repo)
    return service, order_repo, courier_repo, feedback_repo


class TestAssignOrder:
    def test_assign_dispatches_and_binds_courier(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        courier, order = _courier(), _order()
        courier_repo.get_for_update.return_value = courier
        order_repo.get_for_update.return_value = order

        result = service.assign_order(courier.id, order.id)

        assert result.status == OrderStatus.DISPATCHED
        assert result.courier_id == courier.id
        assert courier.current_order_id == order.id
        courier_repo.release_order.assert_called_once_with(order.id)
        courier_repo.save.assert_called_once_with(courier)
        dispatched = [e for e in order.domain_events if isinstance(e, OrderDispatched)]
        assert dispatched[0].payload["courier_name"] == "Priya Sharma"

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_closed_orders_cannot_be_assigned(self, service_and_repos, status):
        service, order_repo, courier_repo, _ = service_and_repos
        courier_repo.get_for_update.return_value = _courier()
        order_repo.get_for_update.return_value = _order(status=status)

        with pytest.raises(OrderNotAssignable):
            service.assign_order(uuid4(), uuid4())

        courier_repo.save.assert_not_called()

    def test_busy_courier_is_rejected(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        busy_with = _order(status=OrderStatus.DISPATCHED)
        courier = _courier()
        courier.current_order = busy_with
        courier_repo.get_for_update.return_value = courier
        order_repo.get_for_update.return_value = _order()
        order_repo.get_by_id.return_value = busy_with

        with pytest.raises(CourierBusy):
            service.assign_order(courier.id, uuid4())


class TestDeliveryStatus:
    def test_delivering_unpaid_order_requires_payment(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        order = _order(status=OrderStatus.DISPATCHED)
        order_repo.get_for_update.return_value = order

        with pytest.raises(PaymentRequired):
            service.update_delivery_status(order.id, OrderStatus.DELIVERED)

        assert order.status == OrderStatus.DISPATCHED
        courier_repo.release_order.assert_not_called()

    def test_delivering_paid_order_frees_courier(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        order = _order(status=OrderStatus.DISPATCHED, payment_status=PaymentStatus.PAID)
        order_repo.get_for_update.return_value = order

        service.update_delivery_status(order.id, OrderStatus.DELIVERED)

        assert order.status == OrderStatus.DELIVERED
        courier_repo.release_order.assert_called_once_with(order.id)
        assert any(isinstance(e, OrderDelivered) for e in order.domain_events)

    def test_couriers_cannot_cancel(self, service_and_repos):
        service, order_repo, _, _ = service_and_repos
        with pytest.raises(InvalidOrderStatus):
            service.update_delivery_status(uuid4(), OrderStatus.CANCELLED)
        order_repo.get_for_update.assert_not_called()

    def test_other_couriers_order_is_rejected(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        courier = _courier()
        order = _order(status=OrderStatus.DISPATCHED)
        order.courier = _courier()
        courier_repo.get_for_update.return_value = courier
        order_repo.get_for_update.return_value = order

        with pytest.raises(OrderNotAssigned):
            service.update_delivery_status(order.id, OrderStatus.DISPATCHED, courier=courier)


class TestPaymentAndFeedback:
    def test_record_payment(self, service_and_repos):
        service, order_repo, _, _ = service_and_repos
        courier = _courier()
        order = _order(status=OrderStatus.DISPATCHED)
        order.courier = courier
        order_repo.get_for_update.return_value = order

        service.record_payment(order.id, courier)

        assert order.payment_status == PaymentStatus.PAID
        order_repo.save.assert_called_once_with(order)

    def test_feedback_only_for_delivered_orders(self, service_and_repos):
        service, order_repo, _, feedback_repo = service_and_repos
        order_repo.get_by_id.return_value = _order(status=OrderStatus.DISPATCHED)

        with pytest.raises(FeedbackNotAllowed):
            service.submit_feedback(FeedbackDTO(order_id=uuid4(), rating=5))

        feedback_repo.add.assert_not_called()

    def test_feedback_defaults_to_delivering_courier(self, service_and_repos):
        service, order_repo, courier_repo, feedback_repo = service_and_repos
        courier = _courier()
        order = _order(status=OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID)
        order.courier = courier
        order_repo.get_by_id.return_value = order
        courier_repo.get_by_id.return_value = courier
        feedback_repo.add.side_effect = lambda feedback: feedback

        feedback = service.submit_feedback(FeedbackDTO(order_id=order.id, rating=4))

        courier_repo.get_by_id.assert_called_once_with(courier.id)
        assert feedback.rating == 4
        assert feedback.courier is courier


class TestLockOrder:
    """Couriers, including the current holder, are locked before the order."""

    @staticmethod
    def _recorder(order_repo, courier_repo) -> MagicMock:
        calls = MagicMock()
        calls.attach_mock(courier_repo.lock_for_order, "lock_couriers")
        calls.attach_mock(courier_repo.get_for_update, "lock_courier")
        calls.attach_mock(order_repo.get_for_update, "lock_order")
        return calls

    def test_assign_locks_target_and_holder_before_order(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        courier, order = _courier(), _order()
        courier_repo.get_for_update.return_value = courier
        order_repo.get_for_update.return_value = order
        calls = self._recorder(order_repo, courier_repo)

        service.assign_order(courier.id, order.id)

        assert calls.mock_calls[:3] == [
            call.lock_couriers(order.id, courier.id),
            call.lock_courier(courier.id),
            call.lock_order(order.id),
        ]

    def test_admin_delivery_locks_holder_before_order(self, service_and_repos):
        service, order_repo, courier_repo, _ = service_and_repos
        order = _order(status=OrderStatus.DISPATCHED, payment_status=PaymentStatus.PAID)
        order_repo.get_for_update.return_value = order
        calls = self._recorder(order_repo, courier_repo)

        service.update_delivery_status(order.id, OrderStatus.DELIVERED)

        assert calls.mock_calls[:2] == [
            call.lock_couriers(order.id, None),
            call.lock_order(order.id),
        ]
