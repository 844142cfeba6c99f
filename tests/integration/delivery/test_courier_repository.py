"""Integration tests for CourierDjangoRepository locking and release."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from modules.delivery.models import Courier
from modules.delivery.repositories.django_repository import CourierDjangoRepository
from modules.orders.models import Order

pytestmark = pytest.mark.integration

User = get_user_model()


@pytest.fixture()
def repo() -> CourierDjangoRepository:
    return CourierDjangoRepository()


@pytest.fixture()
def order(medicine) -> Order:
    return Order.objects.create(
        customer_name="Asha Patel",
        address="12 MG Road, Pune",
        phone="+919812345678",
        medicine=medicine,
        quantity=1,
        total_price=Decimal("25.00"),
    )


def _courier(username: str, name: str, current_order=None) -> Courier:
    user = User.objects.create_user(username=username, password="testpass123")
    return Courier.objects.create(
        user=user, name=name, phone="+919800000009", current_order=current_order
    )


class TestLockForOrder:
    def test_returns_holder_and_target_in_pk_order(self, repo, order):
        holder = _courier("holder", "Holder", current_order=order)
        target = _courier("target", "Target")
        _courier("idle", "Idle")

        locked = repo.lock_for_order(order.id, target.id)

        assert [c.id for c in locked] == sorted([holder.id, target.id])

    def test_holder_only(self, repo, order):
        holder = _courier("holder", "Holder", current_order=order)

        assert [c.id for c in repo.lock_for_order(order.id)] == [holder.id]

    def test_unheld_order_locks_nothing(self, repo, order):
        _courier("idle", "Idle")

        assert repo.lock_for_order(order.id) == []

    def test_malformed_id_locks_nothing(self, repo):
        assert repo.lock_for_order("not-a-uuid") == []


def test_release_order_clears_holder(repo, order):
    holder = _courier("holder", "Holder", current_order=order)

    assert repo.release_order(order.id) == 1

    holder.refresh_from_db()
    assert holder.current_order_id is None
