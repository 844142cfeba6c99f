from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Category, Medicine
from modules.delivery.models import Courier

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def whatsapp_post():
    """Stub the WhatsApp Cloud API so no test reaches the network."""
    response = MagicMock(ok=True, status_code=200, text="")
    response.json.return_value = {"messages": [{"id": "wamid.test"}]}
    with patch("modules.notifications.client.requests.post", return_value=response) as post:
        yield post


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def admin_user():
    return User.objects.create_user(
        username="pharmacist", password="testpass123", is_staff=True
    )


@pytest.fixture()
def admin_client(admin_user):
    """APIClient force-authenticated as staff."""
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture()
def courier():
    user = User.objects.create_user(username="rider", password="testpass123")
    return Courier.objects.create(user=user, name="Rahul Rider", phone="+919800000001")


@pytest.fixture()
def courier_client(courier):
    """APIClient force-authenticated as the courier's user (no JWT)."""
    client = APIClient()
    client.force_authenticate(user=courier.user)
    return client


@pytest.fixture()
def category():
    return Category.objects.create(name="Pain Relief", description="Analgesics")


@pytest.fixture()
def medicine(category):
    return Medicine.objects.create(
        name="Paracetamol 500mg",
        category=category,
        price=Decimal("25.00"),
        stock=10,
    )


@pytest.fixture()
def order_payload(medicine):
    return {
        "customer_name": "Asha Patel",
        "address": "12 MG Road, Pune",
        "phone": "+919812345678",
        "medicine_id": str(medicine.id),
        "quantity": 2,
    }
