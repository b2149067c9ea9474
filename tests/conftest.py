from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from django.contrib.auth import get_user_model

from rest_framework.test import APIClient

from modules.customers.models import Customer, DocumentType
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.dtos import CreateOrderDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

VALID_CPF = "59860184275"
VALID_CNPJ = "11222333000181"

DEFAULT_STAGES = [
    {"name": "Corte", "duration_days": 2},
    {"name": "Solda", "duration_days": 3},
    {"name": "Pintura", "duration_days": 1},
]


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


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
def user():
    return get_user_model().objects.create_user(username="pcp", password="testpass123")


@pytest.fixture()
def auth_client(user):
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def customer():
    return Customer.objects.create(
        name="Metalúrgica Horizonte Ltda",
        trade_name="Horizonte",
        document=VALID_CNPJ,
        document_type=DocumentType.CNPJ,
        email="compras@horizonte.example.com",
        is_active=True,
    )


@pytest.fixture()
def inactive_customer():
    return Customer.objects.create(
        name="Cliente Inativo",
        document=VALID_CPF,
        document_type=DocumentType.CPF,
        email="inativo@example.com",
        is_active=False,
    )


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        customer_repository=CustomerDjangoRepository(),
    )


@pytest.fixture()
def make_order(order_service, customer):
    """Factory creating an order through ``OrderService``.

    By default the order has one item with three stages (2, 3 and 1 days)
    starting on 2024-03-01 and due on 2024-03-20.
    """

    def _make(**overrides):
        data = {
            "customer_id": customer.id,
            "internal_os": "OS-1001",
            "project": "Galpão A",
            "start_date": date(2024, 3, 1),
            "delivery_date": date(2024, 3, 20),
            "items": [
                {
                    "code": "PC-01",
                    "description": "Estrutura metálica",
                    "quantity": 2,
                    "unit_weight": Decimal("150.500"),
                    "stages": DEFAULT_STAGES,
                }
            ],
        }
        data.update(overrides)
        return order_service.create_order(CreateOrderDTO(**data))

    return _make
