"""Integration tests for the Customer API."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.customers.models import Customer

pytestmark = pytest.mark.integration

URL = "/api/v1/customers/"
NEW_CPF = "52998224725"


def _detail(customer_id) -> str:
    return f"{URL}{customer_id}/"


@pytest.fixture()
def payload():
    return {
        "name": "João Caldeiraria",
        "document": "529.982.247-25",
        "document_type": "CPF",
        "email": "joao@caldeiraria.example.com",
        "phone": "(11) 98888-0000",
    }


class TestCreateCustomer:
    def test_create(self, auth_client, payload):
        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 201
        data = response.json()
        assert data["document"] == "***4725"
        assert data["is_active"] is True
        assert Customer.objects.get(id=data["id"]).document == NEW_CPF

    def test_invalid_document(self, auth_client, payload):
        payload["document"] = "111.111.111-11"
        response = auth_client.post(URL, payload, format="json")
        assert response.status_code == 400
        assert "detail" in response.json()

    def test_duplicate_document(self, auth_client, payload):
        auth_client.post(URL, payload, format="json")
        payload["email"] = "outro@example.com"

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 409

    def test_duplicate_email(self, auth_client, payload, customer):
        payload["email"] = customer.email
        response = auth_client.post(URL, payload, format="json")
        assert response.status_code == 409


class TestReadCustomers:
    def test_list_filters_active(self, auth_client, customer, inactive_customer):
        response = auth_client.get(URL, {"active": "true"})

        assert response.status_code == 200
        assert [c["id"] for c in response.json()["results"]] == [str(customer.id)]

    def test_search_by_trade_name(self, auth_client, customer, inactive_customer):
        response = auth_client.get(URL, {"search": "horizonte"})
        assert response.json()["count"] == 1

    def test_retrieve_masks_document(self, auth_client, customer):
        response = auth_client.get(_detail(customer.id))

        assert response.status_code == 200
        assert response.json()["document"] == "***0181"

    def test_retrieve_unknown(self, auth_client):
        assert auth_client.get(_detail(uuid4())).status_code == 404


class TestUpdateCustomer:
    def test_partial_update(self, auth_client, customer):
        response = auth_client.patch(
            _detail(customer.id), {"trade_name": "Horizonte Aço", "is_active": False}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["trade_name"] == "Horizonte Aço"
        assert response.json()["is_active"] is False

    def test_email_taken(self, auth_client, customer, inactive_customer):
        response = auth_client.patch(
            _detail(customer.id), {"email": inactive_customer.email}, format="json"
        )
        assert response.status_code == 409

    def test_invalid_email(self, auth_client, customer):
        response = auth_client.patch(_detail(customer.id), {"email": "x"}, format="json")
        assert response.status_code == 400

    def test_update_unknown(self, auth_client):
        response = auth_client.patch(_detail(uuid4()), {"phone": "1"}, format="json")
        assert response.status_code == 404


class TestDeleteCustomer:
    def test_soft_delete(self, auth_client, customer):
        response = auth_client.delete(_detail(customer.id))

        assert response.status_code == 204
        assert auth_client.get(_detail(customer.id)).status_code == 404
        assert Customer.objects.dead().filter(id=customer.id).exists()

    def test_delete_unknown(self, auth_client):
        assert auth_client.delete(_detail(uuid4())).status_code == 404
