"""Integration tests for the dashboard endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from freezegun import freeze_time

from modules.orders.constants import StageStatus
from modules.orders.dtos import CompleteOrderDTO
from modules.orders.models import ProductionStage

pytestmark = pytest.mark.integration

SUMMARY_URL = "/api/v1/dashboard/summary/"
RANKING_URL = "/api/v1/dashboard/customer-ranking/"


def _progress_url(order_id) -> str:
    return f"/api/v1/dashboard/orders/{order_id}/progress/"


@pytest.fixture()
def orders(make_order, order_service):
    late = make_order(delivery_date=date(2024, 3, 10))
    upcoming = make_order(delivery_date=date(2024, 3, 17))
    done = make_order(delivery_date=date(2024, 3, 12))
    ProductionStage.objects.filter(item__order=done).update(status=StageStatus.COMPLETED)
    done.items.update(finished_date=date(2024, 3, 11))
    order_service.complete_order(done.id, CompleteOrderDTO(completion_date=date(2024, 3, 11)))
    return {"late": late, "upcoming": upcoming, "done": done}


@freeze_time("2024-03-15 12:00:00")
class TestSummary:
    def test_summary(self, auth_client, orders):
        response = auth_client.get(SUMMARY_URL)

        assert response.status_code == 200
        data = response.json()
        assert data["today"] == "2024-03-15"
        assert data["period_start"] == "2024-03-01"
        assert data["total_orders"] == 3
        assert data["open_orders"] == 2
        assert data["urgency"]["overdue"] == 1
        assert data["urgency"]["tomorrow"] == 0
        assert data["urgency"]["critical"] == 1
        assert data["urgency"]["completed"] == 1
        assert [o["order_number"] for o in data["late_orders"]] == [
            orders["late"].order_number
        ]
        assert [o["order_number"] for o in data["upcoming_orders"]] == [
            orders["upcoming"].order_number
        ]
        assert data["on_time_delivery"] == {"total": 1, "on_time": 1, "percent": 100.0}
        assert set(data["kpis"]) == {
            "active_orders",
            "completed_orders",
            "unique_customers",
            "total_weight",
        }
        assert data["kpis"]["completed_orders"]["current"] == "1"

    def test_explicit_period(self, auth_client, orders):
        response = auth_client.get(SUMMARY_URL, {"start": "2024-02-01", "end": "2024-02-29"})
        data = response.json()
        assert data["period_start"] == "2024-02-01"
        assert data["kpis"]["active_orders"]["current"] == "0"
        assert data["kpis"]["active_orders"]["previous"] == "0"

    def test_end_before_start(self, auth_client):
        response = auth_client.get(SUMMARY_URL, {"start": "2024-03-10", "end": "2024-03-01"})
        assert response.status_code == 400

    def test_start_after_today_without_end(self, auth_client):
        response = auth_client.get(SUMMARY_URL, {"start": "2024-04-01"})

        assert response.status_code == 400
        assert "after its end" in response.json()["detail"]

    def test_invalid_date(self, auth_client):
        response = auth_client.get(SUMMARY_URL, {"start": "10/03/2024"})
        assert response.status_code == 400

    def test_requires_authentication(self, api_client):
        assert api_client.get(SUMMARY_URL).status_code == 401


class TestCustomerRanking:
    def test_ranking(self, auth_client, make_order):
        make_order()
        make_order()

        response = auth_client.get(RANKING_URL, {"limit": 3})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["position"] == 1
        assert data[0]["customer_name"] == "Horizonte"
        assert data[0]["order_count"] == 2
        assert Decimal(data[0]["total_weight"]) == Decimal("602")
        assert Decimal(data[0]["average_weight"]) == Decimal("301")

    @pytest.mark.parametrize("limit", ["0", "-2"])
    def test_non_positive_limit(self, auth_client, limit):
        response = auth_client.get(RANKING_URL, {"limit": limit})
        assert response.status_code == 400
        assert "detail" in response.json()

    def test_non_numeric_limit(self, auth_client):
        assert auth_client.get(RANKING_URL, {"limit": "abc"}).status_code == 400

    def test_empty(self, auth_client):
        assert auth_client.get(RANKING_URL).json() == []


@freeze_time("2024-03-15 12:00:00")
class TestOrderProgress:
    def test_progress(self, auth_client, make_order):
        order = make_order()
        first = ProductionStage.objects.filter(item__order=order).order_by("sequence").first()
        first.status = StageStatus.COMPLETED
        first.save(update_fields=["status"])

        response = auth_client.get(_progress_url(order.id))

        assert response.status_code == 200
        data = response.json()
        assert data["order_number"] == order.order_number
        assert data["status"] == "IN_PROGRESS"
        assert data["progress"] == 33
        assert data["weighted_progress"] == 33
        assert data["urgency"] == "urgent"
        assert data["delivery_status"] == {"performance": "pending", "days": None}
        assert data["items"][0]["current_stage"] == "Solda"

    def test_unknown_order(self, auth_client):
        assert auth_client.get(_progress_url(uuid4())).status_code == 404

    def test_invalid_id(self, auth_client):
        assert auth_client.get(_progress_url("abc")).status_code == 404
