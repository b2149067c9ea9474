"""Unit tests for DashboardService."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from freezegun import freeze_time

from modules.customers.models import Customer, DocumentType
from modules.orders.constants import OrderStatus, StageStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import ProductionStage
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.production.exceptions import InvalidInput
from modules.production.services import DashboardService

pytestmark = pytest.mark.unit

TODAY = date(2024, 3, 15)


@pytest.fixture()
def service():
    return DashboardService(order_repository=OrderDjangoRepository())


@pytest.fixture()
def other_customer():
    return Customer.objects.create(
        name="Construtora Vale Verde S.A.",
        trade_name="Vale Verde",
        document="11444777000161",
        document_type=DocumentType.CNPJ,
        email="suprimentos@valeverde.example.com",
    )


def _complete_stages(order, count):
    for stage in ProductionStage.objects.filter(item__order=order).order_by("sequence")[:count]:
        stage.status = StageStatus.COMPLETED
        stage.save(update_fields=["status"])


class TestSummary:
    @pytest.fixture()
    def orders(self, make_order):
        late = make_order(start_date=date(2024, 3, 1), delivery_date=date(2024, 3, 10))
        due_soon = make_order(start_date=date(2024, 3, 5), delivery_date=date(2024, 3, 18))
        due_today = make_order(start_date=date(2024, 3, 2), delivery_date=TODAY)
        far = make_order(start_date=date(2024, 2, 20), delivery_date=date(2024, 5, 1))
        done = make_order(start_date=date(2024, 3, 3), delivery_date=date(2024, 3, 12))
        done.status = OrderStatus.COMPLETED
        done.completion_date = date(2024, 3, 11)
        done.save(update_fields=["status", "completion_date"])
        _complete_stages(late, 3)
        return {"late": late, "due_soon": due_soon, "due_today": due_today, "far": far, "done": done}

    def test_counts(self, service, orders):
        summary = service.summary(today=TODAY)

        assert summary.total_orders == 5
        assert summary.open_orders == 4
        assert summary.urgency["overdue"] == 1
        assert summary.urgency["today"] == 1
        assert summary.urgency["critical"] == 1
        assert summary.urgency["normal"] == 1
        assert summary.urgency["completed"] == 1

    def test_late_and_upcoming_lists(self, service, orders):
        summary = service.summary(today=TODAY)

        assert [o.order_number for o in summary.late_orders] == [orders["late"].order_number]
        assert summary.late_orders[0].progress == 100
        assert summary.late_orders[0].urgency == "overdue"
        assert [o.order_number for o in summary.upcoming_orders] == [
            orders["due_today"].order_number,
            orders["due_soon"].order_number,
        ]

    def test_average_progress_over_open_orders(self, service, orders):
        # One open order fully produced, three untouched: 100 / 4.
        assert service.summary(today=TODAY).average_progress == 25

    def test_default_period_is_month_to_date(self, service, orders):
        summary = service.summary(today=TODAY)

        assert summary.period_start == date(2024, 3, 1)
        assert summary.period_end == TODAY
        assert summary.kpis["completed_orders"].current == 1
        assert summary.kpis["active_orders"].current == 3
        assert summary.kpis["active_orders"].previous == 1

    def test_explicit_period(self, service, orders):
        summary = service.summary(
            today=TODAY, period_start=date(2024, 2, 1), period_end=date(2024, 2, 29)
        )
        assert summary.kpis["active_orders"].current == 1
        assert summary.kpis["total_weight"].current == Decimal("301.000")

    def test_inverted_period_rejected(self, service):
        with pytest.raises(InvalidInput):
            service.summary(
                today=TODAY, period_start=date(2024, 3, 10), period_end=date(2024, 3, 1)
            )

    def test_start_after_today_without_end_rejected(self, service):
        with pytest.raises(InvalidInput):
            service.summary(today=TODAY, period_start=date(2024, 4, 1))

    def test_single_day_period(self, service, orders):
        summary = service.summary(
            today=TODAY, period_start=date(2024, 3, 5), period_end=date(2024, 3, 5)
        )
        assert summary.kpis["active_orders"].current == 1
        assert summary.kpis["total_weight"].previous == Decimal("0")

    @freeze_time("2024-03-15 12:00:00")
    def test_today_defaults_to_local_date(self, service, orders):
        assert service.summary().today == TODAY

    def test_empty_database(self, service):
        summary = service.summary(today=TODAY)
        assert summary.total_orders == 0
        assert summary.average_progress == 0
        assert summary.on_time_delivery.total == 0


class TestCustomerRanking:
    def test_ranks_by_total_weight(self, service, make_order, order_service, other_customer):
        make_order()
        make_order()
        order_service.create_order(_heavy_order(other_customer))

        ranking = service.customer_ranking(limit=5)

        assert [entry.customer_name for entry in ranking] == ["Vale Verde", "Horizonte"]
        assert ranking[0].position == 1
        assert ranking[0].total_weight == Decimal("1000.000")
        assert ranking[1].order_count == 2
        assert ranking[1].average_weight == Decimal("301.000")

    def test_default_limit_from_settings(self, service, make_order, settings):
        settings.PRODUCTION_RANKING_DEFAULT_LIMIT = 1
        make_order()
        assert len(service.customer_ranking()) == 1

    def test_invalid_limit_raises(self, service):
        with pytest.raises(InvalidInput):
            service.customer_ranking(limit=0)


class TestOrderProgress:
    def test_progress_per_item(self, service, make_order):
        order = make_order()
        _complete_stages(order, 2)

        progress = service.order_progress(str(order.id), today=TODAY)

        assert progress.order_number == order.order_number
        assert progress.customer_name == "Horizonte"
        assert progress.progress == 67
        assert progress.urgency == "urgent"
        assert progress.delivery_status.performance == "pending"
        item = progress.items[0]
        assert item.completed_stages == 2
        assert item.total_stages == 3
        assert item.current_stage == "Pintura"

    def test_finished_item_has_no_current_stage(self, service, make_order):
        order = make_order()
        _complete_stages(order, 3)
        progress = service.order_progress(str(order.id), today=TODAY)
        assert progress.items[0].current_stage is None
        assert progress.progress == 100

    def test_unknown_order(self, service):
        with pytest.raises(OrderNotFound):
            service.order_progress("00000000-0000-0000-0000-000000000000")


def _heavy_order(customer):
    return CreateOrderDTO(
        customer_id=customer.id,
        start_date=date(2024, 3, 1),
        delivery_date=date(2024, 4, 1),
        items=[{"code": "VIGA-01", "quantity": 4, "unit_weight": Decimal("250")}],
    )
