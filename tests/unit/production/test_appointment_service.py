"""Unit tests for AppointmentService.

Covers:
- start: status and actual_start, repeated start keeps the first stamp.
- finish: completion stamps, successor rescheduling, item finished date.
- Rejections: unknown order/item/stage, completed stage, closed order.
- Side effects: appointment row, outbox event, rollback on failure.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from unittest.mock import patch
from uuid import uuid4

import pytest

from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus, StageStatus
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import ProductionStage
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.production.dtos import RegisterAppointmentDTO
from modules.production.exceptions import (
    InvalidAppointment,
    ItemNotFound,
    StageAlreadyCompleted,
    StageNotFound,
)
from modules.production.models import Appointment
from modules.production.parsing import MAX_DURATION_DAYS
from modules.production.repositories.django_repository import AppointmentDjangoRepository
from modules.production.services import AppointmentService

pytestmark = pytest.mark.unit

OPERATOR = {"id": "op-07", "name": "Carlos Operador", "email": "carlos@example.com"}


def _at(day: date, hour: int = 15) -> datetime:
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour, 0))


@pytest.fixture()
def service():
    return AppointmentService(
        order_repository=OrderDjangoRepository(),
        appointment_repository=AppointmentDjangoRepository(),
    )


@pytest.fixture()
def order(make_order):
    return make_order()


@pytest.fixture()
def report(service, order):
    """Register an appointment on the order's first item."""
    item = order.items.all()[0]

    def _report(stage_index, action, occurred_at=None, **overrides):
        data = {
            "order_id": order.id,
            "item_id": item.id,
            "stage_index": stage_index,
            "action": action,
            "operator": OPERATOR,
            "occurred_at": occurred_at,
        }
        data.update(overrides)
        return service.register(RegisterAppointmentDTO(**data))

    return _report


def _stages(order):
    return list(ProductionStage.objects.filter(item__order=order).order_by("sequence"))


class TestStart:
    def test_marks_stage_in_progress(self, report, order):
        result = report(0, "start", _at(date(2024, 3, 1), 8))

        stage = _stages(order)[0]
        assert stage.status == StageStatus.IN_PROGRESS
        assert stage.actual_start == _at(date(2024, 3, 1), 8)
        assert stage.actual_end is None
        assert result.rescheduled == 0

    def test_repeated_start_keeps_first_timestamp(self, report, order):
        report(0, "start", _at(date(2024, 3, 1), 8))
        report(0, "start", _at(date(2024, 3, 2), 9))

        assert _stages(order)[0].actual_start == _at(date(2024, 3, 1), 8)
        assert Appointment.objects.filter(order=order).count() == 2

    def test_start_does_not_reschedule(self, report, order):
        before = [(s.planned_start, s.planned_end) for s in _stages(order)]
        report(1, "start", _at(date(2024, 3, 20)))
        after = [(s.planned_start, s.planned_end) for s in _stages(order)]
        assert before == after

    def test_action_is_case_insensitive(self, report):
        result = report(0, " START ")
        assert result.appointment.action == "start"

    def test_naive_timestamp_uses_configured_time_zone(self, report, order):
        report(0, "start", datetime(2024, 3, 1, 8, 0))
        assert _stages(order)[0].actual_start == _at(date(2024, 3, 1), 8)

    def test_defaults_to_now(self, report, order):
        before = timezone.now()
        report(0, "start")
        stage = _stages(order)[0]
        assert before <= stage.actual_start <= timezone.now() + timedelta(seconds=1)


class TestFinish:
    def test_completes_stage_and_reschedules_successors(self, report, order):
        result = report(0, "finish", _at(date(2024, 3, 10)))

        stages = _stages(order)
        assert stages[0].status == StageStatus.COMPLETED
        assert stages[0].actual_end == _at(date(2024, 3, 10))
        assert stages[0].actual_start == _at(date(2024, 3, 10))
        assert stages[1].planned_start == date(2024, 3, 11)
        assert stages[1].planned_end == date(2024, 3, 13)
        assert stages[2].planned_start == date(2024, 3, 14)
        assert stages[2].planned_end == date(2024, 3, 14)
        assert result.rescheduled == 2

    def test_oversized_stored_duration_is_capped(self, report, order):
        ProductionStage.objects.filter(item__order=order, name="Solda").update(
            duration_days=5_000_000
        )

        result = report(0, "finish", _at(date(2024, 3, 10)))

        stages = _stages(order)
        assert stages[1].planned_start == date(2024, 3, 11)
        assert stages[1].planned_end == date(2024, 3, 11) + timedelta(days=MAX_DURATION_DAYS - 1)
        assert result.rescheduled == 2

    def test_finish_on_plan_changes_nothing(self, report, order):
        # Default plan: Corte ends 2024-03-02.
        result = report(0, "finish", _at(date(2024, 3, 2)))
        assert result.rescheduled == 0
        assert _stages(order)[1].planned_start == date(2024, 3, 3)

    def test_keeps_existing_actual_start(self, report, order):
        report(0, "start", _at(date(2024, 3, 1), 7))
        report(0, "finish", _at(date(2024, 3, 2)))
        stage = _stages(order)[0]
        assert stage.actual_start == _at(date(2024, 3, 1), 7)

    def test_completion_uses_local_calendar_day(self, report, order, settings):
        settings.TIME_ZONE = "America/Sao_Paulo"
        # 2024-03-11 01:00 UTC is 2024-03-10 22:00 in Sao Paulo.
        report(
            0,
            "finish",
            datetime(2024, 3, 11, 1, 0, tzinfo=timezone.get_fixed_timezone(0)),
        )
        assert _stages(order)[1].planned_start == date(2024, 3, 11)

    def test_last_stage_sets_item_finished_date(self, report, order):
        report(0, "finish", _at(date(2024, 3, 2)))
        report(1, "finish", _at(date(2024, 3, 5)))
        result = report(2, "finish", _at(date(2024, 3, 7)))

        assert result.rescheduled == 0
        result.item.refresh_from_db()
        assert result.item.finished_date == date(2024, 3, 7)

    def test_item_not_finished_while_stages_remain(self, report):
        result = report(0, "finish", _at(date(2024, 3, 2)))
        assert result.item.finished_date is None

    def test_out_of_order_finish_is_accepted(self, report, order):
        result = report(1, "finish", _at(date(2024, 3, 4)))

        stages = _stages(order)
        assert stages[0].status == StageStatus.PENDING
        assert stages[1].status == StageStatus.COMPLETED
        assert stages[2].planned_start == date(2024, 3, 5)
        assert result.rescheduled == 1


class TestRejections:
    def test_unknown_order(self, service, order):
        dto = RegisterAppointmentDTO(
            order_id=uuid4(),
            item_id=order.items.all()[0].id,
            stage_index=0,
            action="start",
            operator=OPERATOR,
        )
        with pytest.raises(OrderNotFound):
            service.register(dto)

    def test_item_of_another_order(self, report, make_order):
        other = make_order()
        with pytest.raises(ItemNotFound):
            report(0, "start", item_id=other.items.all()[0].id)

    def test_stage_index_beyond_plan(self, report):
        with pytest.raises(StageNotFound):
            report(3, "finish")

    @pytest.mark.parametrize("action", ["start", "finish"])
    def test_completed_stage(self, report, action):
        report(0, "finish", _at(date(2024, 3, 2)))
        with pytest.raises(StageAlreadyCompleted):
            report(0, action, _at(date(2024, 3, 3)))

    def test_repeated_finish_does_not_reschedule_twice(self, report, order):
        report(0, "finish", _at(date(2024, 3, 10)))
        with pytest.raises(StageAlreadyCompleted):
            report(0, "finish", _at(date(2024, 3, 20)))
        assert _stages(order)[1].planned_start == date(2024, 3, 11)

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED])
    def test_closed_order(self, report, order, status):
        order.status = status
        order.save(update_fields=["status"])
        with pytest.raises(InvalidAppointment):
            report(0, "start")

    def test_rejection_writes_nothing(self, report, order):
        with pytest.raises(StageNotFound):
            report(5, "finish")
        assert not Appointment.objects.exists()


class TestSideEffects:
    def test_appointment_records_operator(self, report, order):
        result = report(1, "start", _at(date(2024, 3, 3)), notes="Turno B")

        appointment = Appointment.objects.get(pk=result.appointment.pk)
        assert appointment.order_id == order.id
        assert appointment.stage_index == 1
        assert appointment.stage_name == "Solda"
        assert appointment.operator_id == "op-07"
        assert appointment.operator_name == "Carlos Operador"
        assert appointment.operator_email == "carlos@example.com"
        assert appointment.notes == "Turno B"

    def test_finish_writes_outbox_event(self, report, order):
        report(0, "finish", _at(date(2024, 3, 10)))

        event = OutboxEvent.objects.get(event_type="StageFinished")
        assert event.aggregate_id == str(order.id)
        assert event.topic == "orders"
        assert event.payload["stage_name"] == "Corte"
        assert event.payload["rescheduled"] == 2
        assert event.payload["item_finished"] is False

    def test_start_writes_outbox_event(self, report):
        report(0, "start")
        assert OutboxEvent.objects.filter(event_type="StageStarted").count() == 1

    def test_failure_rolls_back_stage_changes(self, report, order):
        with patch.object(
            AppointmentDjangoRepository, "create", side_effect=RuntimeError("db down")
        ):
            with pytest.raises(RuntimeError):
                report(0, "finish", _at(date(2024, 3, 10)))

        stages = _stages(order)
        assert stages[0].status == StageStatus.PENDING
        assert stages[1].planned_start == date(2024, 3, 3)
        assert not OutboxEvent.objects.filter(event_type="StageFinished").exists()
