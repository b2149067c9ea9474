"""Integration tests for the Celery configuration and periodic tasks."""

from __future__ import annotations

import logging
from datetime import date
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from modules.core.models import EventStatus, OutboxEvent
from modules.core.tasks import OUTBOX_MAX_RETRIES, publish_outbox_events
from modules.production.handlers import StageFinishedHandler
from modules.production.tasks import scan_late_orders

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _celery_eager(settings):
    """Run tasks synchronously in the test process."""
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


class TestCeleryConfig:
    def test_celery_app_exported_from_init(self):
        from config import celery_app

        assert celery_app.main == "erp"

    def test_celery_serializer_is_json(self, settings):
        assert settings.CELERY_TASK_SERIALIZER == "json"
        assert settings.CELERY_RESULT_SERIALIZER == "json"
        assert settings.CELERY_ACCEPT_CONTENT == ["json"]

    def test_celery_timezone_matches_django(self, settings):
        assert settings.CELERY_TIMEZONE == settings.TIME_ZONE

    def test_beat_schedule_registers_periodic_tasks(self, settings):
        tasks = {entry["task"] for entry in settings.CELERY_BEAT_SCHEDULE.values()}
        assert tasks == {"core.publish_outbox_events", "production.scan_late_orders"}


class TestPublishOutboxEvents:
    def test_relays_pending_events(self, make_order):
        make_order()
        pending = OutboxEvent.objects.filter(status=EventStatus.PENDING).count()

        result = publish_outbox_events.delay()

        assert result.result == {"published": pending, "failed": 0}
        assert not OutboxEvent.objects.filter(status=EventStatus.PENDING).exists()
        event = OutboxEvent.objects.get(event_type="OrderCreated")
        assert event.processed_at is not None

    def test_handler_failure_marks_event_failed(self):
        OutboxEvent.objects.create(
            event_type="StageFinished",
            aggregate_id="00000000-0000-0000-0000-000000000001",
            payload={
                "event_name": "StageFinished",
                "aggregate_id": "00000000-0000-0000-0000-000000000001",
                "stage_name": "Solda",
            },
            topic="orders",
        )

        with patch.object(StageFinishedHandler, "handle", side_effect=RuntimeError("boom")):
            result = publish_outbox_events()

        assert result == {"published": 0, "failed": 1}
        event = OutboxEvent.objects.get()
        assert event.status == EventStatus.FAILED
        assert event.error_message == "boom"
        assert event.retry_count == 1

    def test_exhausted_events_are_skipped(self):
        OutboxEvent.objects.create(
            event_type="StageStarted",
            aggregate_id="x",
            payload={"event_name": "StageStarted", "aggregate_id": "x"},
            topic="orders",
            status=EventStatus.FAILED,
            retry_count=OUTBOX_MAX_RETRIES,
        )
        assert publish_outbox_events() == {"published": 0, "failed": 0}


class TestScanLateOrders:
    @freeze_time("2024-03-15 12:00:00")
    def test_counts_late_and_upcoming(self, make_order, order_service, caplog):
        make_order(delivery_date=date(2024, 3, 10))
        make_order(delivery_date=date(2024, 3, 18))
        make_order(delivery_date=date(2024, 4, 30))
        completed = make_order(delivery_date=date(2024, 3, 5))
        order_service.complete_order(completed.id)

        with caplog.at_level(logging.INFO):
            result = scan_late_orders.delay().result

        assert result == {"scanned": 3, "late": 1, "upcoming": 1}
        late_logs = [
            record.getMessage()
            for record in caplog.records
            if "production.order_late" in record.getMessage()
        ]
        assert len(late_logs) == 1
        assert "2024-03-10" in late_logs[0]
