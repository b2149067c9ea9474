"""Asynchronous tasks of the core module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.db import transaction

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.events import DomainEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)

OUTBOX_BATCH_SIZE = 100
OUTBOX_MAX_RETRIES = 5


@shared_task(name="core.publish_outbox_events")
def publish_outbox_events(batch_size: int = OUTBOX_BATCH_SIZE) -> dict[str, int]:
    """Relay pending outbox rows through the in-process event bus.

    Failed rows are retried on later runs until ``OUTBOX_MAX_RETRIES``.
    """
    published = 0
    failed = 0
    with transaction.atomic():
        pending = list(
            OutboxEvent.objects.select_for_update(skip_locked=True)
            .filter(
                status__in=[EventStatus.PENDING, EventStatus.FAILED],
                retry_count__lt=OUTBOX_MAX_RETRIES,
            )
            .order_by("created_at")[:batch_size]
        )
        for outbox_event in pending:
            log = logger.bind(
                outbox_id=str(outbox_event.id), event_type=outbox_event.event_type
            )
            try:
                event_bus.publish(DomainEvent.from_payload(outbox_event.payload))
            except Exception as exc:
                outbox_event.mark_as_failed(str(exc))
                log.exception("outbox.publish_failed")
                failed += 1
                continue
            outbox_event.mark_as_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
