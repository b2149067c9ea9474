"""Event handlers for production events relayed from the outbox."""

from __future__ import annotations

import structlog

from modules.production.events import StageFinished, StageStarted
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class StageStartedHandler(IEventHandler[StageStarted]):
    def handle(self, event: StageStarted) -> None:
        logger.info(
            "stage.event.started",
            order_id=str(event.aggregate_id),
            item_id=event.item_id,
            stage_name=event.stage_name,
        )


class StageFinishedHandler(IEventHandler[StageFinished]):
    def handle(self, event: StageFinished) -> None:
        logger.info(
            "stage.event.finished",
            order_id=str(event.aggregate_id),
            item_id=event.item_id,
            stage_name=event.stage_name,
            rescheduled=event.rescheduled,
            item_finished=event.item_finished,
        )


stage_started_handler = StageStartedHandler()
stage_finished_handler = StageFinishedHandler()
