"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCompleted, OrderCreated, OrderStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderCompletedHandler(IEventHandler[OrderCompleted]):
    def handle(self, event: OrderCompleted) -> None:
        logger.info(
            "order.event.completed",
            order_id=str(event.aggregate_id),
            completion_date=event.completion_date,
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_completed_handler = OrderCompletedHandler()
