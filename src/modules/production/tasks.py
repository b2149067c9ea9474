"""Asynchronous tasks of the production module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.production import mappers
from modules.production.kpis import late_orders, upcoming_deadline_orders

logger = structlog.get_logger(__name__)


@shared_task(name="production.scan_late_orders")
def scan_late_orders() -> dict[str, int]:
    """Log the open orders that are late or due within the warning horizon."""
    today = timezone.localdate()
    orders = mappers.orders_to_domain(
        OrderDjangoRepository().list({"completion_date__isnull": True})
    )
    late = late_orders(orders, today)
    upcoming = upcoming_deadline_orders(
        orders, today, settings.PRODUCTION_UPCOMING_DEADLINE_DAYS
    )

    for order in late:
        logger.warning(
            "production.order_late",
            order_id=order.order_id,
            order_number=order.order_number,
            delivery_date=order.delivery_date.isoformat(),
        )
    logger.info(
        "production.late_scan_completed",
        scanned=len(orders),
        late=len(late),
        upcoming=len(upcoming),
    )
    return {"scanned": len(orders), "late": len(late), "upcoming": len(upcoming)}
