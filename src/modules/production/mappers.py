"""Translate ORM rows into the immutable snapshots the pure core works on.

Aware timestamps are converted to the local calendar day of the configured
``TIME_ZONE`` here, so the scheduling and progress functions only ever see
``date`` values.  Raw stored values (status labels, durations, weights) go
through the parsing helpers; malformed values degrade to defaults.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from django.utils import timezone

from modules.orders.models import Order, OrderItem, ProductionStage
from modules.production.dates import to_date
from modules.production.domain import (
    OrderItemSnapshot,
    OrderSnapshot,
    OrderStatus,
    Stage,
)
from modules.production.parsing import (
    coerce_decimal,
    coerce_duration_days,
    parse_stage_status,
)

PLANNED_FIELDS = ["planned_start", "planned_end"]


def local_date(value: Optional[datetime | date]) -> Optional[date]:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localdate(value)
        return value.date()
    return to_date(value)


def _order_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        return OrderStatus.IN_PROGRESS


def stage_to_domain(row: ProductionStage) -> Stage:
    return Stage(
        name=row.name,
        status=parse_stage_status(row.status),
        duration_days=coerce_duration_days(row.duration_days),
        planned_start=row.planned_start,
        planned_end=row.planned_end,
        actual_start=local_date(row.actual_start),
        actual_end=local_date(row.actual_end),
    )


def stages_to_domain(rows: Sequence[ProductionStage]) -> List[Stage]:
    return [stage_to_domain(row) for row in rows]


def item_to_domain(item: OrderItem) -> OrderItemSnapshot:
    # ``stages`` are prefetched in sequence order by the order repository.
    return OrderItemSnapshot(
        code=item.code,
        description=item.description,
        quantity=item.quantity,
        stages=tuple(stages_to_domain(list(item.stages.all()))),
        delivery_date=item.delivery_date,
        finished_date=item.finished_date,
    )


def order_to_domain(order: Order) -> OrderSnapshot:
    return OrderSnapshot(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        order_number=order.order_number,
        customer_name=order.customer.display_name,
        status=_order_status(order.status),
        start_date=order.start_date,
        delivery_date=order.delivery_date,
        completion_date=order.completion_date,
        weight=coerce_decimal(order.total_weight),
        items=tuple(item_to_domain(item) for item in order.items.all()),
    )


def orders_to_domain(orders: Iterable[Order]) -> List[OrderSnapshot]:
    return [order_to_domain(order) for order in orders]


def apply_planned(
    rows: Sequence[ProductionStage], stages: Sequence[Stage]
) -> List[ProductionStage]:
    """Copy planned dates from *stages* onto *rows*; return the rows that changed."""
    changed = []
    for row, stage in zip(rows, stages):
        if (row.planned_start, row.planned_end) != (stage.planned_start, stage.planned_end):
            row.planned_start = stage.planned_start
            row.planned_end = stage.planned_end
            changed.append(row)
    return changed
