"""Progress and delivery classification for items, orders and customers.

Completion is binary per stage: a stage counts only once it is
``COMPLETED``; stages in progress earn no partial credit.  Percentages
are rounded half-up to whole numbers, matching what the dashboards show.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from modules.production.dates import days_between
from modules.production.domain import (
    CLOSED_ORDER_STATUSES,
    CustomerRankingEntry,
    DeliveryPerformance,
    DeliveryStatus,
    OrderItemSnapshot,
    OrderSnapshot,
    OrderStatus,
    Stage,
    UrgencyBucket,
)
from modules.production.exceptions import InvalidInput
from modules.production.parsing import coerce_decimal

# (upper bound in days, bucket); first match wins, anything above is NORMAL.
URGENCY_THRESHOLDS: tuple[tuple[int, UrgencyBucket], ...] = (
    (-1, UrgencyBucket.OVERDUE),
    (0, UrgencyBucket.TODAY),
    (1, UrgencyBucket.TOMORROW),
    (3, UrgencyBucket.CRITICAL),
    (7, UrgencyBucket.URGENT),
    (14, UrgencyBucket.SOON),
)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


def item_progress(stages: Sequence[Stage]) -> int:
    """Percentage (0-100) of completed stages; ``0`` for an empty plan."""
    if not stages:
        return 0
    completed = sum(1 for stage in stages if stage.is_completed)
    return round_half_up(Decimal(100 * completed) / Decimal(len(stages)))


def order_progress(
    items: Sequence[OrderItemSnapshot], weighted: bool = False
) -> int:
    """Mean item progress of an order; ``0`` for an order without items.

    The dashboard uses the unweighted mean.  ``weighted=True`` weighs each
    item by its quantity, as the production report does.
    """
    if not items:
        return 0
    if weighted:
        total_quantity = sum(max(item.quantity, 0) for item in items)
        if total_quantity == 0:
            return 0
        weighted_sum = sum(
            item_progress(item.stages) * max(item.quantity, 0) for item in items
        )
        return round_half_up(Decimal(weighted_sum) / Decimal(total_quantity))
    total = sum(item_progress(item.stages) for item in items)
    return round_half_up(Decimal(total) / Decimal(len(items)))


# ---------------------------------------------------------------------------
# Delivery classification
# ---------------------------------------------------------------------------


def urgency(
    delivery_date: Optional[date], status: OrderStatus, today: date
) -> UrgencyBucket:
    """Bucket an order by the days left until its delivery date.

    Completed and cancelled orders are always ``COMPLETED``; an open order
    without a delivery date is ``UNKNOWN``.
    """
    if status in CLOSED_ORDER_STATUSES:
        return UrgencyBucket.COMPLETED
    if delivery_date is None:
        return UrgencyBucket.UNKNOWN

    days_until = days_between(today, delivery_date)
    for upper_bound, bucket in URGENCY_THRESHOLDS:
        if days_until <= upper_bound:
            return bucket
    return UrgencyBucket.NORMAL


def delivery_performance(
    delivery_date: Optional[date],
    completion_date: Optional[date],
    status: OrderStatus,
    today: date,
) -> DeliveryStatus:
    """Classify an order as ahead of, on or behind its delivery date.

    Finished orders compare completion against delivery.  Open orders are
    ``LATE`` once the delivery day has passed and ``PENDING`` otherwise.
    """
    if delivery_date is None:
        return DeliveryStatus(DeliveryPerformance.PENDING)

    if completion_date is not None:
        delta = days_between(delivery_date, completion_date)
        if delta < 0:
            return DeliveryStatus(DeliveryPerformance.AHEAD, delta)
        if delta > 0:
            return DeliveryStatus(DeliveryPerformance.LATE, delta)
        return DeliveryStatus(DeliveryPerformance.ON_TIME, 0)

    if status not in CLOSED_ORDER_STATUSES and today > delivery_date:
        return DeliveryStatus(
            DeliveryPerformance.LATE, days_between(delivery_date, today)
        )
    return DeliveryStatus(DeliveryPerformance.PENDING)


def urgency_counts(
    orders: Iterable[OrderSnapshot], today: date
) -> Dict[UrgencyBucket, int]:
    """Number of orders per urgency bucket (every bucket present)."""
    counts = {bucket: 0 for bucket in UrgencyBucket}
    for order in orders:
        counts[urgency(order.delivery_date, order.status, today)] += 1
    return counts


# ---------------------------------------------------------------------------
# Customer ranking
# ---------------------------------------------------------------------------


def rank_customers(
    orders: Sequence[OrderSnapshot], limit: int
) -> List[CustomerRankingEntry]:
    """Top *limit* customers by total order weight.

    Ties keep the order in which customers first appear in *orders*.

    Raises:
        InvalidInput: *limit* is not positive.
    """
    if limit <= 0:
        raise InvalidInput(f"Ranking limit must be positive, got {limit}.")

    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    names: Dict[str, str] = {}
    for order in orders:
        key = order.customer_id
        weight = coerce_decimal(order.weight)
        if key not in totals:
            totals[key] = Decimal("0")
            counts[key] = 0
            names[key] = order.customer_name
        totals[key] += weight
        counts[key] += 1

    entries = [
        CustomerRankingEntry(
            customer_id=key,
            customer_name=names[key],
            total_weight=totals[key],
            order_count=counts[key],
            average_weight=totals[key] / counts[key],
        )
        for key in totals
    ]
    entries.sort(key=lambda entry: entry.total_weight, reverse=True)
    return entries[:limit]
