"""Dashboard KPIs computed from order snapshots.

Period KPIs compare a date window with the window of the same length that
ends the day before it starts.  Orders belong to a window by their start
date; completions by their completion date.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Sequence, Tuple

from modules.production.dates import add_days, days_between
from modules.production.domain import (
    DeliveryKpi,
    KpiComparison,
    OrderSnapshot,
    OrderStatus,
)
from modules.production.exceptions import InvalidInput
from modules.production.parsing import coerce_decimal
from modules.production.progress import item_progress

DEFAULT_UPCOMING_DAYS = 7


def percent_change(current: Decimal | int, previous: Decimal | int) -> float:
    """Relative change in percent; 100 when growing from zero."""
    current = Decimal(current)
    previous = Decimal(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((current - previous) / previous * 100)


def _is_finished(order: OrderSnapshot) -> bool:
    return order.status == OrderStatus.COMPLETED or order.completion_date is not None


def late_orders(orders: Sequence[OrderSnapshot], today: date) -> List[OrderSnapshot]:
    """Open orders whose delivery date is already behind *today*."""
    return [
        order
        for order in orders
        if not order.is_closed
        and order.delivery_date is not None
        and order.delivery_date < today
    ]


def upcoming_deadline_orders(
    orders: Sequence[OrderSnapshot],
    today: date,
    horizon_days: int = DEFAULT_UPCOMING_DAYS,
) -> List[OrderSnapshot]:
    """Open orders due between *today* and *today* + *horizon_days*."""
    return [
        order
        for order in orders
        if not order.is_closed
        and order.delivery_date is not None
        and 0 <= days_between(today, order.delivery_date) <= horizon_days
    ]


def on_time_delivery_kpi(orders: Sequence[OrderSnapshot]) -> DeliveryKpi:
    """Share of fully produced items finished on or before their delivery date.

    Item dates fall back to the order's delivery and completion dates.
    Items without a finish date are not counted.
    """
    total = 0
    on_time = 0
    for order in orders:
        for item in order.items:
            finished = item.finished_date or order.completion_date
            if finished is None or item_progress(item.stages) != 100:
                continue
            total += 1
            due = item.delivery_date or order.delivery_date
            if due is not None and finished <= due:
                on_time += 1

    if total == 0:
        return DeliveryKpi()
    percent = (Decimal(on_time) / Decimal(total) * 100).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    return DeliveryKpi(total=total, on_time=on_time, percent=float(percent))


def previous_period(start: date, end: date) -> Tuple[date, date]:
    """The window of the same length ending the day before *start*.

    Both windows are inclusive, so a single day maps to the day before.

    Raises:
        InvalidInput: *end* is before *start*.
    """
    if end < start:
        raise InvalidInput(f"Period end {end} is before its start {start}.")
    length = days_between(start, end) + 1
    return add_days(start, -length), add_days(start, -1)


def period_totals(
    orders: Sequence[OrderSnapshot], start: date, end: date, today: date
) -> Dict[str, Decimal]:
    """Active, completed, unique-customer and weight totals for a window.

    Finished orders without a completion date are counted as completed
    *today*.
    """
    started = [
        order
        for order in orders
        if order.start_date is not None and start <= order.start_date <= end
    ]
    completed = [
        order
        for order in orders
        if _is_finished(order) and start <= (order.completion_date or today) <= end
    ]
    return {
        "active_orders": Decimal(sum(1 for o in started if not _is_finished(o))),
        "completed_orders": Decimal(len(completed)),
        "unique_customers": Decimal(len({o.customer_id for o in started})),
        "total_weight": sum(
            (coerce_decimal(o.weight) for o in started), Decimal("0")
        ),
    }


def compare_periods(
    orders: Sequence[OrderSnapshot], start: date, end: date, today: date
) -> Dict[str, KpiComparison]:
    """``period_totals`` for the window and its predecessor, with change %."""
    previous_start, previous_end = previous_period(start, end)
    current = period_totals(orders, start, end, today)
    previous = period_totals(orders, previous_start, previous_end, today)
    return {
        key: KpiComparison(
            current=current[key],
            previous=previous[key],
            percent_change=percent_change(current[key], previous[key]),
        )
        for key in current
    }
