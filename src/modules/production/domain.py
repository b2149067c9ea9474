"""Framework-agnostic value objects for production scheduling.

These are immutable snapshots built from ORM rows by
``modules.production.mappers``.  The scheduling and progress functions
operate only on these types and never see Django models or the
pt-BR display strings stored by older records.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Optional, Tuple

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class StageStatus(StrEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class OrderStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    DELAYED = "DELAYED"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


CLOSED_ORDER_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})


class UrgencyBucket(StrEnum):
    """Delivery urgency relative to today (lower bound of each bin inclusive)."""

    OVERDUE = "overdue"
    TODAY = "today"
    TOMORROW = "tomorrow"
    CRITICAL = "critical"
    URGENT = "urgent"
    SOON = "soon"
    NORMAL = "normal"
    COMPLETED = "completed"
    UNKNOWN = "unknown"


class DeliveryPerformance(StrEnum):
    AHEAD = "ahead"
    ON_TIME = "on_time"
    LATE = "late"
    PENDING = "pending"


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Stage:
    """One planned production step of one order item."""

    name: str
    status: StageStatus = StageStatus.PENDING
    duration_days: int = 1
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None
    actual_start: Optional[date] = None
    actual_end: Optional[date] = None

    @property
    def is_completed(self) -> bool:
        return self.status == StageStatus.COMPLETED

    @property
    def reference_end(self) -> Optional[date]:
        """The date successors are anchored on: actual end, else planned end."""
        return self.actual_end or self.planned_end

    def with_planned(self, start: date, end: date) -> Stage:
        return replace(self, planned_start=start, planned_end=end)


@dataclass(frozen=True)
class OrderItemSnapshot:
    code: str
    description: str = ""
    quantity: int = 1
    stages: Tuple[Stage, ...] = ()
    delivery_date: Optional[date] = None
    finished_date: Optional[date] = None


@dataclass(frozen=True)
class OrderSnapshot:
    order_id: str
    customer_id: str
    order_number: str = ""
    customer_name: str = ""
    status: OrderStatus = OrderStatus.IN_PROGRESS
    start_date: Optional[date] = None
    delivery_date: Optional[date] = None
    completion_date: Optional[date] = None
    weight: Decimal = Decimal("0")
    items: Tuple[OrderItemSnapshot, ...] = ()

    @property
    def is_closed(self) -> bool:
        """Completed or cancelled, or carrying a completion date."""
        return self.status in CLOSED_ORDER_STATUSES or self.completion_date is not None


# ---------------------------------------------------------------------------
# Aggregation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CustomerRankingEntry:
    customer_id: str
    customer_name: str
    total_weight: Decimal
    order_count: int
    average_weight: Decimal


@dataclass(frozen=True)
class DeliveryStatus:
    """Delivery performance of one order and the signed day delta behind it.

    ``days`` is completion minus delivery for closed orders and today minus
    delivery for late open orders; ``None`` when not applicable.
    """

    performance: DeliveryPerformance
    days: Optional[int] = None


@dataclass(frozen=True)
class DeliveryKpi:
    total: int = 0
    on_time: int = 0
    percent: float = 0.0


@dataclass(frozen=True)
class KpiComparison:
    current: Decimal
    previous: Decimal
    percent_change: float = field(default=0.0)
