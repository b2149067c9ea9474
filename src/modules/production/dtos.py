"""Production DTOs (Pydantic v2, immutable).

Input:
- ``RegisterAppointmentDTO``: an operator's start/finish report; mirrors the
  content of the item's QR code plus who scanned it.

Output (built from the pure domain results, rendered with
``model_dump(mode="json")``):
- ``CustomerRankingDTO``, ``OrderBriefDTO``, ``DashboardSummaryDTO``,
  ``ItemProgressDTO``, ``OrderProgressDTO``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from modules.production.domain import (
    CustomerRankingEntry,
    DeliveryStatus,
    KpiComparison,
)

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class AppointmentActionEnum(StrEnum):
    START = "start"
    FINISH = "finish"


class OperatorDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)
    email: Optional[EmailStr] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def strip(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class RegisterAppointmentDTO(BaseModel):
    """An operator event for one stage of one order item.

    ``occurred_at`` defaults to now; naive values are read in the configured
    time zone by the service.
    """

    model_config = ConfigDict(frozen=True)

    order_id: UUID
    item_id: UUID
    stage_index: int = Field(ge=0)
    action: AppointmentActionEnum
    operator: OperatorDTO
    notes: str = ""
    occurred_at: Optional[datetime] = None

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class CustomerRankingDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: int
    customer_id: str
    customer_name: str
    total_weight: Decimal
    order_count: int
    average_weight: Decimal

    @classmethod
    def from_domain(cls, position: int, entry: CustomerRankingEntry) -> CustomerRankingDTO:
        return cls(
            position=position,
            customer_id=entry.customer_id,
            customer_name=entry.customer_name,
            total_weight=entry.total_weight,
            order_count=entry.order_count,
            average_weight=entry.average_weight.quantize(Decimal("0.001")),
        )


class DeliveryStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    performance: str
    days: Optional[int] = None

    @classmethod
    def from_domain(cls, status: DeliveryStatus) -> DeliveryStatusDTO:
        return cls(performance=str(status.performance), days=status.days)


class OrderBriefDTO(BaseModel):
    """An order line in the dashboard's late/upcoming lists."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    customer_name: str
    delivery_date: Optional[date]
    urgency: str
    progress: int


class KpiComparisonDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: Decimal
    previous: Decimal
    percent_change: float

    @classmethod
    def from_domain(cls, comparison: KpiComparison) -> KpiComparisonDTO:
        return cls(
            current=comparison.current,
            previous=comparison.previous,
            percent_change=round(comparison.percent_change, 1),
        )


class OnTimeDeliveryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int
    on_time: int
    percent: float


class DashboardSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    today: date
    period_start: date
    period_end: date
    total_orders: int
    open_orders: int
    average_progress: int
    urgency: Dict[str, int]
    late_orders: List[OrderBriefDTO]
    upcoming_orders: List[OrderBriefDTO]
    on_time_delivery: OnTimeDeliveryDTO
    kpis: Dict[str, KpiComparisonDTO]


class ItemProgressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    quantity: int
    progress: int
    completed_stages: int
    total_stages: int
    current_stage: Optional[str] = None


class OrderProgressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    customer_name: str
    status: str
    progress: int
    weighted_progress: int
    urgency: str
    delivery_status: DeliveryStatusDTO
    items: List[ItemProgressDTO]

