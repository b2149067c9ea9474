"""Order DTOs for the service layer.

Framework-agnostic, immutable (``frozen=True``) Pydantic v2 models that
form the contract between the API layer and ``OrderService``.

- ``CreateStageDTO``: one production step of an item.
- ``CreateOrderItemDTO``: one item with its ordered stage chain.
- ``CreateOrderDTO``: order creation (nested items).
- ``UpdateOrderStatusDTO``: status transition request.
- ``CompleteOrderDTO``: order completion request.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import OrderStatus
from modules.production.parsing import MAX_DURATION_DAYS

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateStageDTO(BaseModel):
    """A production stage in an item's fabrication sequence.

    ``planned_start`` / ``planned_end`` may be given explicitly (imported
    schedules); when both are missing the service plans the stage from the
    order start date.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=100)
    duration_days: int = Field(default=1, ge=0, le=MAX_DURATION_DAYS)
    planned_start: Optional[date] = None
    planned_end: Optional[date] = None

    @model_validator(mode="after")
    def planned_window_is_ordered(self):
        if self.planned_start and self.planned_end and self.planned_end < self.planned_start:
            raise ValueError("planned_end must not be before planned_start.")
        return self


class CreateOrderItemDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str = Field(min_length=1, max_length=50)
    description: str = ""
    quantity: int = Field(default=1, ge=1)
    unit_weight: Decimal = Field(default=Decimal("0"), ge=0)
    delivery_date: Optional[date] = None
    stages: List[CreateStageDTO] = Field(default_factory=list)

    @field_validator("stages")
    @classmethod
    def stage_names_are_unique(cls, v: List[CreateStageDTO]) -> List[CreateStageDTO]:
        names = [stage.name.strip().lower() for stage in v]
        if len(names) != len(set(names)):
            raise ValueError("Stage names must be unique within an item.")
        return v


class CreateOrderDTO(BaseModel):
    """Order creation request.

    Validates:
    - ``items`` must contain at least one item.
    - ``delivery_date`` must not precede ``start_date``.
    """

    model_config = ConfigDict(frozen=True)

    customer_id: UUID
    items: List[CreateOrderItemDTO]
    internal_os: str = ""
    project: str = ""
    start_date: Optional[date] = None
    delivery_date: Optional[date] = None
    notes: Optional[str] = ""
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def delivery_after_start(self):
        if self.start_date and self.delivery_date and self.delivery_date < self.start_date:
            raise ValueError("delivery_date must not be before start_date.")
        return self


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    notes: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v


class CompleteOrderDTO(BaseModel):
    """``completion_date`` defaults to today in the configured time zone."""

    model_config = ConfigDict(frozen=True)

    completion_date: Optional[date] = None
    notes: str = ""
