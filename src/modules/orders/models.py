"""Manufacturing order aggregate: Order → OrderItem → ProductionStage.

- ``Order.order_number`` is generated on first save (``OP-YYYYMMDD-XXXXXX``);
  the UUIDv7 ``id`` is used for every API reference.
- ``completion_date`` is written once, when the order is completed.
- Each item owns an ordered chain of ``ProductionStage`` rows; ``sequence``
  defines the dependency chain used for rescheduling and is never re-sorted
  by consumers.
- ``actual_start`` / ``actual_end`` are operator timestamps, written only by
  appointments.  ``planned_*`` are derived and may be recomputed.
- ``duration_days`` is nullable and may hold legacy negative values; the
  scheduler coerces those to one day.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    ORDER_NUMBER_MAX_RETRIES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    StageStatus,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, SoftDeleteModel):
    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    internal_os = models.CharField(max_length=50, blank=True, default="")
    project = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.IN_PROGRESS,
    )
    start_date = models.DateField(default=timezone.localdate)
    delivery_date = models.DateField(null=True, blank=True)
    completion_date = models.DateField(null=True, blank=True)
    total_weight = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    notes = models.TextField(blank=True, default="")
    idempotency_key = models.CharField(max_length=255, unique=True, null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["delivery_date"], name="orders_delivery_idx"),
        ]

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        return f"OP-{timezone.localdate():%Y%m%d}-{secrets.token_hex(3).upper()}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(SoftDeleteModel):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    code = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    unit_weight = models.DecimalField(
        max_digits=12, decimal_places=3, default=Decimal("0.000")
    )
    delivery_date = models.DateField(null=True, blank=True)
    finished_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def total_weight(self) -> Decimal:
        return self.unit_weight * self.quantity

    def __str__(self) -> str:
        return f"{self.code} x{self.quantity}"


class ProductionStage(BaseModel):
    item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.CASCADE,
        related_name="stages",
    )
    sequence = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=StageStatus.choices,
        default=StageStatus.PENDING,
    )
    duration_days = models.IntegerField(null=True, blank=True, default=1)
    planned_start = models.DateField(null=True, blank=True)
    planned_end = models.DateField(null=True, blank=True)
    actual_start = models.DateTimeField(null=True, blank=True)
    actual_end = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "production_stages"
        ordering = ["item", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["item", "sequence"], name="production_stages_item_sequence_uniq"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.sequence}. {self.name} [{self.status}]"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail of order status changes.

    ``user`` is ``None`` for changes made by the system (e.g. appointments).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.order} : {self.old_status} -> {self.new_status}"
