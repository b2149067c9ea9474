"""Operator appointments: the append-only record of stage start/finish events.

An appointment is what the operator reports on the shop floor (usually by
scanning the item's QR code).  The stage row holds the current state; the
appointment keeps who reported what and when.  ``stage_index`` and
``stage_name`` are copied so the record stays readable if the plan changes.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel


class AppointmentAction(models.TextChoices):
    START = "start", "Início"
    FINISH = "finish", "Finalização"


class Appointment(BaseModel):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="appointments",
    )
    item = models.ForeignKey(
        "orders.OrderItem",
        on_delete=models.PROTECT,
        related_name="appointments",
    )
    stage = models.ForeignKey(
        "orders.ProductionStage",
        on_delete=models.PROTECT,
        related_name="appointments",
    )
    stage_index = models.PositiveSmallIntegerField()
    stage_name = models.CharField(max_length=100)
    action = models.CharField(max_length=10, choices=AppointmentAction.choices)
    occurred_at = models.DateTimeField()
    operator_id = models.CharField(max_length=100)
    operator_name = models.CharField(max_length=255)
    operator_email = models.EmailField(blank=True, default="")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "production_appointments"
        ordering = ["-occurred_at"]
        indexes = [
            models.Index(fields=["order", "occurred_at"], name="appointments_order_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.stage_name} {self.action} by {self.operator_name}"
