"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  The aggregate
(Order + OrderItems + ProductionStages) is created in one transaction, and
domain events collected on the order are written to the outbox in the same
transaction as the row they describe.

Concurrency control uses ``select_for_update()`` on the order row; stage
rows are only mutated while their order is locked.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import Prefetch
from django.utils import timezone

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderItem, OrderStatusHistory, ProductionStage
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _aggregate_queryset() -> models.QuerySet:
    """Orders with customer, alive items, their stages and history eager-loaded."""
    return (
        Order.objects.alive()
        .select_related("customer")
        .prefetch_related(
            Prefetch(
                "items",
                queryset=OrderItem.objects.alive().prefetch_related("stages"),
            ),
            "status_history",
        )
    )


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items and stages atomically.

        ``data`` keys:
        - ``customer_id`` (required)
        - ``items`` (required): dicts with ``code``, ``description``,
          ``quantity``, ``unit_weight``, ``delivery_date`` and ``stages``
          (dicts with ``name``, ``duration_days``, ``planned_start``,
          ``planned_end``), stages in sequence order
        - ``internal_os``, ``project``, ``start_date``, ``delivery_date``,
          ``notes``, ``idempotency_key`` (optional)
        """
        order = Order(
            customer_id=data["customer_id"],
            internal_os=data.get("internal_os", ""),
            project=data.get("project", ""),
            delivery_date=data.get("delivery_date"),
            notes=data.get("notes", ""),
            idempotency_key=data.get("idempotency_key"),
        )
        if data.get("start_date"):
            order.start_date = data["start_date"]
        order.save()

        total = Decimal("0.000")
        stage_rows: list[ProductionStage] = []
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                code=item_data["code"],
                description=item_data.get("description", ""),
                quantity=item_data.get("quantity", 1),
                unit_weight=item_data.get("unit_weight", Decimal("0")),
                delivery_date=item_data.get("delivery_date"),
            )
            item.save()
            total += item.total_weight

            for sequence, stage_data in enumerate(item_data.get("stages", [])):
                stage_rows.append(
                    ProductionStage(
                        item=item,
                        sequence=sequence,
                        name=stage_data["name"],
                        duration_days=stage_data.get("duration_days", 1),
                        planned_start=stage_data.get("planned_start"),
                        planned_end=stage_data.get("planned_end"),
                    )
                )

        ProductionStage.objects.bulk_create(stage_rows)

        order.total_weight = total
        order.save(update_fields=["total_weight"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(items),
            stage_count=len(stage_rows),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent, soft-deleted or invalid IDs.
        """
        try:
            return _aggregate_queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Only the order row is locked; children are prefetched so the caller
        can walk items and stages while holding the lock.
        """
        try:
            return (
                _aggregate_queryset()
                .select_for_update(of=("self",))
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        """List orders with eager-loaded relations.

        Supported filter keys are any ``Order`` lookups, e.g. ``status``,
        ``customer_id`` or ``delivery_date__lt``.
        """
        queryset = _aggregate_queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return _aggregate_queryset().filter(idempotency_key=key).first()

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and write its pending domain events to the outbox."""
        entity.save()

        events = entity.domain_events
        for event in events:
            OutboxEvent.objects.create(
                event_type=event.event_name,
                aggregate_id=str(event.aggregate_id),
                payload=event.to_payload(),
                topic="orders",
            )
        entity.clear_domain_events()

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete an order by ID."""
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.soft_deleted", order_id=str(id))
        return True

    # ------------------------------------------------------------------
    # Order-specific writes
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def save_stages(self, stages: list[ProductionStage], fields: list[str]) -> None:
        if not stages:
            return
        now = timezone.now()
        for stage in stages:
            stage.updated_at = now
        ProductionStage.objects.bulk_update(stages, [*fields, "updated_at"])
