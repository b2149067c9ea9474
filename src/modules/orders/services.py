"""Order service layer (use cases).

Orchestrates manufacturing-order creation, status management and
completion.  Every write is atomic; the service defines the unit-of-work
boundary and the repository writes the outbox inside it.

Rules enforced:
- Orders are only opened for active customers.
- Items without an explicit schedule get their stages planned back to back
  from the order start date.
- Status transitions are validated against ``VALID_TRANSITIONS`` and
  recorded in the status history.
- ``completion_date`` is written exactly once.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.customers.exceptions import CustomerNotFound, InactiveCustomer
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCompleted, OrderCreated, OrderStatusChanged
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderAlreadyCompleted,
    OrderNotFound,
)
from modules.production.domain import Stage
from modules.production.scheduling import plan

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.dtos import (
        CompleteOrderDTO,
        CreateOrderDTO,
        CreateOrderItemDTO,
        UpdateOrderStatusDTO,
    )
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def _stage_rows(item: CreateOrderItemDTO, start_date: date) -> List[Dict[str, Any]]:
    """Stage dicts for the repository, planned when no stage carries dates."""
    stages = [
        Stage(
            name=stage.name,
            duration_days=stage.duration_days,
            planned_start=stage.planned_start,
            planned_end=stage.planned_end,
        )
        for stage in item.stages
    ]
    has_schedule = any(s.planned_start or s.planned_end for s in stages)
    if stages and not has_schedule:
        stages = plan(stages, start_date)
    return [
        {
            "name": stage.name,
            "duration_days": stage.duration_days,
            "planned_start": stage.planned_start,
            "planned_end": stage.planned_end,
        }
        for stage in stages
    ]


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order with its items and planned stages.

        Raises:
            CustomerNotFound: customer does not exist.
            InactiveCustomer: customer is inactive.
        """
        log = logger.bind(customer_id=str(dto.customer_id))
        log.info("order.creation_started")

        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info(
                    "order.idempotency_hit",
                    order_id=str(existing.id),
                    key=dto.idempotency_key,
                )
                return existing

        customer = self._customer_repo.get_by_id(str(dto.customer_id))
        if not customer:
            raise CustomerNotFound(f"Customer {dto.customer_id} not found.")
        if not customer.is_active:
            raise InactiveCustomer(f"Customer {dto.customer_id} is inactive.")

        start_date = dto.start_date or timezone.localdate()
        order = self._order_repo.create(
            {
                "customer_id": customer.id,
                "internal_os": dto.internal_os,
                "project": dto.project,
                "start_date": start_date,
                "delivery_date": dto.delivery_date,
                "notes": dto.notes or "",
                "idempotency_key": dto.idempotency_key,
                "items": [
                    {
                        "code": item.code,
                        "description": item.description,
                        "quantity": item.quantity,
                        "unit_weight": item.unit_weight,
                        "delivery_date": item.delivery_date,
                        "stages": _stage_rows(item, start_date),
                    }
                    for item in dto.items
                ],
            }
        )

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_id=str(customer.id),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=order.status,
            notes="Order created",
        )

        log.info("order.created", order_id=str(order.id), order_number=order.order_number)
        return self._order_repo.get_by_id(str(order.id)) or order

    @transaction.atomic
    def update_status(self, order_id: UUID, dto: UpdateOrderStatusDTO) -> Order:
        """Transition an order to a new status.

        Completion goes through ``complete_order`` so the completion date is
        always recorded.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderStatus: transition is not allowed.
        """
        if dto.status == OrderStatus.COMPLETED:
            return self.complete_order(order_id, notes=dto.notes)

        order = self._get_locked(order_id)
        log = logger.bind(
            order_id=str(order_id),
            current_status=order.status,
            new_status=str(dto.status),
        )

        if not order.can_transition_to(dto.status):
            log.warning("order.invalid_transition")
            raise InvalidOrderStatus(
                f"Cannot transition from {order.status} to {dto.status}."
            )

        self._change_status(order, dto.status, dto.notes)
        log.info("order.status_updated")
        return self._order_repo.get_by_id(str(order_id))

    @transaction.atomic
    def complete_order(
        self,
        order_id: UUID,
        dto: Optional[CompleteOrderDTO] = None,
        notes: str = "",
    ) -> Order:
        """Mark an order completed and stamp its completion date.

        Raises:
            OrderNotFound: order does not exist.
            OrderAlreadyCompleted: the completion date is already set.
            InvalidOrderStatus: the current status cannot be completed.
        """
        order = self._get_locked(order_id)
        log = logger.bind(order_id=str(order_id), current_status=order.status)

        if order.completion_date is not None:
            log.warning("order.already_completed")
            raise OrderAlreadyCompleted(
                f"Order {order.order_number} was completed on {order.completion_date}."
            )
        if not order.can_transition_to(OrderStatus.COMPLETED):
            log.warning("order.invalid_transition", new_status=OrderStatus.COMPLETED)
            raise InvalidOrderStatus(f"Cannot complete order in status {order.status}.")

        completion_date = (dto.completion_date if dto else None) or timezone.localdate()
        order.completion_date = completion_date
        order.add_domain_event(
            OrderCompleted(aggregate_id=order.id, completion_date=completion_date.isoformat())
        )
        self._change_status(
            order,
            OrderStatus.COMPLETED,
            (dto.notes if dto else "") or notes or "Order completed",
        )

        log.info("order.completed", completion_date=completion_date.isoformat())
        return self._order_repo.get_by_id(str(order_id))

    @transaction.atomic
    def delete_order(self, order_id: str) -> None:
        if not self._order_repo.delete(order_id):
            raise OrderNotFound(f"Order {order_id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_locked(self, order_id: UUID) -> Order:
        order = self._order_repo.get_for_update(str(order_id))
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _change_status(self, order: Order, new_status: str, notes: str) -> None:
        old_status = order.status
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=str(new_status),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=new_status,
            notes=notes,
            old_status=old_status,
        )
