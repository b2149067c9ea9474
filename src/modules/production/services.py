"""Production service layer.

``AppointmentService`` applies operator start/finish reports to the stage
rows of an order item and reschedules the later stages.  The whole
read-modify-write runs in one transaction with the order row locked, so two
reports for the same order are serialized and a finish is applied at most
once.

``DashboardService`` builds read-only views (summary KPIs, customer
ranking, per-order progress) by mapping persisted orders to snapshots and
handing them to the pure aggregation functions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from modules.orders.constants import StageStatus
from modules.orders.exceptions import OrderNotFound
from modules.production import mappers
from modules.production.domain import OrderSnapshot
from modules.production.dtos import (
    AppointmentActionEnum,
    CustomerRankingDTO,
    DashboardSummaryDTO,
    DeliveryStatusDTO,
    ItemProgressDTO,
    KpiComparisonDTO,
    OnTimeDeliveryDTO,
    OrderBriefDTO,
    OrderProgressDTO,
)
from modules.production.events import StageFinished, StageStarted
from modules.production.exceptions import (
    InvalidAppointment,
    InvalidInput,
    ItemNotFound,
    StageAlreadyCompleted,
    StageNotFound,
)
from modules.production.kpis import (
    compare_periods,
    late_orders,
    on_time_delivery_kpi,
    upcoming_deadline_orders,
)
from modules.production.progress import (
    delivery_performance,
    item_progress,
    order_progress,
    rank_customers,
    round_half_up,
    urgency,
    urgency_counts,
)
from modules.production.scheduling import recalculate

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem, ProductionStage
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.production.dtos import RegisterAppointmentDTO
    from modules.production.models import Appointment
    from modules.production.repositories.interfaces import IAppointmentRepository

logger = structlog.get_logger(__name__)


@dataclass
class AppointmentResult:
    appointment: Appointment
    item: OrderItem
    stages: List[ProductionStage]
    rescheduled: int = 0


class AppointmentService:
    """Registers operator appointments.

    Receives repositories via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        appointment_repository: IAppointmentRepository,
    ) -> None:
        self._order_repo = order_repository
        self._appointment_repo = appointment_repository

    @transaction.atomic
    def register(self, dto: RegisterAppointmentDTO) -> AppointmentResult:
        """Apply a start or finish report to one stage.

        ``start`` marks the stage in progress and stamps ``actual_start`` the
        first time it is reported.  ``finish`` completes the stage, stamps
        ``actual_end`` and re-plans every later stage of the same item from
        the reported day.  When the last stage finishes the item gets its
        ``finished_date``.

        Raises:
            OrderNotFound: the order does not exist.
            InvalidAppointment: the order is completed or cancelled.
            ItemNotFound: the item does not belong to the order.
            StageNotFound: ``stage_index`` is beyond the item's stages.
            StageAlreadyCompleted: the stage was already finished.
        """
        log = logger.bind(
            order_id=str(dto.order_id),
            item_id=str(dto.item_id),
            stage_index=dto.stage_index,
            action=str(dto.action),
            operator_id=dto.operator.id,
        )

        order = self._order_repo.get_for_update(str(dto.order_id))
        if not order:
            raise OrderNotFound(f"Order {dto.order_id} not found.")
        if order.is_terminal:
            log.warning("appointment.order_closed", status=order.status)
            raise InvalidAppointment(
                f"Order {order.order_number} is {order.get_status_display()}."
            )

        item = self._find_item(order, dto.item_id)
        rows = list(item.stages.all())
        if dto.stage_index >= len(rows):
            raise StageNotFound(
                f"Item {item.code} has no stage at index {dto.stage_index}."
            )
        row = rows[dto.stage_index]
        if row.status == StageStatus.COMPLETED:
            log.warning("appointment.stage_already_completed")
            raise StageAlreadyCompleted(f"Stage '{row.name}' is already completed.")

        occurred_at = self._occurred_at(dto.occurred_at)
        rescheduled = 0
        if dto.action == AppointmentActionEnum.START:
            self._start(row, occurred_at)
            event = StageStarted(
                aggregate_id=order.id,
                item_id=str(item.id),
                stage_index=dto.stage_index,
                stage_name=row.name,
                operator_id=dto.operator.id,
            )
        else:
            rescheduled = self._finish(item, rows, dto.stage_index, occurred_at)
            event = StageFinished(
                aggregate_id=order.id,
                item_id=str(item.id),
                stage_index=dto.stage_index,
                stage_name=row.name,
                operator_id=dto.operator.id,
                rescheduled=rescheduled,
                item_finished=item.finished_date is not None,
            )

        appointment = self._appointment_repo.create(
            {
                "order": order,
                "item": item,
                "stage": row,
                "stage_index": dto.stage_index,
                "stage_name": row.name,
                "action": str(dto.action),
                "occurred_at": occurred_at,
                "operator_id": dto.operator.id,
                "operator_name": dto.operator.name,
                "operator_email": dto.operator.email or "",
                "notes": dto.notes,
            }
        )
        order.add_domain_event(event)
        self._order_repo.save(order)

        log.info(
            "appointment.registered",
            appointment_id=str(appointment.id),
            rescheduled=rescheduled,
        )
        return AppointmentResult(
            appointment=appointment, item=item, stages=rows, rescheduled=rescheduled
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _find_item(order: Order, item_id: UUID) -> OrderItem:
        for item in order.items.all():
            if item.id == item_id:
                return item
        raise ItemNotFound(f"Item {item_id} not found in order {order.order_number}.")

    @staticmethod
    def _occurred_at(value: Optional[datetime]) -> datetime:
        if value is None:
            return timezone.now()
        if timezone.is_naive(value):
            return timezone.make_aware(value)
        return value

    def _start(self, row: ProductionStage, occurred_at: datetime) -> None:
        row.status = StageStatus.IN_PROGRESS
        if row.actual_start is None:
            row.actual_start = occurred_at
        if row.planned_start is None:
            row.planned_start = timezone.localdate(occurred_at)
        self._order_repo.save_stages([row], ["status", "actual_start", "planned_start"])

    def _finish(
        self,
        item: OrderItem,
        rows: List[ProductionStage],
        index: int,
        occurred_at: datetime,
    ) -> int:
        row = rows[index]
        finished_on = timezone.localdate(occurred_at)
        row.status = StageStatus.COMPLETED
        row.actual_end = occurred_at
        if row.actual_start is None:
            row.actual_start = occurred_at
        self._order_repo.save_stages([row], ["status", "actual_start", "actual_end"])

        replanned = recalculate(mappers.stages_to_domain(rows), index, finished_on)
        changed = mappers.apply_planned(rows, replanned)
        self._order_repo.save_stages(changed, mappers.PLANNED_FIELDS)
        logger.info(
            "stage.recalculated",
            item_id=str(item.id),
            stage_index=index,
            finished_on=finished_on.isoformat(),
            rescheduled=len(changed),
        )

        if all(stage.status == StageStatus.COMPLETED for stage in rows):
            item.finished_date = finished_on
            item.save(update_fields=["finished_date"])
        return len(changed)


class DashboardService:
    """Read-only dashboard aggregations over the persisted orders."""

    def __init__(self, order_repository: IOrderRepository) -> None:
        self._order_repo = order_repository

    def _snapshots(self) -> List[OrderSnapshot]:
        return mappers.orders_to_domain(self._order_repo.list())

    def summary(
        self,
        today: Optional[date] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
    ) -> DashboardSummaryDTO:
        """KPIs for the period (default: current month up to *today*).

        Late and upcoming lists are sorted by delivery date.

        Raises:
            InvalidInput: the period starts after it ends.
        """
        today = today or timezone.localdate()
        period_end = period_end or today
        period_start = period_start or period_end.replace(day=1)
        if period_start > period_end:
            raise InvalidInput(
                f"Period start {period_start} is after its end {period_end}."
            )

        orders = self._snapshots()
        open_orders = [order for order in orders if not order.is_closed]

        def brief(order: OrderSnapshot) -> OrderBriefDTO:
            return OrderBriefDTO(
                order_id=order.order_id,
                order_number=order.order_number,
                customer_name=order.customer_name,
                delivery_date=order.delivery_date,
                urgency=str(urgency(order.delivery_date, order.status, today)),
                progress=order_progress(order.items),
            )

        def by_delivery(items: List[OrderSnapshot]) -> List[OrderSnapshot]:
            return sorted(items, key=lambda order: order.delivery_date or date.max)

        on_time = on_time_delivery_kpi(orders)
        average_progress = (
            round_half_up(
                Decimal(sum(order_progress(o.items) for o in open_orders))
                / Decimal(len(open_orders))
            )
            if open_orders
            else 0
        )
        summary = DashboardSummaryDTO(
            today=today,
            period_start=period_start,
            period_end=period_end,
            total_orders=len(orders),
            open_orders=len(open_orders),
            average_progress=average_progress,
            urgency={
                str(bucket): count
                for bucket, count in urgency_counts(orders, today).items()
            },
            late_orders=[brief(o) for o in by_delivery(late_orders(orders, today))],
            upcoming_orders=[
                brief(o)
                for o in by_delivery(
                    upcoming_deadline_orders(
                        orders, today, settings.PRODUCTION_UPCOMING_DEADLINE_DAYS
                    )
                )
            ],
            on_time_delivery=OnTimeDeliveryDTO(
                total=on_time.total, on_time=on_time.on_time, percent=on_time.percent
            ),
            kpis={
                key: KpiComparisonDTO.from_domain(value)
                for key, value in compare_periods(
                    orders, period_start, period_end, today
                ).items()
            },
        )
        logger.info(
            "dashboard.summary_built",
            total_orders=summary.total_orders,
            late=len(summary.late_orders),
        )
        return summary

    def customer_ranking(self, limit: Optional[int] = None) -> List[CustomerRankingDTO]:
        """Top customers by total order weight.

        Raises:
            InvalidInput: *limit* is not positive.
        """
        limit = settings.PRODUCTION_RANKING_DEFAULT_LIMIT if limit is None else limit
        entries = rank_customers(self._snapshots(), limit)
        return [
            CustomerRankingDTO.from_domain(position, entry)
            for position, entry in enumerate(entries, start=1)
        ]

    def order_progress(
        self, order_id: str, today: Optional[date] = None
    ) -> OrderProgressDTO:
        """Per-item and overall progress of one order.

        Raises:
            OrderNotFound: the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        today = today or timezone.localdate()
        snapshot = mappers.order_to_domain(order)

        items = []
        for item in snapshot.items:
            current = next((s.name for s in item.stages if not s.is_completed), None)
            items.append(
                ItemProgressDTO(
                    code=item.code,
                    description=item.description,
                    quantity=item.quantity,
                    progress=item_progress(item.stages),
                    completed_stages=sum(1 for s in item.stages if s.is_completed),
                    total_stages=len(item.stages),
                    current_stage=current,
                )
            )

        return OrderProgressDTO(
            order_id=snapshot.order_id,
            order_number=snapshot.order_number,
            customer_name=snapshot.customer_name,
            status=str(snapshot.status),
            progress=order_progress(snapshot.items),
            weighted_progress=order_progress(snapshot.items, weighted=True),
            urgency=str(urgency(snapshot.delivery_date, snapshot.status, today)),
            delivery_status=DeliveryStatusDTO.from_domain(
                delivery_performance(
                    snapshot.delivery_date,
                    snapshot.completion_date,
                    snapshot.status,
                    today,
                )
            ),
            items=items,
        )
