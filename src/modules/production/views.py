"""Production API views: operator appointments and dashboards.

Services do the work; views parse input and translate domain exceptions
into HTTP status codes (404 missing references, 400 invalid input,
409 conflicting reports).
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response

from modules.core.pagination import StandardResultsSetPagination
from modules.orders.exceptions import OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderItemSerializer
from modules.production.dtos import RegisterAppointmentDTO
from modules.production.exceptions import (
    InvalidAppointment,
    ItemNotFound,
    ProductionError,
    StageAlreadyCompleted,
    StageNotFound,
)
from modules.production.filters import AppointmentFilter
from modules.production.models import Appointment
from modules.production.repositories.django_repository import AppointmentDjangoRepository
from modules.production.serializers import (
    AppointmentSerializer,
    RankingQuerySerializer,
    SummaryQuerySerializer,
)
from modules.production.services import AppointmentService, DashboardService


class AppointmentViewSet(ListModelMixin, viewsets.GenericViewSet):
    queryset = Appointment.objects.none()
    serializer_class = AppointmentSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = AppointmentFilter
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    ordering_fields = ["occurred_at", "created_at"]
    ordering = ["-occurred_at", "-id"]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._repository = AppointmentDjangoRepository()
        self._service = AppointmentService(
            order_repository=OrderDjangoRepository(),
            appointment_repository=self._repository,
        )

    def get_queryset(self):
        return self._repository.list()

    def create(self, request: Request) -> Response:
        """POST /api/v1/appointments/

        Registers the start or finish of a stage and returns the appointment
        with the item's updated stage plan.
        """
        try:
            dto = RegisterAppointmentDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = self._service.register(dto)
        except (OrderNotFound, ItemNotFound, StageNotFound) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except StageAlreadyCompleted as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except (InvalidAppointment, ProductionError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "appointment": AppointmentSerializer(result.appointment).data,
                "item": OrderItemSerializer(result.item).data,
                "rescheduled": result.rescheduled,
            },
            status=status.HTTP_201_CREATED,
        )


class DashboardViewSet(viewsets.ViewSet):
    """GET-only dashboard endpoints."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DashboardService(order_repository=OrderDjangoRepository())

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/dashboard/summary/?start=YYYY-MM-DD&end=YYYY-MM-DD"""
        query = SummaryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            summary = self._service.summary(
                period_start=query.validated_data.get("start"),
                period_end=query.validated_data.get("end"),
            )
        except ProductionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(summary.model_dump(mode="json"))

    @action(detail=False, methods=["get"], url_path="customer-ranking")
    def customer_ranking(self, request: Request) -> Response:
        """GET /api/v1/dashboard/customer-ranking/?limit=N"""
        query = RankingQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            ranking = self._service.customer_ranking(query.validated_data.get("limit"))
        except ProductionError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response([entry.model_dump(mode="json") for entry in ranking])

    @action(
        detail=False,
        methods=["get"],
        url_path=r"orders/(?P<order_id>[^/.]+)/progress",
    )
    def order_progress(self, request: Request, order_id: str | None = None) -> Response:
        """GET /api/v1/dashboard/orders/{order_id}/progress/"""
        try:
            progress = self._service.order_progress(str(order_id))
        except OrderNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(progress.model_dump(mode="json"))
