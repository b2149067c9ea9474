"""Order API views.

Exposes ``OrderService`` over HTTP using a DRF ``GenericViewSet``.
Domain exceptions are caught and translated into HTTP status codes; the
view never swallows generic exceptions.
"""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.customers.exceptions import CustomerNotFound, InactiveCustomer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CompleteOrderDTO, CreateOrderDTO, UpdateOrderStatusDTO
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderAlreadyCompleted,
    OrderNotFound,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CompleteOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    UpdateOrderStatusSerializer,
)
from modules.orders.services import OrderService

_NOT_FOUND = {"detail": "Order not found."}
_INVALID_ID = {"detail": "Invalid order ID format."}


class OrderViewSet(GenericViewSet):
    """Manufacturing order operations.

    Does not extend ``ModelViewSet``; all ORM access goes through the
    service and repository layers.
    """

    queryset = Order.objects.none()
    serializer_class = OrderSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = OrderFilter
    search_fields = ["order_number", "internal_os", "project", "customer__name"]
    ordering_fields = ["created_at", "delivery_date", "start_date", "total_weight", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
        )

    def get_queryset(self):
        return self._service.list_orders()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)

        try:
            dto = CreateOrderDTO(
                **create_serializer.validated_data,
                idempotency_key=request.headers.get("Idempotency-Key"),
            )
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto)
        except CustomerNotFound:
            return Response(
                {"detail": "Customer not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except InactiveCustomer:
            return Response(
                {"detail": "Customer is inactive."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering is handled by ``OrderFilter``, ordering by
        ``OrderingFilter``.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(str(pk))
        except OrderNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/

        Updates the order status.  Cancellations go through
        ``POST /orders/{id}/cancel/``.
        """
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["status"] == OrderStatus.CANCELLED:
            return Response(
                {"detail": "Use the /cancel/ endpoint for cancellations."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return self._transition(
            pk,
            lambda order_id: self._service.update_status(
                order_id, UpdateOrderStatusDTO(**data)
            ),
        )

    @action(detail=True, methods=["post"])
    def complete(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/complete/"""
        serializer = CompleteOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CompleteOrderDTO(**serializer.validated_data)
        return self._transition(
            pk, lambda order_id: self._service.complete_order(order_id, dto)
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        dto = UpdateOrderStatusDTO(
            status=OrderStatus.CANCELLED,
            notes=str(request.data.get("notes", "")) or "Order cancelled",
        )
        return self._transition(
            pk, lambda order_id: self._service.update_status(order_id, dto)
        )

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/orders/{pk}/ (soft delete)"""
        try:
            self._service.delete_order(str(pk))
        except OrderNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def _transition(self, pk: str | None, operation) -> Response:
        try:
            order_id = UUID(str(pk))
        except ValueError:
            return Response(_INVALID_ID, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = operation(order_id)
        except OrderNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except OrderAlreadyCompleted as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(OrderSerializer(order).data)
