"""Customer API views.

``CustomerService`` does the work; the view parses input into DTOs and
maps domain exceptions to HTTP status codes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.pagination import StandardResultsSetPagination
from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
from modules.customers.exceptions import CustomerAlreadyExists, CustomerNotFound
from modules.customers.filters import CustomerFilter
from modules.customers.models import Customer
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.serializers import CustomerSerializer
from modules.customers.services import CustomerService

_NOT_FOUND = {"detail": "Customer not found."}


class CustomerViewSet(ListModelMixin, GenericViewSet):
    queryset = Customer.objects.none()
    serializer_class = CustomerSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = CustomerFilter
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["name", "trade_name", "email"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name", "id"]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CustomerService(repository=CustomerDjangoRepository())

    def get_queryset(self):
        return self._service.list_customers()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/customers/{pk}/"""
        try:
            customer = self._service.get_customer(str(pk))
        except CustomerNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(CustomerSerializer(customer).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/customers/"""
        try:
            dto = CreateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            customer = self._service.create_customer(dto)
        except CustomerAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/customers/{pk}/"""
        try:
            dto = UpdateCustomerDTO.model_validate(request.data)
        except PydanticValidationError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            customer = self._service.update_customer(str(pk), dto)
        except CustomerNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except CustomerAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(CustomerSerializer(customer).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/customers/{pk}/ (soft delete)"""
        try:
            self._service.delete_customer(str(pk))
        except CustomerNotFound:
            return Response(_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
