"""Customer service layer (use cases).

Enforces document and email uniqueness before persisting, and is the
single place orders ask whether a customer may receive new work.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction

from modules.customers.exceptions import (
    CustomerAlreadyExists,
    CustomerNotFound,
    InactiveCustomer,
)
from modules.customers.models import Customer

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.customers.dtos import CreateCustomerDTO, UpdateCustomerDTO
    from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)

_UPDATABLE_FIELDS = (
    "name",
    "trade_name",
    "email",
    "phone",
    "contact_name",
    "address",
    "is_active",
)


class CustomerService:
    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_customer(self, dto: CreateCustomerDTO) -> Customer:
        """Create a customer.

        Raises:
            CustomerAlreadyExists: document or email already registered.
        """
        log = logger.bind(document_type=str(dto.document_type))

        if self._repo.get_by_document(dto.document):
            log.warning("customer.duplicate_document")
            raise CustomerAlreadyExists(f"{dto.document_type} already registered.")
        if self._repo.get_by_email(dto.email):
            log.warning("customer.duplicate_email")
            raise CustomerAlreadyExists("Email already registered.")

        customer = self._repo.save(
            Customer(
                name=dto.name,
                trade_name=dto.trade_name,
                document=dto.document,
                document_type=dto.document_type,
                email=dto.email,
                phone=dto.phone,
                contact_name=dto.contact_name,
                address=dto.address,
            )
        )
        log.info("customer.created", customer_id=str(customer.id))
        return customer

    @transaction.atomic
    def update_customer(self, id: str, dto: UpdateCustomerDTO) -> Customer:
        """Apply the non-``None`` fields of *dto*.

        Raises:
            CustomerNotFound: no such customer.
            CustomerAlreadyExists: the new email belongs to someone else.
        """
        customer = self.get_customer(id)
        if dto.email is not None and dto.email.lower() != customer.email.lower():
            if self._repo.get_by_email(dto.email):
                raise CustomerAlreadyExists("Email already registered.")

        for field in _UPDATABLE_FIELDS:
            value = getattr(dto, field)
            if value is not None:
                setattr(customer, field, value)

        customer = self._repo.save(customer)
        logger.info("customer.updated", customer_id=str(id))
        return customer

    @transaction.atomic
    def delete_customer(self, id: str) -> None:
        if not self._repo.delete(id):
            raise CustomerNotFound(f"Customer {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_customer(self, id: str) -> Customer:
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer

    def get_active_customer(self, id: str) -> Customer:
        """Return a customer allowed to receive new orders.

        Raises:
            CustomerNotFound: no such customer.
            InactiveCustomer: the customer is deactivated.
        """
        customer = self.get_customer(id)
        if not customer.is_active:
            raise InactiveCustomer(f"Customer {id} is inactive.")
        return customer

    def list_customers(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        return self._repo.list(filters)
