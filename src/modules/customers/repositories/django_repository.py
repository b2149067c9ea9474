"""Django ORM implementation of ``ICustomerRepository``.

Look-ups return ``None`` instead of raising; the service decides what a
missing customer means.  Soft-deleted customers are hidden from ``get_by_id``
and ``list`` but still block their document and email.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import models, transaction

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    def get_by_id(self, id: str) -> Optional[Customer]:
        try:
            return Customer.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet:
        queryset = Customer.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        is_new = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        customer = self.get_by_id(id)
        if not customer:
            return False
        customer.delete()
        logger.info("customer.soft_deleted", customer_id=str(id))
        return True

    def get_by_document(self, document: str) -> Optional[Customer]:
        return Customer.objects.filter(document=document).first()

    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.filter(email__iexact=email).first()
