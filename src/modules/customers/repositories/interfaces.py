"""Customer repository contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    """Adds the look-ups behind the unique document / email rules."""

    @abstractmethod
    def get_by_document(self, document: str) -> Optional[Customer]:
        """Retrieve a customer by digits-only CPF/CNPJ."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Retrieve a customer by email address (case-insensitive)."""
