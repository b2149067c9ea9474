"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
atomic creation with items and stages, row locking, status history and
idempotency-key look-up.  Services depend only on this contract.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.orders.models import Order, OrderStatusHistory, ProductionStage


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem and ProductionStage children and
    OrderStatusHistory records.  Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items and their stages atomically.

        ``data`` must include ``customer_id`` and ``items`` (list of dicts
        with ``code``, ``quantity``, ``unit_weight``, ``stages``...).
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items, stages and history."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row-level lock."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet:
        """List orders with optional filters."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def save_stages(self, stages: list[ProductionStage], fields: list[str]) -> None:
        """Persist the given columns of already existing stage rows."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""
