"""Domain events for the Orders bounded context.

Extra fields carry defaults so the events can be rebuilt from their outbox
payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created with its items and stages."""

    order_number: str = ""
    customer_id: Optional[str] = None


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order status changes."""

    old_status: Optional[str] = None
    new_status: str = ""


@dataclass(frozen=True)
class OrderCompleted(DomainEvent):
    """Raised when an order is completed; ``completion_date`` is ISO formatted."""

    completion_date: str = ""
