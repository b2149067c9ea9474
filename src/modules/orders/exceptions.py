"""Order domain exceptions.

Raised by the service layer when business rules are violated.
The views catch these and translate them into HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The requested order does not exist or has been soft-deleted."""


class InvalidOrderStatus(Exception):
    """An invalid status transition was attempted."""


class OrderAlreadyCompleted(Exception):
    """The order already has a completion date; it is written only once."""
