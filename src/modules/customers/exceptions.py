"""Customer domain exceptions, translated to HTTP responses by the views."""

from __future__ import annotations


class CustomerAlreadyExists(Exception):
    """Another customer already uses this document or email."""


class CustomerNotFound(Exception):
    """The requested customer does not exist or has been soft-deleted."""


class InactiveCustomer(Exception):
    """The customer is inactive and cannot receive new orders."""
