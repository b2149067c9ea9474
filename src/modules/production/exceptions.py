"""Production domain exceptions.

``InvalidInput`` and ``InvalidIndex`` are precondition failures raised by
the pure scheduling/aggregation functions.  The remaining classes are raised
by the appointment service when an operator event cannot be applied.
The API layer (Views) catches these and translates them into HTTP responses.
"""

from __future__ import annotations


class ProductionError(Exception):
    """Base class for production scheduling errors."""


class InvalidInput(ProductionError):
    """Structurally invalid input (empty stage list, non-positive limit)."""


class InvalidIndex(ProductionError):
    """The completed stage index is outside the stage list."""


class ItemNotFound(Exception):
    """The order item referenced by an appointment does not exist."""


class StageNotFound(Exception):
    """The stage index referenced by an appointment does not exist."""


class StageAlreadyCompleted(Exception):
    """The stage was already reported as finished."""


class InvalidAppointment(Exception):
    """The appointment action is not allowed for the order's current state."""
