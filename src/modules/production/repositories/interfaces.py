"""Appointment repository interface.

Appointments are append-only: there is no update, and ``delete`` is not
part of the contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.production.models import Appointment


class IAppointmentRepository(ABC):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Appointment:
        """Persist a new appointment record."""

    @abstractmethod
    def list(self) -> QuerySet:
        """All appointments, most recent first."""
