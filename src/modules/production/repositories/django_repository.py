"""Django ORM implementation of ``IAppointmentRepository``."""

from __future__ import annotations

from typing import Any, Dict

import structlog
from django.db import models

from modules.production.models import Appointment
from modules.production.repositories.interfaces import IAppointmentRepository

logger = structlog.get_logger(__name__)


class AppointmentDjangoRepository(IAppointmentRepository):
    def create(self, data: Dict[str, Any]) -> Appointment:
        appointment = Appointment.objects.create(**data)
        logger.debug("appointment.persisted", appointment_id=str(appointment.id))
        return appointment

    def list(self) -> models.QuerySet:
        return Appointment.objects.select_related("order").order_by("-occurred_at")
