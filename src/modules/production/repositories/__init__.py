"""Production repositories package."""

from modules.production.repositories.django_repository import AppointmentDjangoRepository
from modules.production.repositories.interfaces import IAppointmentRepository

__all__ = ["AppointmentDjangoRepository", "IAppointmentRepository"]
