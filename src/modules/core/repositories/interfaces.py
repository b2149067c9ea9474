"""Base repository contract.

Services receive repositories through their constructor and only ever
depend on these abstractions; the Django ORM stays behind the concrete
``*DjangoRepository`` classes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Generic contract for an aggregate repository of ``T``."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Return the entity or ``None`` (also for malformed IDs)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[T]:
        """List entities matching ORM-style look-ups."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Soft-delete an entity; ``False`` when it does not exist."""
