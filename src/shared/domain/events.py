"""Domain event primitives for the modular monolith.

Every ``DomainEvent`` subclass is registered by class name so that events
stored in the outbox as JSON can be rebuilt and published again.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Type
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base domain event (immutable)."""

    registry: ClassVar[Dict[str, Type[DomainEvent]]] = {}

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        DomainEvent.registry[cls.__name__] = cls

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", self.__class__.__name__)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-safe representation (UUIDs and datetimes as strings)."""
        payload: Dict[str, Any] = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            payload[f.name] = value
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> DomainEvent:
        """Rebuild the registered event class named in ``payload``.

        Raises:
            KeyError: no event class is registered under that name.
        """
        event_cls = cls.registry[payload["event_name"]]
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(event_cls):
            if not f.init or f.name not in payload:
                continue
            value = payload[f.name]
            if f.name in ("aggregate_id", "event_id") and value is not None:
                value = UUID(str(value))
            elif f.name == "occurred_on" and isinstance(value, str):
                value = datetime.fromisoformat(value)
            kwargs[f.name] = value
        return event_cls(**kwargs)


class DomainEventMixin:
    """Mixin for aggregate roots that collect domain events in memory."""

    _domain_events: list[DomainEvent]

    def add_domain_event(self, event: DomainEvent) -> None:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        self._domain_events.append(event)

    def clear_domain_events(self) -> None:
        if hasattr(self, "_domain_events"):
            self._domain_events.clear()

    @property
    def domain_events(self) -> list[DomainEvent]:
        if not hasattr(self, "_domain_events"):
            self._domain_events = []
        return list(self._domain_events)
