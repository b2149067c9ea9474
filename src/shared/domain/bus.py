"""Event bus contracts used by modules to react to each other's events."""

from __future__ import annotations

from typing import Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    """Publishes events to every handler subscribed to the event's class."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...
