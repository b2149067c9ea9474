"""Domain events raised by operator appointments.

``aggregate_id`` is the order id; the outbox row is written by the order
repository in the appointment transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class StageStarted(DomainEvent):
    item_id: Optional[str] = None
    stage_index: int = 0
    stage_name: str = ""
    operator_id: str = ""


@dataclass(frozen=True)
class StageFinished(DomainEvent):
    """A stage was finished; ``rescheduled`` counts the later stages moved."""

    item_id: Optional[str] = None
    stage_index: int = 0
    stage_name: str = ""
    operator_id: str = ""
    rescheduled: int = 0
    item_finished: bool = False
