"""Stage schedule calculation for a single order item.

Stages form a strict chain: each stage is planned to start the day after
its predecessor ends (actual end when reported, planned end otherwise) and
to last ``duration_days`` calendar days, the start day included.

- ``plan`` lays out a fresh schedule from the item's start date.
- ``recalculate`` shifts every stage after a finished one, anchored on the
  real completion date reported by the operator.

Both functions are pure: they return new lists and never touch
``actual_start`` / ``actual_end``.
"""

from __future__ import annotations

from datetime import date
from typing import List, Sequence

from modules.production.dates import add_days
from modules.production.domain import Stage
from modules.production.exceptions import InvalidIndex, InvalidInput
from modules.production.parsing import coerce_duration_days


def _planned_window(start: date, duration_days: object) -> tuple[date, date]:
    duration = coerce_duration_days(duration_days)
    return start, add_days(start, max(duration - 1, 0))


def _chain_from(result: List[Stage], first: int) -> None:
    """Re-plan ``result[first:]`` in place from each predecessor's end."""
    for index in range(first, len(result)):
        anchor = result[index - 1].reference_end
        if anchor is None:
            continue
        stage = result[index]
        result[index] = stage.with_planned(
            *_planned_window(add_days(anchor, 1), stage.duration_days)
        )


def plan(stages: Sequence[Stage], start_date: date) -> List[Stage]:
    """Plan every stage back to back, the first one starting on *start_date*.

    Raises:
        InvalidInput: *stages* is empty.
    """
    if not stages:
        raise InvalidInput("Cannot plan an empty stage list.")

    result = list(stages)
    first = result[0]
    result[0] = first.with_planned(*_planned_window(start_date, first.duration_days))
    _chain_from(result, 1)
    return result


def recalculate(
    stages: Sequence[Stage],
    completed_index: int,
    actual_completion_date: date,
) -> List[Stage]:
    """Shift the plan of every stage after *completed_index*.

    The finished stage is anchored on its ``actual_end``; when the caller
    has not stamped it yet, *actual_completion_date* is used instead.
    Stages at or before *completed_index* are returned as-is, and when the
    finished stage is the last one the input comes back unchanged.

    Raises:
        InvalidInput: *stages* is empty.
        InvalidIndex: *completed_index* is outside ``[0, len(stages))``.
    """
    if not stages:
        raise InvalidInput("Cannot recalculate an empty stage list.")
    if not 0 <= completed_index < len(stages):
        raise InvalidIndex(
            f"Stage index {completed_index} out of range for "
            f"{len(stages)} stage(s)."
        )

    result = list(stages)
    if completed_index == len(result) - 1:
        return result

    anchor = result[completed_index].actual_end or actual_completion_date
    successor = result[completed_index + 1]
    result[completed_index + 1] = successor.with_planned(
        *_planned_window(add_days(anchor, 1), successor.duration_days)
    )
    _chain_from(result, completed_index + 2)
    return result
