"""Parse-with-default helpers for loosely typed stage and order fields.

Legacy order documents store durations and weights as strings, numbers
or nothing at all, and stage statuses as pt-BR display labels.  These
helpers are applied where data enters the scheduling core, so that the
core stays strictly typed and never raises on dirty-but-structurally-valid
values.
"""

from __future__ import annotations

import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Any

from modules.production.domain import StageStatus

DEFAULT_DURATION_DAYS = 1
MAX_DURATION_DAYS = 3650

_STAGE_STATUS_ALIASES: dict[str, StageStatus] = {
    "pending": StageStatus.PENDING,
    "nao iniciado": StageStatus.PENDING,
    "pendente": StageStatus.PENDING,
    "in_progress": StageStatus.IN_PROGRESS,
    "in progress": StageStatus.IN_PROGRESS,
    "em andamento": StageStatus.IN_PROGRESS,
    "completed": StageStatus.COMPLETED,
    "concluido": StageStatus.COMPLETED,
}


def coerce_duration_days(value: Any) -> int:
    """Return *value* as a whole number of days in ``[0, MAX_DURATION_DAYS]``.

    Missing, non-numeric and negative values fall back to one day.
    Fractional values are truncated and longer durations are capped.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_DURATION_DAYS
    try:
        days = int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, OverflowError):
        return DEFAULT_DURATION_DAYS
    if days < 0:
        return DEFAULT_DURATION_DAYS
    return min(days, MAX_DURATION_DAYS)


def coerce_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Parse a weight-like value; comma decimal separators are accepted."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    text = str(value).strip().replace(",", ".")
    if not text:
        return default
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return default
    return parsed if parsed.is_finite() else default


def _normalise_label(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()


def parse_stage_status(value: Any) -> StageStatus:
    """Map an enum value or a display label to ``StageStatus``.

    Unknown labels map to ``PENDING``, so an unrecognised stage never counts
    towards progress.
    """
    if isinstance(value, StageStatus):
        return value
    if not isinstance(value, str):
        return StageStatus.PENDING
    return _STAGE_STATUS_ALIASES.get(_normalise_label(value), StageStatus.PENDING)
