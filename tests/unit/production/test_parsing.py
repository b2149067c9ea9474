"""Unit tests for the parse-with-default helpers and date utilities."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from modules.production.dates import add_days, days_between, to_date
from modules.production.domain import StageStatus
from modules.production.parsing import (
    coerce_decimal,
    coerce_duration_days,
    parse_stage_status,
)

pytestmark = pytest.mark.unit


class TestCoerceDurationDays:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (3, 3),
            ("5", 5),
            (" 2 ", 2),
            (0, 0),
            ("0", 0),
            (2.9, 2),
            ("4.5", 4),
            (None, 1),
            ("", 1),
            ("dois", 1),
            (-3, 1),
            (True, 1),
            ("Infinity", 1),
            ("NaN", 1),
            (3650, 3650),
            (5_000_000, 3650),
            ("1e9", 3650),
        ],
    )
    def test_values(self, value, expected):
        assert coerce_duration_days(value) == expected


class TestCoerceDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("12.5"), Decimal("12.5")),
            (10, Decimal("10")),
            ("150,75", Decimal("150.75")),
            (" 3.2 ", Decimal("3.2")),
            (None, Decimal("0")),
            ("", Decimal("0")),
            ("kg", Decimal("0")),
            ("NaN", Decimal("0")),
            (Decimal("Infinity"), Decimal("0")),
        ],
    )
    def test_values(self, value, expected):
        assert coerce_decimal(value) == expected

    def test_custom_default(self):
        assert coerce_decimal("x", default=Decimal("-1")) == Decimal("-1")


class TestParseStageStatus:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("COMPLETED", StageStatus.COMPLETED),
            ("Concluído", StageStatus.COMPLETED),
            ("concluido", StageStatus.COMPLETED),
            ("Em Andamento", StageStatus.IN_PROGRESS),
            ("IN_PROGRESS", StageStatus.IN_PROGRESS),
            ("Não Iniciado", StageStatus.PENDING),
            ("PENDING", StageStatus.PENDING),
            (StageStatus.COMPLETED, StageStatus.COMPLETED),
        ],
    )
    def test_known_labels(self, value, expected):
        assert parse_stage_status(value) == expected

    @pytest.mark.parametrize("value", ["Pausado", "", None, 3])
    def test_unknown_values_are_pending(self, value):
        assert parse_stage_status(value) == StageStatus.PENDING


class TestDates:
    def test_to_date_from_datetime(self):
        assert to_date(datetime(2024, 3, 10, 18, 30)) == date(2024, 3, 10)

    def test_to_date_from_iso_string(self):
        assert to_date("2024-03-10T08:00:00") == date(2024, 3, 10)
        assert to_date("2024-03-10") == date(2024, 3, 10)

    @pytest.mark.parametrize("value", [None, "", "10/03/2024", "Data inválida", 20240310])
    def test_to_date_invalid_is_none(self, value):
        assert to_date(value) is None

    def test_add_days_crosses_leap_day(self):
        assert add_days(date(2024, 2, 28), 2) == date(2024, 3, 1)

    def test_add_days_saturates_at_calendar_edges(self):
        assert add_days(date(9999, 12, 30), 5_000_000) == date.max
        assert add_days(date(1, 1, 2), -5_000_000) == date.min

    def test_days_between_is_signed(self):
        assert days_between(date(2024, 3, 10), date(2024, 3, 15)) == 5
        assert days_between(date(2024, 3, 15), date(2024, 3, 10)) == -5
