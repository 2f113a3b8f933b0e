"""Tests for calendar arithmetic helpers."""

import datetime

import pytest

from recurrence_nlp.nlp.date_math import add_units, end_of_month, start_of_month

NOW = datetime.datetime(2026, 3, 1, 10, 0)


class TestAddUnits:
    @pytest.mark.parametrize(
        "unit, count, expected",
        [
            ("day", 3, datetime.datetime(2026, 3, 4, 10, 0)),
            ("weeks", 3, datetime.datetime(2026, 3, 22, 10, 0)),
            ("month", 1, datetime.datetime(2026, 4, 1, 10, 0)),
            ("months", 11, datetime.datetime(2027, 2, 1, 10, 0)),
            ("years", 2, datetime.datetime(2028, 3, 1, 10, 0)),
        ],
    )
    def test_units(self, unit: str, count: int, expected: datetime.datetime) -> None:
        assert add_units(NOW, unit, count) == expected

    def test_month_end_clamps(self) -> None:
        assert add_units(datetime.datetime(2026, 1, 31), "month") == datetime.datetime(2026, 2, 28)

    def test_leap_day_clamps(self) -> None:
        assert add_units(datetime.datetime(2024, 2, 29), "year") == datetime.datetime(2025, 2, 28)

    def test_backwards_across_year(self) -> None:
        dt = datetime.datetime(2026, 1, 15)
        assert add_units(dt, "month", -2) == datetime.datetime(2025, 11, 15)

    def test_unknown_unit(self) -> None:
        with pytest.raises(ValueError):
            add_units(NOW, "fortnight")


def test_month_bounds() -> None:
    dt = datetime.datetime(2026, 2, 14, 9, 30)
    assert start_of_month(dt) == datetime.datetime(2026, 2, 1)
    assert end_of_month(dt) == datetime.datetime(2026, 2, 28, 23, 59, 59)
