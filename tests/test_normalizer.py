"""Tests for string-level phrase rewrites."""

import pytest

from recurrence_nlp.nlp.normalizer import (
    disambiguate_ordinal_units,
    expand_weekday_ranges,
    handle_begin_end,
    normalize,
)


class TestNormalize:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("  Every Monday!  ", "every monday"),
            ("Every Monday, Wednesday, and Friday", "every monday and wednesday and friday"),
            ("March 5, 2026", "march 5 2026"),
            ("Friday, March 5", "friday march 5"),
            ("every   other\tweek", "every other week"),
            ("at 3:30 p.m.", "at 3:30 p.m."),
        ],
    )
    def test_normalize(self, text: str, expected: str) -> None:
        assert normalize(text) == expected


class TestBeginEnd:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("the end of every month", "the last of every month"),
            ("the beginning of every month", "the first of every month"),
            ("every month at the end", "every month on the last"),
            ("every month at start", "every month on the first"),
        ],
    )
    def test_rewrites(self, text: str, expected: str) -> None:
        assert handle_begin_end(text) == expected


class TestWeekdayRanges:
    def test_dash_range(self) -> None:
        assert expand_weekday_ranges("every mon-wed") == "every monday and tuesday and wednesday"

    def test_through_wraps_around_saturday(self) -> None:
        assert expand_weekday_ranges("fridays through mondays") == (
            "fridays and saturdays and sundays and mondays"
        )

    def test_same_day(self) -> None:
        assert expand_weekday_ranges("every tue-tue") == "every tuesday"

    def test_no_range(self) -> None:
        assert expand_weekday_ranges("every monday and friday") == "every monday and friday"


class TestOrdinalUnits:
    def test_trigger_makes_interval(self) -> None:
        assert disambiguate_ordinal_units("every 3rd week") == "every 3 weeks"

    def test_bare_day_selects_weekday(self) -> None:
        assert disambiguate_ordinal_units("the 2nd day") == "the 2nd day of the week"

    def test_containing_unit_kept(self) -> None:
        assert disambiguate_ordinal_units("the 2nd day of the month") == "the 2nd day of the month"

    def test_negative_ordinal_kept(self) -> None:
        assert disambiguate_ordinal_units("every last week") == "every last week"

    def test_weekday_unit_kept(self) -> None:
        assert disambiguate_ordinal_units("every 2nd friday") == "every 2nd friday"
