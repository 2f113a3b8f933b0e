"""Tests for the recurrence descriptor and its serializer."""

import datetime

import pytest

from recurrence_nlp.nlp.descriptor import PartialMonth, RecurrenceDescriptor, serialize


class TestRuleParams:
    def test_key_order(self) -> None:
        d = RecurrenceDescriptor(frequency="weekly", interval=2)
        d.add_time(15, 0)
        d.add_weekdays("TU")
        assert list(d.rule_params()) == ["FREQ", "INTERVAL", "BYDAY", "BYHOUR", "BYMINUTE"]

    def test_until_wins_over_count(self) -> None:
        d = RecurrenceDescriptor(
            frequency="daily",
            until=datetime.datetime(2026, 4, 1),
            count=5,
        )
        params = d.rule_params()
        assert params["UNTIL"] == "2026-04-01"
        assert "COUNT" not in params

    def test_ordinal_weekdays_replace_plain_weekdays(self) -> None:
        d = RecurrenceDescriptor(frequency="monthly")
        d.add_weekdays("MO")
        d.add_ordinal_weekday(3, "FR")
        d.add_ordinal_weekday(-1, "FR")
        assert d.rule_params()["BYDAY"] == "+3FR,-1FR"

    def test_ordered_sets(self) -> None:
        d = RecurrenceDescriptor(frequency="monthly")
        d.add_month_days(15, 1, 15)
        assert d.month_days == [15, 1]
        assert d.rule_params()["BYMONTHDAY"] == "15,1"

    def test_unknown_frequency(self) -> None:
        with pytest.raises(ValueError):
            RecurrenceDescriptor().set_frequency("fortnightly")


class TestExceptions:
    def test_partial_detection(self) -> None:
        d = RecurrenceDescriptor()
        d.add_exception(datetime.datetime(2026, 7, 4))
        assert d.has_partial_exceptions is False
        d.add_exception(PartialMonth(8))
        assert d.has_partial_exceptions is True

    def test_calendar_date_needs_matching(self) -> None:
        d = RecurrenceDescriptor()
        d.add_exception(datetime.date(2026, 3, 5))
        assert d.has_partial_exceptions is True

    def test_partial_month_is_hashable(self) -> None:
        assert {PartialMonth(7), PartialMonth(7)} == {PartialMonth(7)}


class TestSerialize:
    def test_not_recurring(self) -> None:
        assert serialize(RecurrenceDescriptor()) is None

    def test_full_record(self) -> None:
        d = RecurrenceDescriptor(
            frequency="daily",
            interval=1,
            start=datetime.datetime(2026, 4, 1, 9, 0),
            exception_rule="FREQ=WEEKLY;INTERVAL=1;BYDAY=SA,SU",
        )
        text = serialize(d, [datetime.datetime(2026, 4, 6, 9, 0)])
        assert text == (
            "DTSTART:2026-04-01\n"
            "RRULE:FREQ=DAILY;INTERVAL=1\n"
            "EXRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=SA,SU\n"
            "EXDATE:2026-04-06T09:00:00"
        )
