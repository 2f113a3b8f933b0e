"""Tests for rendering records and dates back into English."""

from __future__ import annotations

import datetime

import pytest

from recurrence_nlp.nlp import RecurringEvent, format_date, format_recurrence
from recurrence_nlp.nlp.formatter import ordinal_weekdays_text, time_text, weekdays_text

NOW = datetime.datetime(2026, 3, 1, 10, 0)


def _fmt(value: object) -> str:
    return format_recurrence(value, now=NOW)


class TestPieces:
    @pytest.mark.parametrize(
        "args, expected",
        [((15,), "3pm"), ((0,), "12am"), ((12,), "12pm"), ((9, 30), "9:30am"), ((15, 30, 15), "3:30:15pm")],
    )
    def test_time_text(self, args: tuple[int, ...], expected: str) -> None:
        assert time_text(*args) == expected

    def test_format_date(self) -> None:
        assert format_date(datetime.datetime(2026, 3, 5)) == "March 5, 2026"
        assert format_date(datetime.datetime(2026, 3, 5, 15, 30)) == "March 5, 2026 at 3:30pm"

    def test_weekdays_text(self) -> None:
        assert weekdays_text(["MO", "WE"]) == "Mon and Wed"
        assert weekdays_text(["SA", "SU"]) == "weekends"
        assert weekdays_text(["MO", "TU", "WE", "TH", "FR"], singular=True) == "weekday"

    def test_ordinal_weekdays_share_day_name(self) -> None:
        assert ordinal_weekdays_text([(1, "MO"), (3, "MO"), (-1, "FR")]) == "1st and 3rd Mon and last Fri"


class TestRules:
    @pytest.mark.parametrize(
        "record, expected",
        [
            ("RRULE:FREQ=DAILY;INTERVAL=1", "daily"),
            ("RRULE:FREQ=DAILY;INTERVAL=3", "every 3 days"),
            ("RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=TU", "every Tue"),
            ("RRULE:FREQ=WEEKLY;INTERVAL=2;BYDAY=TU", "every other week on Tue"),
            ("RRULE:FREQ=WEEKLY;INTERVAL=3;BYDAY=MO,WE", "every 3 weeks on Mon and Wed"),
            ("RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO,TU,WE,TH,FR", "every weekday"),
            ("RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=SA,SU", "every weekend"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=1;BYMONTHDAY=1,15", "the 1st and 15th of every month"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=2;BYMONTHDAY=1", "the 1st of every other month"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=MO;BYMONTHDAY=1", "every month on Mon and the 1st"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=+3FR", "the 3rd Fri of every month"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=-1FR", "the last Fri of every month"),
            ("RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=-2FR", "the 2nd to last Fri of every month"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYMONTHDAY=4;BYMONTH=7", "every July 4th"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYDAY=+3FR;BYMONTH=5", "the 3rd Fri of every May"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYYEARDAY=100", "the 100th day of every year"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYWEEKNO=2,4", "every year on week 2 and 4"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYDAY=MO;BYWEEKNO=2", "every year on Mon of week 2"),
            ("RRULE:FREQ=YEARLY;INTERVAL=1;BYMONTH=7", "every year in July"),
        ],
    )
    def test_body(self, record: str, expected: str) -> None:
        assert _fmt(record) == expected

    def test_set_position(self) -> None:
        record = "RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=MO,TU;BYSETPOS=2"
        assert _fmt(record) == "for the 2nd instance of every month on Mon and Tue"

    @pytest.mark.parametrize(
        "record, expected",
        [
            ("RRULE:FREQ=DAILY;INTERVAL=1;BYHOUR=15;BYMINUTE=0", "daily at 3pm"),
            ("RRULE:FREQ=DAILY;INTERVAL=1;BYHOUR=15;BYMINUTE=30", "daily at 3:30pm"),
            ("RRULE:FREQ=DAILY;INTERVAL=1;BYHOUR=0;BYMINUTE=0", "daily at 12am"),
        ],
    )
    def test_time(self, record: str, expected: str) -> None:
        assert _fmt(record) == expected


class TestRange:
    def test_count(self) -> None:
        assert _fmt("RRULE:FREQ=DAILY;INTERVAL=1;COUNT=5") == "daily for 5 times"
        assert _fmt("RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO;COUNT=2") == "every Mon twice"

    def test_until(self) -> None:
        assert _fmt("RRULE:FREQ=DAILY;INTERVAL=1;UNTIL=2026-03-22") == "daily until March 22, 2026"

    def test_from_to(self) -> None:
        record = "DTSTART:2026-04-01\nRRULE:FREQ=DAILY;INTERVAL=1;UNTIL=2026-04-10"
        assert _fmt(record) == "daily from April 1, 2026 to April 10, 2026"

    def test_explicit_start(self) -> None:
        record = "DTSTART:2026-04-01\nRRULE:FREQ=DAILY;INTERVAL=1"
        assert _fmt(record) == "daily starting April 1, 2026"

    def test_start_today_is_implied(self) -> None:
        assert _fmt("DTSTART:2026-03-01\nRRULE:FREQ=DAILY;INTERVAL=1") == "daily"

    def test_start_on_first_occurrence_is_implied(self) -> None:
        record = "DTSTART:2026-03-02\nRRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO"
        assert _fmt(record) == "every Mon"


class TestExceptions:
    def test_exception_rule(self) -> None:
        record = "RRULE:FREQ=DAILY;INTERVAL=1\nEXRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=SA,SU"
        assert _fmt(record) == "daily except every weekend"

    def test_whole_month(self) -> None:
        record = (
            "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO\n"
            "EXDATE:2026-07-06T10:00:00,2026-07-13T10:00:00,"
            "2026-07-20T10:00:00,2026-07-27T10:00:00"
        )
        assert _fmt(record) == "every Mon except in July"

    def test_whole_month_in_another_year(self) -> None:
        record = (
            "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO\n"
            "EXDATE:2027-07-05T10:00:00,2027-07-12T10:00:00,"
            "2027-07-19T10:00:00,2027-07-26T10:00:00"
        )
        assert _fmt(record) == "every Mon except in July 2027"

    def test_past_month_rolls_into_next_year(self) -> None:
        record = (
            "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO\n"
            "EXDATE:2027-01-04T10:00:00,2027-01-11T10:00:00,"
            "2027-01-18T10:00:00,2027-01-25T10:00:00"
        )
        assert _fmt(record) == "every Mon except in January"

    def test_partial_month_listed(self) -> None:
        record = (
            "RRULE:FREQ=WEEKLY;INTERVAL=1;BYDAY=MO\n"
            "EXDATE:2026-07-06T10:00:00,2026-07-13T10:00:00,2026-07-20T10:00:00"
        )
        assert _fmt(record) == (
            "every Mon except on July 6, 2026 at 10am and July 13, 2026 at 10am"
            " and July 20, 2026 at 10am"
        )

    def test_single_date(self) -> None:
        record = "RRULE:FREQ=DAILY;INTERVAL=1\nEXDATE:2026-03-05T10:00:00"
        assert _fmt(record) == "daily except on March 5, 2026 at 10am"


class TestPassThrough:
    def test_datetime(self) -> None:
        assert _fmt(datetime.datetime(2026, 5, 15)) == "May 15, 2026"

    def test_iso_string(self) -> None:
        assert _fmt("2026-03-05T15:00:00") == "March 5, 2026 at 3pm"

    def test_dtstart_only(self) -> None:
        assert _fmt("DTSTART:2026-05-15") == "May 15, 2026"

    @pytest.mark.parametrize("value, expected", [("hello", "hello"), (42, "42"), (None, "None")])
    def test_other_values(self, value: object, expected: str) -> None:
        assert _fmt(value) == expected


class TestRoundTrip:
    @pytest.mark.parametrize(
        "phrase",
        [
            "daily",
            "every Tue",
            "every other week on Tue",
            "every weekday",
            "the 1st and 15th of every month",
            "the 3rd Fri of every month",
            "every July 4th",
            "daily at 3pm",
            "every Mon twice",
            "every month on Mon and the 1st",
        ],
    )
    def test_phrase_survives(self, phrase: str) -> None:
        event = RecurringEvent(now=NOW)
        assert event.format(event.parse(phrase)) == phrase

    def test_weekday_and_month_day_keep_both(self) -> None:
        event = RecurringEvent(now=NOW)
        record = event.parse("every monday and the 1st")
        assert record == "RRULE:FREQ=MONTHLY;INTERVAL=1;BYDAY=MO;BYMONTHDAY=1"
        assert event.parse(event.format(record)) == record
