"""Recurrence descriptor accumulated while parsing one phrase, and its serializer."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field

from recurrence_nlp.rrule.models import RRULE_KEY_ORDER, RecurrenceRecord

FREQUENCIES = frozenset({"daily", "weekly", "monthly", "yearly", "hourly", "minutely", "secondly"})


@dataclass(frozen=True, slots=True)
class PartialMonth:
    """An exception given only as a month ("except in July"), optionally with a year."""

    month: int
    year: int | None = None


# A datetime excludes that exact occurrence; a date excludes every occurrence that day.
ExceptionSpec = datetime.datetime | datetime.date | PartialMonth


def _add_unique(values: list, *items: object) -> None:
    for item in items:
        if item not in values:
            values.append(item)


@dataclass
class RecurrenceDescriptor:
    """Mutable accumulator of frequency and BY* constraints."""

    frequency: str | None = None
    interval: int | None = None
    start: datetime.datetime | None = None
    until: datetime.datetime | None = None
    count: int | None = None
    weekdays: list[str] = field(default_factory=list)
    ordinal_weekdays: list[str] = field(default_factory=list)
    month_days: list[int] = field(default_factory=list)
    year_days: list[int] = field(default_factory=list)
    months: list[int] = field(default_factory=list)
    hours: list[int] = field(default_factory=list)
    minutes: list[int] = field(default_factory=list)
    week_numbers: list[int] = field(default_factory=list)
    set_positions: list[int] = field(default_factory=list)
    exception_rule: str | None = None
    exception_dates: list[ExceptionSpec] | None = None

    @property
    def is_recurring(self) -> bool:
        return self.frequency is not None

    def set_frequency(self, frequency: str) -> None:
        if frequency not in FREQUENCIES:
            raise ValueError(f"Unknown frequency: {frequency!r}")
        self.frequency = frequency

    def add_weekdays(self, *codes: str) -> None:
        _add_unique(self.weekdays, *codes)

    def add_ordinal_weekday(self, index: int, code: str) -> None:
        _add_unique(self.ordinal_weekdays, f"{index:+d}{code}")

    def add_month_days(self, *days: int) -> None:
        _add_unique(self.month_days, *days)

    def add_year_days(self, *days: int) -> None:
        _add_unique(self.year_days, *days)

    def add_months(self, *months: int) -> None:
        _add_unique(self.months, *months)

    def add_week_numbers(self, *weeks: int) -> None:
        _add_unique(self.week_numbers, *weeks)

    def add_set_positions(self, *positions: int) -> None:
        _add_unique(self.set_positions, *positions)

    def add_time(self, hour: int, minute: int) -> None:
        _add_unique(self.hours, hour)
        _add_unique(self.minutes, minute)

    def add_exception(self, spec: ExceptionSpec) -> None:
        if self.exception_dates is None:
            self.exception_dates = []
        _add_unique(self.exception_dates, spec)

    @property
    def has_partial_exceptions(self) -> bool:
        """True if some exception must be matched against generated occurrences."""
        return any(
            not isinstance(spec, datetime.datetime) for spec in self.exception_dates or ()
        )

    def rule_params(self) -> dict[str, str]:
        """Return the populated RRULE parameters in canonical key order."""
        values: dict[str, str] = {}
        if self.frequency is not None:
            values["FREQ"] = self.frequency.upper()
        if self.interval is not None:
            values["INTERVAL"] = str(self.interval)
        if self.ordinal_weekdays:
            values["BYDAY"] = ",".join(self.ordinal_weekdays)
        elif self.weekdays:
            values["BYDAY"] = ",".join(self.weekdays)
        for key, numbers in (
            ("BYMONTHDAY", self.month_days),
            ("BYYEARDAY", self.year_days),
            ("BYMONTH", self.months),
            ("BYHOUR", self.hours),
            ("BYMINUTE", self.minutes),
            ("BYSETPOS", self.set_positions),
            ("BYWEEKNO", self.week_numbers),
        ):
            if numbers:
                values[key] = ",".join(str(n) for n in numbers)
        if self.until is not None:
            values["UNTIL"] = f"{self.until:%Y-%m-%d}"
        elif self.count is not None:
            values["COUNT"] = str(self.count)
        return {key: values[key] for key in RRULE_KEY_ORDER if key in values}


def serialize(
    descriptor: RecurrenceDescriptor,
    exdates: list[datetime.datetime] | None = None,
) -> str | None:
    """Render *descriptor* as a canonical record, or ``None`` if it never got a frequency."""
    if not descriptor.is_recurring:
        return None
    record = RecurrenceRecord(
        dtstart=descriptor.start,
        rrule=descriptor.rule_params(),
        exrule=descriptor.exception_rule,
        exdate=exdates or [],
    )
    return record.to_text()
