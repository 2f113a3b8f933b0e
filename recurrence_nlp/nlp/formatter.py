"""Render canonical recurrence records (or datetimes) as English phrases."""

from __future__ import annotations

import datetime
import logging
import re
from itertools import groupby

from dateutil.parser import isoparse

from recurrence_nlp.errors import ExpansionError
from recurrence_nlp.nlp import vocabulary as vocab
from recurrence_nlp.nlp.date_math import end_of_month, start_of_month
from recurrence_nlp.nlp.descriptor import PartialMonth
from recurrence_nlp.nlp.reconciler import exception_sort_key
from recurrence_nlp.rrule import RecurrenceRecord, first_occurrence, occurrences_between

logger = logging.getLogger(__name__)

_RE_ORDINAL_DAY = re.compile(r"^(?P<n>[+-]?\d+)(?P<code>[A-Z]{2})$")

_WORKWEEK = frozenset(vocab.WORKWEEK_CODES)
_WEEKEND = frozenset(vocab.WEEKEND_CODES)

# Fewest exception dates rendered as whole months.
_MIN_MONTH_EXDATES = 3


def _split_list(value: str | None) -> list[str]:
    return [v for v in (value or "").split(",") if v]


def _and(items: list[str]) -> str:
    return " and ".join(items)


def time_text(hour: int, minute: int = 0, second: int = 0) -> str:
    """12-hour clock text: ``3pm``, ``3:30pm``, ``12am``."""
    suffix = "am" if hour < 12 else "pm"
    hour12 = hour % 12 or 12
    if second:
        return f"{hour12}:{minute:02d}:{second:02d}{suffix}"
    if minute:
        return f"{hour12}:{minute:02d}{suffix}"
    return f"{hour12}{suffix}"


def format_date(dt: datetime.datetime) -> str:
    """``March 5, 2026``, with as much of the time as is non-zero."""
    text = f"{vocab.MONTH_NAMES[dt.month - 1]} {dt.day}, {dt.year}"
    if dt.hour or dt.minute or dt.second:
        text += f" at {time_text(dt.hour, dt.minute, dt.second)}"
    return text


def interval_text(unit: str, interval: int) -> str:
    if interval <= 1:
        return "daily" if unit == "day" else f"every {unit}"
    if interval == 2:
        return f"every other {unit}"
    return f"every {interval} {unit}s"


def weekdays_text(codes: list[str], *, singular: bool = False) -> str:
    """Weekday list, collapsing the exact workweek or weekend sets."""
    if len(codes) == len(_WORKWEEK) and set(codes) == _WORKWEEK:
        return "weekday" if singular else "weekdays"
    if len(codes) == len(_WEEKEND) and set(codes) == _WEEKEND:
        return "weekend" if singular else "weekends"
    return _and([vocab.DAY_NAMES[code] for code in codes])


def ordinal_weekdays_text(items: list[tuple[int, str]]) -> str:
    """``1st and 3rd Mon and last Fri``: consecutive same-day entries share the name."""
    parts = []
    for code, group in groupby(items, key=lambda item: item[1]):
        ordinals = _and([vocab.ordinal_text(n) for n, _code in group])
        parts.append(f"{ordinals} {vocab.DAY_NAMES[code]}")
    return _and(parts)


def _ordinals(values: list[str]) -> str:
    return _and([vocab.ordinal_text(int(v)) for v in values])


def _months(values: list[str]) -> str:
    return _and([vocab.MONTH_NAMES[int(v) - 1] for v in values])


class _RecordFormatter:
    """Builds the phrase for one recurring record."""

    def __init__(self, record: RecurrenceRecord, now: datetime.datetime) -> None:
        self.record = record
        self.now = now
        self.params = record.rrule
        self.freq = self.params["FREQ"].lower()
        self.unit = vocab.FREQ_UNITS.get(self.freq, "day")
        self.interval = int(self.params.get("INTERVAL", "1") or 1)
        self.weekdays: list[str] = []
        self.ordinal_weekdays: list[tuple[int, str]] = []
        for item in _split_list(self.params.get("BYDAY")):
            m = _RE_ORDINAL_DAY.match(item)
            if m:
                self.ordinal_weekdays.append((int(m.group("n")), m.group("code")))
            else:
                self.weekdays.append(item)
        self.month_days = _split_list(self.params.get("BYMONTHDAY"))
        self.year_days = _split_list(self.params.get("BYYEARDAY"))
        self.months = _split_list(self.params.get("BYMONTH"))
        self.week_numbers = _split_list(self.params.get("BYWEEKNO"))
        self.set_positions = _split_list(self.params.get("BYSETPOS"))

    def render(self) -> str:
        text = self._body()
        if self.set_positions:
            text = f"for the {_ordinals(self.set_positions)} instance of {text}"
        text += self._time()
        text += self._range()
        text += self._exceptions()
        return text

    # --- Frequency and BY* fields ---

    def _body(self) -> str:
        every = interval_text(self.unit, self.interval)
        if self.freq == "weekly":
            return self._weekly(every)
        if self.freq == "monthly":
            return self._monthly(every)
        if self.freq == "yearly":
            return self._yearly(every)
        if self.weekdays:
            return f"{every} on {weekdays_text(self.weekdays)}"
        return every

    def _weekly(self, every: str) -> str:
        if not self.weekdays:
            return every
        if self.interval <= 1:
            return f"every {weekdays_text(self.weekdays, singular=True)}"
        return f"{every} on {weekdays_text(self.weekdays)}"

    def _monthly(self, every: str) -> str:
        if self.month_days and self.weekdays:
            days = weekdays_text(self.weekdays)
            return f"{every} on {days} and the {_ordinals(self.month_days)}"
        if self.month_days:
            return f"the {_ordinals(self.month_days)} of {every}"
        if self.ordinal_weekdays:
            return f"the {ordinal_weekdays_text(self.ordinal_weekdays)} of {every}"
        if self.weekdays:
            return f"{every} on {weekdays_text(self.weekdays)}"
        return every

    def _yearly(self, every: str) -> str:
        if self.months and self.month_days:
            if self.interval <= 1:
                return f"every {_months(self.months)} {_ordinals(self.month_days)}"
            return f"{every} on {_months(self.months)} {_ordinals(self.month_days)}"
        if self.months and self.ordinal_weekdays:
            days = ordinal_weekdays_text(self.ordinal_weekdays)
            if self.interval <= 1:
                return f"the {days} of every {_months(self.months)}"
            return f"the {days} of {_months(self.months)} {every}"
        if self.year_days:
            return f"the {_ordinals(self.year_days)} day of {every}"
        if self.week_numbers:
            weeks = f"week {_and(self.week_numbers)}"
            if self.weekdays:
                return f"{every} on {weekdays_text(self.weekdays)} of {weeks}"
            return f"{every} on {weeks}"
        if self.months:
            if self.weekdays:
                days = weekdays_text(self.weekdays)
                if self.interval <= 1:
                    return f"every {days} in {_months(self.months)}"
                return f"{every} on {days} in {_months(self.months)}"
            return f"{every} in {_months(self.months)}"
        return every

    # --- Suffixes ---

    def _time(self) -> str:
        hours = _split_list(self.params.get("BYHOUR"))
        if not hours:
            return ""
        minutes = _split_list(self.params.get("BYMINUTE")) or ["0"]
        times = [time_text(int(hour), int(minutes[0])) for hour in hours]
        return f" at {_and(times)}"

    def _start_is_implied(self) -> bool:
        """True if dropping DTSTART leaves the first occurrence unchanged."""
        dtstart = self.record.dtstart
        if dtstart is None or dtstart.date() == self.now.date():
            return True
        base = self.record.without_exceptions()
        try:
            with_start = first_occurrence(base.to_text(), self.now)
            without_start = first_occurrence(base.without_dtstart().to_text(), self.now)
        except ExpansionError as exc:
            logger.warning("Cannot expand %r: %s", base.to_text(), exc)
            return False
        if with_start is None or without_start is None:
            return False
        return with_start.date() == without_start.date()

    def _range(self) -> str:
        dtstart = self.record.dtstart
        until = self.params.get("UNTIL")
        count = self.params.get("COUNT")
        until_date = isoparse(until) if until else None

        if dtstart is not None and until_date is not None:
            return f" from {format_date(dtstart)} to {format_date(until_date)}"

        text = ""
        if dtstart is not None and not self._start_is_implied():
            text += f" starting {format_date(dtstart)}"
        if until_date is not None:
            text += f" until {format_date(until_date)}"
        elif count:
            text += " twice" if count == "2" else f" for {count} times"
        return text

    def _exceptions(self) -> str:
        if self.record.exrule:
            nested = RecurrenceRecord(rrule=_parse_body(self.record.exrule))
            return f" except {_RecordFormatter(nested, self.now).render()}"
        exdates = self.record.exdate
        if not exdates:
            return ""
        months = self._tiled_months(exdates)
        if months:
            return f" except in {_and([self._month_text(year, month) for year, month in months])}"
        return f" except on {_and([format_date(d) for d in exdates])}"

    def _month_text(self, year: int, month: int) -> str:
        """Month name, with its year unless a bare month would resolve to that year."""
        name = vocab.MONTH_NAMES[month - 1]
        implied = exception_sort_key(PartialMonth(month), self.now, self.record.dtstart)
        return name if implied.year == year else f"{name} {year}"

    def _tiled_months(self, exdates: list[datetime.datetime]) -> list[tuple[int, int]]:
        """The (year, month) pairs *exdates* cover entirely, or ``[]`` if they don't."""
        if len(exdates) < _MIN_MONTH_EXDATES:
            return []
        base = self.record.without_exceptions().to_text()
        excluded = set(exdates)
        months = sorted({(d.year, d.month) for d in exdates})
        covered: set[datetime.datetime] = set()
        for year, month in months:
            first = datetime.datetime(year, month, 1)
            try:
                occurrences = occurrences_between(
                    base, self.now, start_of_month(first), end_of_month(first)
                )
            except ExpansionError as exc:
                logger.warning("Cannot expand %r: %s", base, exc)
                return []
            if not occurrences or not set(occurrences) <= excluded:
                return []
            covered.update(occurrences)
        return months if covered == excluded else []


def _parse_body(body: str) -> dict[str, str]:
    return RecurrenceRecord.from_text(body).rrule


def format_recurrence(value: object, now: datetime.datetime | None = None) -> str:
    """Render a record text, or a datetime, as English.

    Anything that is neither is returned stringified and unchanged.
    """
    if now is None:
        now = datetime.datetime.now()
    if isinstance(value, datetime.datetime):
        return format_date(value)
    if not isinstance(value, str):
        return str(value)

    text = value.strip()
    if "=" not in text and not text.upper().startswith("DTSTART"):
        try:
            return format_date(isoparse(text))
        except ValueError:
            return value

    try:
        record = RecurrenceRecord.from_text(value)
    except ValueError:
        logger.warning("Cannot read recurrence record %r", value)
        return value
    if not record.is_recurring:
        if record.dtstart is not None:
            return format_date(record.dtstart)
        return value
    return _RecordFormatter(record, now).render()
