"""Natural-language recurrence parser: phrase -> canonical record or date."""

from __future__ import annotations

import datetime
import logging
import re

import dateparser

from recurrence_nlp.config import settings
from recurrence_nlp.errors import ExpansionError
from recurrence_nlp.nlp import formatter
from recurrence_nlp.nlp import vocabulary as vocab
from recurrence_nlp.nlp.classifier import classify_event
from recurrence_nlp.nlp.date_math import add_units
from recurrence_nlp.nlp.descriptor import (
    ExceptionSpec,
    PartialMonth,
    RecurrenceDescriptor,
    serialize,
)
from recurrence_nlp.nlp.normalizer import handle_begin_end, normalize
from recurrence_nlp.nlp.reconciler import reconcile_exceptions
from recurrence_nlp.nlp.tokenizer import (
    TokenKind,
    content_tokens,
    eat_times,
    merge_nth_to_last,
    tokenize,
)
from recurrence_nlp.rrule import RecurrenceRecord, first_occurrence

logger = logging.getLogger(__name__)

# Words that open an event clause after a leading "starting <date>".
_EVENT_HEAD = rf"(?:{vocab.EVERY}|{vocab.DAILY}|{vocab.RECURRING_UNIT}|{vocab.PLURAL_WEEKDAY})"

_RE_EXCEPT = re.compile(r"^(?P<event>.*?)\s*\bexcept(?:\s+(?:for|on|in))?\s+(?P<except>.+)$")
_RE_FROM_TO = re.compile(
    r"^(?P<event>.+?)\s+from\s+(?P<starting>.+?)\s+(?:to|through|thru|until)\s+(?P<ending>.+)$"
)
_RE_START_EVENT = re.compile(
    rf"^start(?:s|ing)?\s+(?:on\s+|from\s+)?(?P<starting>.+?)\s+(?P<event>{_EVENT_HEAD}\b.*)$"
)
_RE_EVENT_START = re.compile(
    r"^(?P<event>.+?)\s+start(?:s|ing)?\s+(?:on\s+|from\s+)?(?P<starting>.+)$"
)
_RE_ENDING = re.compile(r"^(?P<other>.+?)\s+(?:end|until)(?:s|ing)?\s+(?:on\s+)?(?P<ending>.+)$")
_RE_COUNT = re.compile(
    r"^(?P<event>.*?)\s*(?:\b(?:for|up\s+to)\s+)?"
    rf"(?:\b(?P<twice>twice)|\b(?P<count>{vocab.NUMBER})\s*(?:x|times|occurrences?))\b"
    r"(?P<tail>.*)$"
)
_RE_SPAN_ONE = re.compile(
    r"^(?P<event>.+?)\s+for\s+(?:the\s+next\s+|a\s+|an\s+|one\s+)?(?P<unit>week|month|year)$"
)
_RE_SPAN = re.compile(
    rf"^(?P<event>.+?)\s+for\s+(?:the\s+next\s+)?(?P<count>{vocab.NUMBER})\s+"
    r"(?P<unit>(?:day|week|month|year)s?)$"
)
_RE_AND = re.compile(r"\s+and\s+")
_RE_DATE_FILLER = re.compile(r"^(?:(?:on|the)\s+)+")
_RE_EXCEPTION_FILLER = re.compile(r"^(?:(?:on|in|the)\s+)+")
_RE_PARTIAL_MONTH = re.compile(rf"^(?P<month>{vocab.MONTH})(?:\s+(?P<year>\d{{4}}))?$")
_RE_WEEKDAY_WORD = re.compile(rf"\b(?:{vocab.PLURAL_DOW}|{vocab.DOW})\b")
_RE_MONTH_WORD = re.compile(rf"\b(?:{vocab.MONTH})\b")

_SINGLETON_UNCHANGED = (
    [TokenKind.MONTH_OF_YEAR],
    [TokenKind.DAY_OF_WEEK, TokenKind.MONTH_OF_YEAR],
)


def _split_ending(text: str) -> tuple[str, str | None]:
    m = _RE_ENDING.match(text)
    if not m:
        return text, None
    return m.group("other"), m.group("ending")


def _split_count(text: str) -> tuple[str, int | None, tuple[str, int] | None]:
    """Peel "for 5 times" / "twice" / "for the next 3 weeks" off *text*."""
    m = _RE_COUNT.match(text)
    if m:
        count = 2 if m.group("twice") else vocab.get_count(m.group("count"))
        event = f"{m.group('event')} {m.group('tail')}".strip()
        return event, count, None
    m = _RE_SPAN_ONE.match(text)
    if m:
        return m.group("event"), None, (m.group("unit"), 1)
    m = _RE_SPAN.match(text)
    if m:
        return m.group("event"), None, (m.group("unit"), vocab.get_count(m.group("count")))
    return text, None, None


class RecurringEvent:
    """Parses phrases like "every other tuesday at 3pm except in july".

    One instance may parse many phrases; each ``parse`` call starts from an
    empty descriptor. ``now`` is the reference time for relative phrases and
    ``preferred_time_range`` the daytime window ambiguous hours are biased into.
    """

    def __init__(
        self,
        now: datetime.datetime | None = None,
        preferred_time_range: tuple[int, int] | None = None,
    ) -> None:
        if now is None:
            now = datetime.datetime.now()
        if preferred_time_range is None:
            preferred_time_range = (settings.preferred_start_hour, settings.preferred_end_hour)
        self.now = now
        self.preferred_time_range = preferred_time_range
        self.descriptor = RecurrenceDescriptor()
        self.is_recurring = False

    def _reset(self) -> None:
        self.descriptor = RecurrenceDescriptor()
        self.is_recurring = False

    def _child(self, now: datetime.datetime | None = None) -> RecurringEvent:
        return RecurringEvent(now or self.now, self.preferred_time_range)

    def parse(self, s: str | None) -> str | datetime.datetime | None:
        """Parse *s* into a record text, a single datetime, or ``None``.

        Raises:
            UnrecognizedTokenError: If a number or ordinal token cannot be resolved.
        """
        self._reset()
        if not s:
            return None
        s = handle_begin_end(normalize(s))
        if not s:
            return None

        event = self._extract_structure(s)
        if event is None:
            return None

        self.is_recurring = classify_event(event, self.descriptor)
        if self.is_recurring:
            time_of_day = self.extract_time(event)
            if time_of_day is not None:
                self.descriptor.add_time(*time_of_day)
            return self._serialize()
        return self.parse_date(event)

    def format(self, value: object) -> str:
        """Render a record text or a datetime back into English."""
        return formatter.format_recurrence(value, now=self.now)

    # --- Structural clauses ---

    def _extract_structure(self, s: str) -> str | None:
        """Peel the exception, start, end and count clauses; return the event clause."""
        s = self._extract_exceptions(s)
        if s is None:
            return None

        starting: str | None = None
        ending: str | None = None
        count: int | None = None
        span: tuple[str, int] | None = None

        m = _RE_FROM_TO.match(s)
        if m:
            event, starting, ending = m.group("event"), m.group("starting"), m.group("ending")
        else:
            m = _RE_START_EVENT.match(s) or _RE_EVENT_START.match(s)
            if m:
                event, starting = m.group("event"), m.group("starting")
                starting, ending = _split_ending(starting)
                starting, count, span = _split_count(starting)
            else:
                event = s
            if ending is None:
                event, ending = _split_ending(event)
            if ending is None and count is None and span is None:
                event, count, span = _split_count(event)

        descriptor = self.descriptor
        if starting is not None:
            descriptor.start = self.parse_date(starting)
            if descriptor.start is None:
                logger.warning("Cannot resolve start date %r", starting)
                return None
        if ending is not None:
            until = self.parse_date(ending)
            if until is None:
                logger.warning("Cannot resolve end date %r", ending)
                return None
            descriptor.until = self._order_until(until, ending)
        elif count is not None:
            descriptor.count = count
        elif span is not None:
            unit, n = span
            descriptor.until = add_units(descriptor.start or self.now, unit, n)
        return event.strip()

    def _order_until(self, until: datetime.datetime, phrase: str) -> datetime.datetime:
        """Move *until* past the start by whole units of the end phrase's granularity."""
        start = self.descriptor.start
        if start is None:
            return until
        if _RE_WEEKDAY_WORD.search(phrase):
            unit = "week"
        elif _RE_MONTH_WORD.search(phrase):
            unit = "year"
        else:
            unit = "month"
        while until <= start:
            until = add_units(until, unit)
        return until

    def _extract_exceptions(self, s: str) -> str | None:
        m = _RE_EXCEPT.match(s)
        if not m:
            return s
        clause = m.group("except")

        sub = self._child()
        result = sub.parse(clause)
        if sub.is_recurring and isinstance(result, str):
            self.descriptor.exception_rule = RecurrenceRecord.from_text(result).rule_body
            return m.group("event")

        for piece in _RE_AND.split(clause):
            spec = self._resolve_exception(piece)
            if spec is None:
                logger.warning("Cannot resolve exception %r", piece)
                return None
            self.descriptor.add_exception(spec)
        return m.group("event")

    def _resolve_exception(self, piece: str) -> ExceptionSpec | None:
        """A partial month, a calendar date, or an exact datetime if a time is given."""
        piece = _RE_EXCEPTION_FILLER.sub("", piece.strip())
        m = _RE_PARTIAL_MONTH.match(piece)
        if m:
            year = int(m.group("year")) if m.group("year") else None
            return PartialMonth(vocab.get_month(m.group("month")), year)
        date = self.parse_date(piece)
        if date is None or self.extract_time(piece) is not None:
            return date
        return date.date()

    # --- Time of day ---

    def get_hour(self, hour: int, mod: str | None = None) -> int:
        """Resolve an hour to 24-hour form.

        Without an am/pm marker, hours before the preferred daytime start are
        taken to mean the afternoon ("at 3" -> 15).
        """
        if mod:
            if mod.startswith("p"):
                return hour if hour == 12 else hour + 12
            return 0 if hour == 12 else hour
        if hour > 12 or hour == 0:
            return hour
        start, _end = self.preferred_time_range
        return hour + 12 if hour < start else hour

    def extract_time(self, text: str) -> tuple[int, int] | None:
        """Return the first definite (hour, minute) in *text*.

        A time is definite when it has a colon, an am/pm marker or "o'clock".
        """
        for regex in (vocab.RE_AT_TIME, vocab.RE_TIME):
            for m in regex.finditer(text):
                if ":" not in m.group(0) and not m.group("mod") and not m.group("oclock"):
                    continue
                hour = self.get_hour(int(m.group("hour")), m.group("mod"))
                minute = int(m.group("minute") or 0)
                if hour <= 23 and minute <= 59:
                    return hour, minute
        return None

    # --- Serialization ---

    def _serialize(self) -> str | None:
        descriptor = self.descriptor
        exdates: list[datetime.datetime] | None = None
        if descriptor.exception_dates:
            if descriptor.has_partial_exceptions:
                base = serialize(descriptor)
                if base is not None:
                    exdates = reconcile_exceptions(
                        base, descriptor.exception_dates, self.now, descriptor.start
                    )
            else:
                exdates = sorted(descriptor.exception_dates)
        return serialize(descriptor, exdates)

    # --- Absolute dates ---

    def parse_date(self, s: str) -> datetime.datetime | None:
        """Resolve a phrase naming one date: singleton phrasing first, then dateparser."""
        s = _RE_DATE_FILLER.sub("", s.strip())
        if not s:
            return None
        date = self.parse_singleton(s)
        if date is None:
            date = self._parse_fallback(s)
        return date

    def parse_singleton(self, s: str) -> datetime.datetime | None:
        """Resolve "3rd friday of may", "the 100th day", "2nd week 2027" to one date.

        The phrase is parsed as a yearly recurrence and its first occurrence
        from January 1st of the reference (or trailing explicit) year is taken.
        """
        tokens = content_tokens(eat_times(merge_nth_to_last(tokenize(s))))
        if not 2 <= len(tokens) <= 5:
            return None
        if tokens[0].kind is not TokenKind.ORDINAL or tokens[1].kind is TokenKind.ORDINAL:
            return None

        year = self.now.year
        phrase = s
        last = tokens[-1]
        if last.kind is TokenKind.NUMBER and last.text.isdigit() and int(last.text) >= 1000:
            year = int(last.text)
            tokens = tokens[:-1]
            phrase = " ".join(word for word in phrase.split(" ") if word != last.text)

        shape = [token.kind for token in tokens[1:]]
        if shape in _SINGLETON_UNCHANGED:
            pass
        elif shape == [TokenKind.UNIT] and vocab.get_unit(tokens[1].text) in ("week", "month"):
            phrase = f"{phrase} of the year"
        elif not shape or (shape == [TokenKind.UNIT] and vocab.get_unit(tokens[1].text) == "day"):
            phrase = f"{tokens[0].text} of the year"
        else:
            return None

        anchor = datetime.datetime(year, 1, 1)
        record = self._child(anchor).parse(f"every {phrase}")
        if not isinstance(record, str):
            return None
        try:
            date = first_occurrence(record, anchor)
        except ExpansionError as exc:
            logger.warning("Cannot resolve singleton date %r: %s", s, exc)
            return None
        if date is None:
            return None

        time_of_day = self.extract_time(s)
        if time_of_day is not None:
            date = date.replace(hour=time_of_day[0], minute=time_of_day[1])
        return date

    def _parse_fallback(self, s: str) -> datetime.datetime | None:
        try:
            return dateparser.parse(
                s,
                languages=settings.fallback_languages,
                settings={"RELATIVE_BASE": self.now, "PREFER_DATES_FROM": "future"},
            )
        except (ValueError, OverflowError) as exc:
            logger.warning("Fallback date parser failed on %r: %s", s, exc)
            return None
