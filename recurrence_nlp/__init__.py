"""Natural-language recurrence phrases to iCalendar-style records and back."""

from __future__ import annotations

import datetime

from recurrence_nlp.errors import ExpansionError, RecurrenceError, UnrecognizedTokenError
from recurrence_nlp.nlp import RecurringEvent
from recurrence_nlp.rrule import RecurrenceRecord

__all__ = [
    "ExpansionError",
    "RecurrenceError",
    "RecurrenceRecord",
    "RecurringEvent",
    "UnrecognizedTokenError",
    "format",
    "parse",
]


def parse(phrase: str, now: datetime.datetime | None = None) -> str | datetime.datetime | None:
    """Parse *phrase* into a record text, a single datetime, or ``None``."""
    return RecurringEvent(now).parse(phrase)


def format(value: object, now: datetime.datetime | None = None) -> str:  # noqa: A001
    """Render a record text or datetime back into English."""
    return RecurringEvent(now).format(value)
