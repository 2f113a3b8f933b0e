"""Expansion of canonical records into occurrences via dateutil."""

from __future__ import annotations

import datetime
from collections.abc import Iterator

from dateutil.rrule import rrule, rruleset, rrulestr

from recurrence_nlp.errors import ExpansionError


def _build(record_text: str, dtstart: datetime.datetime) -> rrule | rruleset:
    """Build a dateutil rule; a DTSTART line in the record overrides *dtstart*."""
    try:
        return rrulestr(record_text, dtstart=dtstart)
    except (ValueError, TypeError, KeyError, IndexError) as exc:
        raise ExpansionError(record_text, str(exc)) from exc


def _guarded(record_text: str, rule: rrule | rruleset) -> Iterator[datetime.datetime]:
    try:
        yield from rule
    except (ValueError, OverflowError) as exc:
        raise ExpansionError(record_text, str(exc)) from exc


def iter_occurrences(record_text: str, dtstart: datetime.datetime) -> Iterator[datetime.datetime]:
    """Return the lazy, possibly infinite, occurrence stream of a record.

    Callers must bound their consumption: a rule without UNTIL or COUNT
    never ends.

    Raises:
        ExpansionError: If dateutil rejects the record.
    """
    return _guarded(record_text, _build(record_text, dtstart))


def first_occurrence(
    record_text: str,
    dtstart: datetime.datetime,
) -> datetime.datetime | None:
    """Return the first occurrence of a record, or ``None`` if it has none."""
    return next(iter_occurrences(record_text, dtstart), None)


def occurrences_between(
    record_text: str,
    dtstart: datetime.datetime,
    after: datetime.datetime,
    before: datetime.datetime,
) -> list[datetime.datetime]:
    """Return the occurrences in ``[after, before]``."""
    rule = _build(record_text, dtstart)
    try:
        return rule.between(after, before, inc=True)
    except (ValueError, OverflowError) as exc:
        raise ExpansionError(record_text, str(exc)) from exc
