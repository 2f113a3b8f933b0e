"""Resolution of exception specifiers against the occurrences of a rule."""

from __future__ import annotations

import datetime
import logging

from recurrence_nlp.config import settings
from recurrence_nlp.errors import ExpansionError
from recurrence_nlp.nlp.descriptor import ExceptionSpec, PartialMonth
from recurrence_nlp.rrule import iter_occurrences

logger = logging.getLogger(__name__)


def exception_sort_key(
    spec: ExceptionSpec,
    now: datetime.datetime,
    start: datetime.datetime | None = None,
) -> datetime.datetime:
    """Sort key of an exception: itself, its midnight, or the first day of a partial month.

    A partial month without a year falls in the reference year, or in the
    following one if the month has already gone by.
    """
    if isinstance(spec, datetime.datetime):
        return spec
    if isinstance(spec, datetime.date):
        return datetime.datetime.combine(spec, datetime.time())
    if spec.year is not None:
        return datetime.datetime(spec.year, spec.month, 1)
    reference = start or now
    year = reference.year + (1 if spec.month < reference.month else 0)
    return datetime.datetime(year, spec.month, 1)


class _Cursor:
    """One exception specifier being matched against the occurrence stream."""

    __slots__ = ("spec", "key", "year")

    def __init__(self, spec: ExceptionSpec, key: datetime.datetime) -> None:
        self.spec = spec
        self.key = key
        self.year = spec.year if isinstance(spec, PartialMonth) else None

    def matches(self, occurrence: datetime.datetime) -> bool:
        if isinstance(self.spec, datetime.datetime):
            return occurrence == self.spec
        if isinstance(self.spec, datetime.date):
            return occurrence.date() == self.spec
        if occurrence.month != self.spec.month:
            return False
        if self.year is None:
            self.year = occurrence.year
        return occurrence.year == self.year

    def passed(self, occurrence: datetime.datetime) -> bool:
        if isinstance(self.spec, datetime.datetime):
            return occurrence > self.spec
        if isinstance(self.spec, datetime.date):
            return occurrence.date() > self.spec
        year = self.year if self.year is not None else self.key.year
        return (occurrence.year, occurrence.month) > (year, self.spec.month)


def reconcile_exceptions(
    record_text: str,
    specs: list[ExceptionSpec],
    now: datetime.datetime,
    start: datetime.datetime | None = None,
    scan_limit: int | None = None,
) -> list[datetime.datetime]:
    """Return the concrete occurrences of *record_text* that *specs* exclude.

    Walks the occurrence stream and the sorted exceptions with two cursors
    and stops as soon as every exception is consumed. At most
    ``scan_limit`` occurrences are examined per exception, so an unbounded
    rule always terminates. Expansion failures yield an empty list.
    """
    if not specs:
        return []
    if scan_limit is None:
        scan_limit = settings.exception_scan_limit

    cursors = [
        _Cursor(spec, key)
        for key, spec in sorted(
            ((exception_sort_key(spec, now, start), spec) for spec in specs),
            key=lambda pair: pair[0],
        )
    ]
    budget = scan_limit * len(cursors)
    matched: list[datetime.datetime] = []
    index = 0

    try:
        for examined, occurrence in enumerate(iter_occurrences(record_text, now)):
            if examined >= budget:
                logger.warning("Gave up reconciling exceptions after %d occurrences", examined)
                break
            while index < len(cursors) and cursors[index].passed(occurrence):
                index += 1
            if index >= len(cursors):
                break
            if cursors[index].matches(occurrence):
                matched.append(occurrence)
    except ExpansionError as exc:
        logger.warning("Cannot reconcile exceptions for %r: %s", record_text, exc)
        return []

    return matched
