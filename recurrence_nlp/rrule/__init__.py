"""Canonical recurrence record and its expansion engine."""

from recurrence_nlp.rrule.expander import first_occurrence, iter_occurrences, occurrences_between
from recurrence_nlp.rrule.models import RecurrenceRecord, format_rule_params, parse_rule_params

__all__ = [
    "RecurrenceRecord",
    "first_occurrence",
    "format_rule_params",
    "iter_occurrences",
    "occurrences_between",
    "parse_rule_params",
]
