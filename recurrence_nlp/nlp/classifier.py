"""Frequency and BY* field classification of an event clause."""

from __future__ import annotations

import logging
import re

from recurrence_nlp.nlp import normalizer
from recurrence_nlp.nlp import vocabulary as vocab
from recurrence_nlp.nlp.descriptor import RecurrenceDescriptor
from recurrence_nlp.nlp.tokenizer import (
    Token,
    TokenKind,
    content_tokens,
    eat_times,
    merge_nth_to_last,
    tokenize,
)

logger = logging.getLogger(__name__)

_RE_OTHER = re.compile(rf"\b(?:{vocab.OTHER})\b")
_RE_BI = re.compile(r"\bbi")

_WEEKDAY_KINDS = frozenset({TokenKind.DAY_OF_WEEK, TokenKind.PLURAL_WEEKDAY})

# Kinds that make a phrase a recurrence even when it ends in a year.
_TRIGGER_KINDS = frozenset(
    {TokenKind.DAILY, TokenKind.EVERY, TokenKind.RECURRING_UNIT, TokenKind.PLURAL_WEEKDAY}
)

# (selected unit, containing unit) -> descriptor field the ordinals fill.
_CONTAINED_FIELDS: dict[tuple[str, str], str] = {
    ("day", "week"): "weekdays",
    ("day", "month"): "month_days",
    ("day", "year"): "year_days",
    ("week", "year"): "week_numbers",
    ("month", "year"): "months",
}

# Unit an ordinal selects over when no containing unit follows.
_UNIT_FIELDS: dict[str, str] = {
    "week": "weekdays",
    "month": "month_days",
    "year": "year_days",
}


def prepare_tokens(event: str) -> list[Token]:
    """Run the string rewrites and token transforms, keeping content tokens only."""
    text = normalizer.expand_weekday_ranges(normalizer.disambiguate_ordinal_units(event))
    tokens = eat_times(merge_nth_to_last(tokenize(text)))
    return content_tokens(tokens)


def classify_event(event: str, descriptor: RecurrenceDescriptor) -> bool:
    """Fill *descriptor* from *event*; return ``True`` if it describes a recurrence."""
    tokens = prepare_tokens(event)
    if not tokens:
        return False
    kinds = {token.kind for token in tokens}
    if _is_year(tokens[-1]) and not kinds & _TRIGGER_KINDS:
        logger.debug("Explicit year in %r, not a recurrence", event)
        return False

    if TokenKind.DAILY in kinds:
        descriptor.set_frequency("daily")
        descriptor.interval = 1
        rule = "daily"
    elif TokenKind.PLURAL_WEEKDAY in kinds and TokenKind.ORDINAL not in kinds:
        _classify_plural_weekdays(event, tokens, descriptor)
        rule = "plural weekdays"
    elif TokenKind.EVERY in kinds or TokenKind.RECURRING_UNIT in kinds:
        descriptor.interval = 2 if _RE_OTHER.search(event) else 1
        _scan([t for t in tokens if t.kind is not TokenKind.EVERY], descriptor)
        rule = "scanner"
    elif _has_bare_unit(event, "month"):
        descriptor.set_frequency("monthly")
        _scan(tokens, descriptor)
        rule = "bare month"
    elif _has_bare_unit(event, "year"):
        descriptor.set_frequency("yearly")
        _scan(tokens, descriptor, plural_as_last=True)
        rule = "bare year"
    else:
        logger.debug("No recurrence in %r", event)
        return False

    logger.debug("Classified %r by %s rule: %s", event, rule, descriptor)
    return descriptor.is_recurring


def _classify_plural_weekdays(
    event: str,
    tokens: list[Token],
    descriptor: RecurrenceDescriptor,
) -> None:
    descriptor.set_frequency("weekly")
    words = {token.text for token in tokens if token.kind is TokenKind.PLURAL_WEEKDAY}
    if "weekdays" in words:
        descriptor.add_weekdays(*vocab.WORKWEEK_CODES)
    elif "weekends" in words:
        descriptor.add_weekdays(*vocab.WEEKEND_CODES)
    else:
        for word in re.findall(r"[a-z]+", event):
            if re.fullmatch(vocab.PLURAL_DOW, word) or re.fullmatch(vocab.DOW, word):
                descriptor.add_weekdays(*vocab.get_weekday_codes(word))

    if _RE_BI.search(event) or re.search(r"\bevery\s+other\b", event):
        descriptor.interval = 2
    else:
        numbers = [
            vocab.get_count(t.text)
            for t in tokens
            if t.kind is TokenKind.NUMBER and not _is_year(t)
        ]
        descriptor.interval = numbers[0] if numbers else 1


def _is_year(token: Token) -> bool:
    return token.kind is TokenKind.NUMBER and token.text.isdigit() and int(token.text) >= 1000


def _has_bare_unit(event: str, unit: str) -> bool:
    """True if *event* has the word *unit* not qualified by "this" or "next"."""
    words = event.split(" ")
    for i, word in enumerate(words):
        if word != unit:
            continue
        if i > 0 and words[i - 1] in ("this", "next"):
            continue
        return True
    return False


def _ordinal_run(tokens: list[Token], i: int) -> tuple[list[int], int]:
    """Collect consecutive ordinals from *tokens[i]* ("1st 3rd", "1st through 5th")."""
    ordinals: list[int] = []
    while i < len(tokens):
        token = tokens[i]
        if token.kind is TokenKind.ORDINAL:
            ordinals.append(vocab.get_ordinal_index(token.text))
            i += 1
        elif (
            token.kind is TokenKind.THROUGH
            and ordinals
            and i + 1 < len(tokens)
            and tokens[i + 1].kind is TokenKind.ORDINAL
        ):
            first = ordinals[-1]
            last = vocab.get_ordinal_index(tokens[i + 1].text)
            step = 1 if last >= first else -1
            ordinals.extend(n for n in range(first + step, last + step, step) if n != 0)
            i += 2
        else:
            break
    return ordinals, i


def _fill(descriptor: RecurrenceDescriptor, field_name: str, ordinals: list[int]) -> None:
    if field_name == "weekdays":
        descriptor.add_weekdays(*(vocab.weekday_from_index(n) for n in ordinals))
    elif field_name == "month_days":
        descriptor.add_month_days(*ordinals)
    elif field_name == "year_days":
        descriptor.add_year_days(*ordinals)
    elif field_name == "week_numbers":
        descriptor.add_week_numbers(*ordinals)
    elif field_name == "months":
        descriptor.add_months(*ordinals)


def _scan(
    tokens: list[Token],
    descriptor: RecurrenceDescriptor,
    *,
    plural_as_last: bool = False,
) -> None:
    """Left-to-right scan of content tokens with a little lookahead."""
    pending: list[int] = []
    has_month_name = any(t.kind is TokenKind.MONTH_OF_YEAR for t in tokens)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        kind = token.kind

        if kind is TokenKind.UNIT:
            unit = vocab.get_unit(token.text)
            j = i + 1
            numbers: list[int] = []
            while j < len(tokens) and tokens[j].kind is TokenKind.NUMBER:
                numbers.append(vocab.get_number(tokens[j].text))
                j += 1
            if unit in ("day", "week") and numbers:
                if unit == "day" and (has_month_name or descriptor.frequency == "monthly"):
                    descriptor.add_month_days(*numbers)
                    if descriptor.frequency is None and not has_month_name:
                        descriptor.set_frequency("monthly")
                elif unit == "day":
                    descriptor.add_year_days(*numbers)
                    descriptor.set_frequency("yearly")
                else:
                    descriptor.add_week_numbers(*numbers)
                    descriptor.set_frequency("yearly")
                i = j
                continue
            if not (unit == "day" and descriptor.frequency in ("weekly", "monthly", "yearly")):
                descriptor.set_frequency(vocab.get_unit_freq(token.text))
            i += 1

        elif kind is TokenKind.RECURRING_UNIT:
            descriptor.set_frequency(vocab.get_unit_freq(token.text))
            if token.text.startswith("bi"):
                descriptor.interval = 2
            i += 1

        elif kind is TokenKind.NUMBER:
            if not (i == len(tokens) - 1 and _is_year(token)):
                descriptor.interval = vocab.get_count(token.text)
            i += 1

        elif kind is TokenKind.ORDINAL:
            ordinals, i = _ordinal_run(tokens, i)
            i = _apply_ordinals(tokens, i, ordinals, descriptor, pending)

        elif kind in _WEEKDAY_KINDS:
            codes = vocab.get_weekday_codes(token.text)
            if plural_as_last and kind is TokenKind.PLURAL_WEEKDAY:
                for code in codes:
                    descriptor.add_ordinal_weekday(-1, code)
            else:
                descriptor.add_weekdays(*codes)
            i += 1

        elif kind is TokenKind.MONTH_OF_YEAR:
            descriptor.add_months(vocab.get_month(token.text))
            i += 1

        else:
            i += 1

    if pending:
        if descriptor.frequency == "yearly" and not descriptor.months:
            _fill(descriptor, "year_days", pending)
        elif descriptor.frequency == "weekly":
            _fill(descriptor, "weekdays", pending)
        else:
            _fill(descriptor, "month_days", pending)

    if descriptor.frequency is None:
        _infer_frequency(descriptor)


def _apply_ordinals(
    tokens: list[Token],
    i: int,
    ordinals: list[int],
    descriptor: RecurrenceDescriptor,
    pending: list[int],
) -> int:
    """Attach an ordinal run to whatever follows it; return the next index."""
    nxt = tokens[i] if i < len(tokens) else None
    if nxt is None:
        pending.extend(ordinals)
        return i

    if nxt.kind in _WEEKDAY_KINDS:
        while i < len(tokens) and tokens[i].kind in _WEEKDAY_KINDS:
            for code in vocab.get_weekday_codes(tokens[i].text):
                for n in ordinals:
                    descriptor.add_ordinal_weekday(n, code)
            i += 1
        return i

    if nxt.kind is TokenKind.NUMBER:
        descriptor.interval = vocab.get_count(nxt.text)
        pending.extend(ordinals)
        return i + 1

    if nxt.kind is TokenKind.INSTANCE_MARKER:
        descriptor.add_set_positions(*ordinals)
        return i + 1

    if nxt.kind is TokenKind.MONTH_OF_YEAR:
        # The month name itself is picked up on the next step.
        descriptor.add_month_days(*ordinals)
        return i

    if nxt.kind is TokenKind.UNIT:
        unit = vocab.get_unit(nxt.text)
        after = tokens[i + 1] if i + 1 < len(tokens) else None
        if after is not None and after.kind is TokenKind.UNIT:
            container = vocab.get_unit(after.text)
            field_name = _CONTAINED_FIELDS.get((unit, container))
            if field_name is not None:
                _fill(descriptor, field_name, ordinals)
                if descriptor.frequency is None:
                    descriptor.set_frequency(vocab.get_unit_freq(after.text))
                return i + 2
        if after is not None and after.kind is TokenKind.MONTH_OF_YEAR and unit == "day":
            _fill(descriptor, "month_days", ordinals)
            return i + 1
        field_name = _UNIT_FIELDS.get(unit)
        if field_name is not None:
            _fill(descriptor, field_name, ordinals)
            if descriptor.frequency is None:
                descriptor.set_frequency(vocab.get_unit_freq(nxt.text))
            return i + 1

    pending.extend(ordinals)
    return i


def _infer_frequency(descriptor: RecurrenceDescriptor) -> None:
    if descriptor.months or descriptor.week_numbers or descriptor.year_days:
        descriptor.set_frequency("yearly")
    elif descriptor.ordinal_weekdays or descriptor.month_days:
        descriptor.set_frequency("monthly")
    elif descriptor.weekdays:
        descriptor.set_frequency("weekly")
