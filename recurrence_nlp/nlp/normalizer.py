"""String-level rewrites applied before tokenization."""

from __future__ import annotations

import re

from recurrence_nlp.nlp import vocabulary as vocab

_RE_COMMA_YEAR = re.compile(r",\s*(\d{4})")
_RE_LONG_DATE_START = re.compile(rf"\b(?P<dow>{vocab.DOW}),\s*(?P<moy>{vocab.MONTH})\b")
_RE_COMMA_AND = re.compile(r",\s*and\b")
_RE_DISALLOWED = re.compile(r"[^\w\s./:-]")
_RE_SPACES = re.compile(r"\s+")

_RE_BEGIN_END_OF = re.compile(r"\b(?P<be>beginning|begin|start|ending|end)\s+of\b")
_RE_AT_BEGIN_END = re.compile(r"\bat(?:\s+the)?\s+(?P<be>beginning|begin|start|ending|end)\b")

_RE_THRU = re.compile(
    rf"\b(?P<first>{vocab.PLURAL_DOW}|{vocab.DOW})"
    rf"(?:-|\s+thru\s+|\s+through\s+)"
    rf"(?P<second>{vocab.PLURAL_DOW}|{vocab.DOW})\b"
)

_RE_ORD_UNIT = re.compile(
    rf"\b(?P<ord>{vocab.ORDINAL})\s+(?P<unit>(?:{vocab.DOW}|day|week|month|year)s?)\b"
)
_RE_TRIGGER = re.compile(rf"\b(?:{vocab.EVERY}|{vocab.OTHER}|{vocab.DAILY}|{vocab.RECURRING_UNIT})\b")
_RE_MONTH_NAME = re.compile(rf"\b(?:{vocab.MONTH})\b")

# Containing units, smallest first.
_UNIT_RANK = {"day": 0, "week": 1, "month": 2, "year": 3}

# Weekdays in the order ranges are walked.
_WEEKDAY_CYCLE = ("SU", "MO", "TU", "WE", "TH", "FR", "SA")


def normalize(s: str) -> str:
    """Lower-case, strip punctuation and rewrite commas."""
    s = s.strip().lower()
    s = _RE_COMMA_YEAR.sub(r" \1", s)
    s = _RE_LONG_DATE_START.sub(r"\g<dow> \g<moy>", s)
    s = _RE_COMMA_AND.sub(" and", s)
    s = s.replace(",", " and ")
    s = _RE_DISALLOWED.sub("", s)
    return _RE_SPACES.sub(" ", s).strip()


def handle_begin_end(s: str) -> str:
    """Rewrite "end of" / "at the beginning" idioms as ordinal phrases."""

    def _of(m: re.Match[str]) -> str:
        return "last of" if m.group("be").startswith("e") else "first of"

    def _at(m: re.Match[str]) -> str:
        return "on the last" if m.group("be").startswith("e") else "on the first"

    s = _RE_BEGIN_END_OF.sub(_of, s)
    return _RE_AT_BEGIN_END.sub(_at, s)


def expand_weekday_ranges(s: str) -> str:
    """Expand "mon-wed" / "monday through wednesday" into an explicit list."""

    def _expand(m: re.Match[str]) -> str:
        first_word, second_word = m.group("first"), m.group("second")
        first = vocab.get_weekday_codes(first_word)[0]
        last = vocab.get_weekday_codes(second_word)[0]
        plural = first_word in vocab.PLURAL_DOW.split("|")
        start = _WEEKDAY_CYCLE.index(first)
        days: list[str] = []
        for offset in range(len(_WEEKDAY_CYCLE)):
            code = _WEEKDAY_CYCLE[(start + offset) % len(_WEEKDAY_CYCLE)]
            days.append(code)
            if code == last:
                break
        names = [vocab.FULL_DAY_NAMES[code] + ("s" if plural else "") for code in days]
        return " and ".join(names)

    return _RE_THRU.sub(_expand, s)


def _mentions_larger_unit(s: str, unit: str, span: tuple[int, int]) -> bool:
    """True if *s*, outside *span*, names a unit larger than *unit* or a month."""
    rest = s[: span[0]] + " " + s[span[1] :]
    rank = _UNIT_RANK[unit]
    for larger, larger_rank in _UNIT_RANK.items():
        if larger_rank > rank and re.search(rf"\b{larger}s?\b", rest):
            return True
    return unit == "day" and _RE_MONTH_NAME.search(rest) is not None


def disambiguate_ordinal_units(s: str) -> str:
    """Decide what "Nth day/week/month/year" means from the rest of the phrase.

    With a containing unit nearby the ordinal selects within it and the text
    is kept ("2nd day of the month"). Under a recurrence trigger a positive
    ordinal becomes an interval ("every 3rd week" -> "every 3 weeks"). Without
    either, "Nth day" selects a day of the week.
    """
    triggered = _RE_TRIGGER.search(s) is not None

    def _rewrite(m: re.Match[str]) -> str:
        unit = m.group("unit").removesuffix("s")
        if unit not in _UNIT_RANK:
            return m.group(0)
        if _mentions_larger_unit(s, unit, m.span()):
            return m.group(0)
        index = vocab.get_ordinal_index(m.group("ord"))
        if triggered:
            if index < 1:
                return m.group(0)
            return f"{index} {unit}s"
        if unit == "day":
            return f"{m.group('ord')} day of the week"
        return m.group(0)

    return _RE_ORD_UNIT.sub(_rewrite, s)
