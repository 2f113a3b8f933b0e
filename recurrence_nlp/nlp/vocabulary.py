"""English vocabulary of the recurrence grammar: patterns and token resolvers."""

from __future__ import annotations

import re

from recurrence_nlp.errors import UnrecognizedTokenError

# Weekday patterns in Monday-first order, with the codes each one selects.
_WEEKDAY_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (r"mon(?:day)?", ("MO",)),
    (r"tues?(?:day)?", ("TU",)),
    (r"we(?:dnes|nds|ns|des)day|wed", ("WE",)),
    (r"th(?:urs|ers)day|thur?s?", ("TH",)),
    (r"fri(?:day)?", ("FR",)),
    (r"sat(?:[ue]rday)?", ("SA",)),
    (r"sun(?:day)?", ("SU",)),
    (r"weekday", ("MO", "TU", "WE", "TH", "FR")),
    (r"weekend", ("SA", "SU")),
)
_RE_WEEKDAYS = [
    (re.compile(rf"(?:{pattern})s?"), codes) for pattern, codes in _WEEKDAY_PATTERNS
]

WEEKDAY_CODES = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")
WORKWEEK_CODES = ("MO", "TU", "WE", "TH", "FR")
WEEKEND_CODES = ("SA", "SU")

# "1st day of the week" is Sunday.
SUNDAY_FIRST_CODES = ("", "SU", "MO", "TU", "WE", "TH", "FR", "SA")

DAY_NAMES: dict[str, str] = {
    "MO": "Mon",
    "TU": "Tue",
    "WE": "Wed",
    "TH": "Thu",
    "FR": "Fri",
    "SA": "Sat",
    "SU": "Sun",
}

FULL_DAY_NAMES: dict[str, str] = {
    "MO": "monday",
    "TU": "tuesday",
    "WE": "wednesday",
    "TH": "thursday",
    "FR": "friday",
    "SA": "saturday",
    "SU": "sunday",
}

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_MONTH_PATTERNS = (
    r"jan(?:uary)?",
    r"feb(?:r?uary)?",
    r"mar(?:ch)?",
    r"apr(?:il)?",
    r"may",
    r"jun(?:e)?",
    r"jul(?:y)?",
    r"aug(?:ust)?",
    r"sept?(?:ember)?",
    r"oct(?:ober)?",
    r"nov(?:ember)?",
    r"dec(?:ember)?",
)
_RE_MONTHS = [re.compile(pattern) for pattern in _MONTH_PATTERNS]

# Unit words and the frequency each maps to; order matters for substring lookup.
_UNIT_FREQS: tuple[tuple[str, str], ...] = (
    ("day", "daily"),
    ("week", "weekly"),
    ("month", "monthly"),
    ("year", "yearly"),
    ("hour", "hourly"),
    ("minute", "minutely"),
    ("min", "minutely"),
    ("sec", "secondly"),
    ("seconds", "secondly"),
)

FREQ_UNITS: dict[str, str] = {
    "daily": "day",
    "weekly": "week",
    "monthly": "month",
    "yearly": "year",
    "hourly": "hour",
    "minutely": "minute",
    "secondly": "second",
}

ORDINAL_WORDS = (
    "first",
    "second",
    "third",
    "fourth",
    "fifth",
    "sixth",
    "seventh",
    "eighth",
    "ninth",
    "tenth",
)

NUMBER_WORDS = (
    "zero",
    "one",
    "two",
    "three",
    "four",
    "five",
    "six",
    "seven",
    "eight",
    "nine",
    "ten",
)

# --- Pattern fragments shared by the tokenizer and the clause extractor ---

DOW = "|".join(f"(?:{pattern})" for pattern, _codes in _WEEKDAY_PATTERNS)
PLURAL_DOW = "mondays|tuesdays|wednesdays|thursdays|fridays|saturdays|sundays"
PLURAL_WEEKDAY = f"weekdays|weekends|{PLURAL_DOW}"
MONTH = "|".join(f"(?:{pattern})" for pattern in _MONTH_PATTERNS)
UNIT = r"days?|weeks?|months?|years?|hours?|minutes?|mins?|secs?|seconds?"
ORDINAL = r"-?\d+(?:st|nd|rd|th)|-?(?:" + "|".join(ORDINAL_WORDS) + ")|last"
NUMBER = "(?:" + "|".join(NUMBER_WORDS) + r")|\d+"
DAILY = "daily|everyday"
EVERY = "every|each|once"
THROUGH = "through|thru"
RECURRING_UNIT = "(?:bi)?(?:weekly|monthly|yearly)"
INSTANCE = "instances?|occurrences?"
AMBIGUOUS_MODIFIER = "this|next|last"
STARTING = "start(?:s|ing)?"
ENDING = "(?:end|until)(?:s|ing)?"
REPEAT = "every|each|on|repeat(?:s|ing)?"
SEPARATOR = "from|to|through|thru|on|at|of|in|a|an|the|and|or|both"
OTHER = "other|alternate"
AM_PM = r"[ap]\.?m\.?|[ap]|o\.?clock"
TIME = (
    r"(?P<hour>\d{1,2})(?::?(?P<minute>\d{2}))?\s?"
    r"(?:(?P<mod>[ap]\.?m\.?|[ap])(?![a-z])|(?P<oclock>o\.?\s?clock))?"
)

RE_TIME = re.compile(rf"\b{TIME}")
RE_AT_TIME = re.compile(rf"\bat\s{TIME}")


def get_number(s: str) -> int:
    """Resolve a digit string or a number word ("zero".."ten").

    Raises:
        UnrecognizedTokenError: If *s* is neither.
    """
    if s.isdigit():
        return int(s)
    if s in NUMBER_WORDS:
        return NUMBER_WORDS.index(s)
    raise UnrecognizedTokenError("number", s)


def get_count(s: str) -> int:
    """Resolve a number used as an interval or a repeat count; zero is rejected.

    Raises:
        UnrecognizedTokenError: If *s* is not a number of at least one.
    """
    n = get_number(s)
    if n < 1:
        raise UnrecognizedTokenError("count", s)
    return n


def get_ordinal_index(s: str) -> int:
    """Resolve an ordinal to a signed index: 1 = first, -1 = last, -2 = 2nd to last.

    Raises:
        UnrecognizedTokenError: If *s* is not an ordinal or resolves to zero.
    """
    m = re.fullmatch(r"(-?\d+)(?:st|nd|rd|th)", s)
    if m:
        index = int(m.group(1))
    else:
        sign = -1 if s.startswith("-") else 1
        word = s.lstrip("-")
        if word == "last":
            index = -1
        elif word in ORDINAL_WORDS:
            index = sign * (ORDINAL_WORDS.index(word) + 1)
        else:
            raise UnrecognizedTokenError("ordinal", s)
    if index == 0:
        raise UnrecognizedTokenError("ordinal", s)
    return index


def get_weekday_codes(s: str) -> list[str]:
    """Return the weekday codes a day word selects ("weekdays" selects five).

    Raises:
        UnrecognizedTokenError: If *s* names no weekday.
    """
    for regex, codes in _RE_WEEKDAYS:
        if regex.fullmatch(s):
            return list(codes)
    raise UnrecognizedTokenError("weekday", s)


def get_month(s: str) -> int:
    """Return the month number (1-12) of a month name or abbreviation.

    Raises:
        UnrecognizedTokenError: If *s* names no month.
    """
    for index, regex in enumerate(_RE_MONTHS):
        if regex.fullmatch(s):
            return index + 1
    raise UnrecognizedTokenError("month", s)


def get_unit_freq(s: str) -> str:
    """Return the frequency a unit word maps to ("weeks" -> "weekly").

    Raises:
        UnrecognizedTokenError: If *s* contains no unit word.
    """
    for unit, freq in _UNIT_FREQS:
        if unit in s:
            return freq
    raise UnrecognizedTokenError("unit", s)


def get_unit(s: str) -> str:
    """Return the canonical singular unit of a unit word ("mins" -> "minute")."""
    return FREQ_UNITS[get_unit_freq(s)]


def weekday_from_index(index: int) -> str:
    """Map "Nth day of the week" to a weekday code (1 = Sunday).

    Raises:
        UnrecognizedTokenError: If *index* is outside 1..7.
    """
    if not 1 <= index <= 7:
        raise UnrecognizedTokenError("day of the week", str(index))
    return SUNDAY_FIRST_CODES[index]


def ordinal_text(n: int) -> str:
    """English ordinal for *n*: 1st, 2nd, 3rd, 4th, 11th, 21st; "last" for -1."""
    if n == -1:
        return "last"
    if n < 0:
        return f"{ordinal_text(-n)} to last"
    if 10 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
