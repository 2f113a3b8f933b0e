"""Word tokenizer with an ordered kind table."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import StrEnum

from recurrence_nlp.nlp import vocabulary as vocab

logger = logging.getLogger(__name__)


class TokenKind(StrEnum):
    """Token kinds, in classification priority order."""

    DAILY = "daily"
    EVERY = "every"
    THROUGH = "through"
    RECURRING_UNIT = "recurring_unit"
    ORDINAL = "ordinal"
    UNIT = "unit"
    NUMBER = "number"
    PLURAL_WEEKDAY = "plural_weekday"
    DAY_OF_WEEK = "day_of_week"
    MONTH_OF_YEAR = "month_of_year"
    INSTANCE_MARKER = "instance_marker"
    # Kinds below only disambiguate their neighbours.
    AMBIGUOUS_MODIFIER = "ambiguous_modifier"
    STARTING = "starting"
    ENDING = "ending"
    REPEAT = "repeat"
    SEPARATOR = "separator"
    TIME = "time"
    OTHER = "other"
    AM_PM = "am_pm"


CONTENT_KINDS = frozenset(
    {
        TokenKind.DAILY,
        TokenKind.EVERY,
        TokenKind.THROUGH,
        TokenKind.RECURRING_UNIT,
        TokenKind.ORDINAL,
        TokenKind.UNIT,
        TokenKind.NUMBER,
        TokenKind.PLURAL_WEEKDAY,
        TokenKind.DAY_OF_WEEK,
        TokenKind.MONTH_OF_YEAR,
        TokenKind.INSTANCE_MARKER,
    }
)

_KIND_PATTERNS: tuple[tuple[TokenKind, re.Pattern[str]], ...] = tuple(
    (kind, re.compile(pattern))
    for kind, pattern in (
        (TokenKind.DAILY, vocab.DAILY),
        (TokenKind.EVERY, vocab.EVERY),
        (TokenKind.THROUGH, vocab.THROUGH),
        (TokenKind.RECURRING_UNIT, vocab.RECURRING_UNIT),
        (TokenKind.ORDINAL, vocab.ORDINAL),
        (TokenKind.UNIT, vocab.UNIT),
        (TokenKind.NUMBER, vocab.NUMBER),
        (TokenKind.PLURAL_WEEKDAY, vocab.PLURAL_WEEKDAY),
        (TokenKind.DAY_OF_WEEK, vocab.DOW),
        (TokenKind.MONTH_OF_YEAR, vocab.MONTH),
        (TokenKind.INSTANCE_MARKER, vocab.INSTANCE),
        (TokenKind.AMBIGUOUS_MODIFIER, vocab.AMBIGUOUS_MODIFIER),
        (TokenKind.STARTING, vocab.STARTING),
        (TokenKind.ENDING, vocab.ENDING),
        (TokenKind.REPEAT, vocab.REPEAT),
        (TokenKind.SEPARATOR, vocab.SEPARATOR),
        (TokenKind.TIME, vocab.TIME),
        (TokenKind.OTHER, vocab.OTHER),
        (TokenKind.AM_PM, vocab.AM_PM),
    )
)


@dataclass(slots=True)
class Token:
    """One whitespace-delimited word and its kind (``None`` if unrecognized)."""

    text: str
    kind: TokenKind | None

    @property
    def is_content(self) -> bool:
        return self.kind in CONTENT_KINDS

    def __repr__(self) -> str:
        kind = self.kind.value if self.kind else None
        return f"<Token {self.text}: {kind}>"


def classify(word: str) -> TokenKind | None:
    """Return the first kind in priority order whose pattern matches the whole word."""
    for kind, regex in _KIND_PATTERNS:
        if regex.fullmatch(word):
            return kind
    return None


def tokenize(text: str) -> list[Token]:
    """Split *text* on spaces and classify each word."""
    tokens = [Token(word, classify(word)) for word in text.split(" ") if word]
    logger.debug("Tokenized %r: %s", text, tokens)
    return tokens


def merge_nth_to_last(tokens: list[Token]) -> list[Token]:
    """Fold "2nd to the last" into a single negative ordinal ("-2nd").

    Walks back from each "last" over ordinals, skipping non-content words,
    and stops at "and" or any other content token.
    """
    tokens = list(tokens)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.kind is TokenKind.ORDINAL and token.text == "last":
            merged = False
            j = i - 1
            while j >= 0:
                prev = tokens[j]
                if prev.kind is TokenKind.ORDINAL:
                    if not prev.text.startswith("-"):
                        tokens[j] = Token(f"-{prev.text}", TokenKind.ORDINAL)
                    merged = True
                elif prev.kind is TokenKind.SEPARATOR and prev.text == "and":
                    break
                elif prev.is_content:
                    break
                j -= 1
            if merged:
                del tokens[i]
                continue
        i += 1
    return tokens


def eat_times(tokens: list[Token]) -> list[Token]:
    """Drop bare numbers that are really an hour ("3 pm", "at 3")."""
    kept: list[Token] = []
    for i, token in enumerate(tokens):
        if token.kind is TokenKind.NUMBER:
            nxt = tokens[i + 1] if i + 1 < len(tokens) else None
            prev = tokens[i - 1] if i > 0 else None
            if nxt is not None and nxt.kind is TokenKind.AM_PM:
                continue
            if prev is not None and prev.kind is TokenKind.SEPARATOR and prev.text == "at":
                continue
        kept.append(token)
    return kept


def content_tokens(tokens: list[Token]) -> list[Token]:
    """Keep only the kinds the classifier reasons about."""
    return [token for token in tokens if token.is_content]
