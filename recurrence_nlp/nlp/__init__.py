"""Language pipeline: phrase normalization, classification, formatting."""

from recurrence_nlp.nlp.descriptor import PartialMonth, RecurrenceDescriptor
from recurrence_nlp.nlp.event_parser import RecurringEvent
from recurrence_nlp.nlp.formatter import format_date, format_recurrence
from recurrence_nlp.nlp.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "PartialMonth",
    "RecurrenceDescriptor",
    "RecurringEvent",
    "Token",
    "TokenKind",
    "format_date",
    "format_recurrence",
    "tokenize",
]
