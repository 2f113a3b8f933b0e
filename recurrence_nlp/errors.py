"""Exception types raised by the recurrence phrase pipeline."""


class RecurrenceError(Exception):
    """Base exception for recurrence parsing and expansion errors."""


class UnrecognizedTokenError(RecurrenceError, ValueError):
    """A token expected to encode a number, ordinal, weekday, month or unit does not."""

    def __init__(self, kind: str, token: str) -> None:
        self.kind = kind
        self.token = token
        super().__init__(f"Not a valid {kind}: {token!r}")


class ExpansionError(RecurrenceError):
    """The recurrence-expansion engine rejected a record."""

    def __init__(self, record: str, message: str) -> None:
        self.record = record
        self.message = message
        super().__init__(f"Cannot expand recurrence: {message}")
