"""Pydantic model for the canonical DTSTART/RRULE/EXRULE/EXDATE text record."""

from __future__ import annotations

import datetime

from dateutil.parser import isoparse
from pydantic import BaseModel, Field

# Order in which RRULE parameters are written.
RRULE_KEY_ORDER = (
    "FREQ",
    "INTERVAL",
    "BYDAY",
    "BYMONTHDAY",
    "BYYEARDAY",
    "BYMONTH",
    "BYHOUR",
    "BYMINUTE",
    "BYSETPOS",
    "BYWEEKNO",
    "UNTIL",
    "COUNT",
)


def parse_rule_params(body: str) -> dict[str, str]:
    """Split an ``RRULE`` body (``KEY=VALUE;KEY=VALUE``) into an ordered dict."""
    params: dict[str, str] = {}
    for part in body.removeprefix("RRULE:").split(";"):
        if "=" in part:
            key, val = part.split("=", 1)
            params[key.strip().upper()] = val.strip()
    return params


def format_rule_params(params: dict[str, str]) -> str:
    """Join rule parameters back into an ``RRULE`` body."""
    return ";".join(f"{key}={value}" for key, value in params.items())


class RecurrenceRecord(BaseModel):
    """A parsed canonical recurrence record."""

    dtstart: datetime.datetime | None = None
    rrule: dict[str, str] = Field(default_factory=dict)
    exrule: str | None = None
    exdate: list[datetime.datetime] = Field(default_factory=list)

    @property
    def is_recurring(self) -> bool:
        return "FREQ" in self.rrule

    @property
    def rule_body(self) -> str:
        return format_rule_params(self.rrule)

    @classmethod
    def from_text(cls, text: str) -> RecurrenceRecord:
        """Parse a newline-separated record.

        A line without a ``NAME:`` prefix is read as a bare rule body, which is
        how nested exception rules are stored.

        Raises:
            ValueError: If a DTSTART or EXDATE value is not an ISO-8601 date.
        """
        dtstart: datetime.datetime | None = None
        rrule: dict[str, str] = {}
        exrule: str | None = None
        exdate: list[datetime.datetime] = []

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            name, sep, value = line.partition(":")
            if not sep:
                rrule = parse_rule_params(line)
                continue
            name = name.split(";", 1)[0].strip().upper()
            if name == "DTSTART":
                dtstart = isoparse(value.strip())
            elif name == "RRULE":
                rrule = parse_rule_params(value)
            elif name == "EXRULE":
                exrule = value.strip()
            elif name == "EXDATE":
                exdate.extend(isoparse(v.strip()) for v in value.split(",") if v.strip())

        return cls(dtstart=dtstart, rrule=rrule, exrule=exrule, exdate=exdate)

    def to_text(self) -> str:
        """Render the record in its canonical line-oriented form."""
        lines: list[str] = []
        if self.dtstart is not None:
            lines.append(f"DTSTART:{self.dtstart:%Y-%m-%d}")
        lines.append(f"RRULE:{self.rule_body}")
        if self.exrule:
            lines.append(f"EXRULE:{self.exrule}")
        if self.exdate:
            lines.append("EXDATE:" + ",".join(d.isoformat(timespec="seconds") for d in self.exdate))
        return "\n".join(lines)

    def without_dtstart(self) -> RecurrenceRecord:
        return self.model_copy(update={"dtstart": None})

    def without_exceptions(self) -> RecurrenceRecord:
        return self.model_copy(update={"exrule": None, "exdate": []})
