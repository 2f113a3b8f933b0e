"""Command-line entry point: ``recurrence-nlp PHRASE``."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys

from dateutil.parser import isoparse

from recurrence_nlp.config import settings
from recurrence_nlp.nlp import RecurringEvent

logger = logging.getLogger(__name__)

NOT_RECOGNIZED = "Not recognized: {phrase!r}"


def _parse_now(value: str) -> datetime.datetime:
    try:
        return isoparse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recurrence-nlp",
        description="Turn a recurrence phrase into a DTSTART/RRULE record, or back.",
    )
    parser.add_argument("phrase", nargs="+", help="phrase to parse (or record to format)")
    parser.add_argument(
        "--format",
        action="store_true",
        help="render a record or ISO timestamp back into English",
    )
    parser.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="reference time for relative phrases (ISO-8601)",
    )
    return parser


def run(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)
    # Records are newline separated; allow "\n" escapes on the command line.
    phrase = " ".join(args.phrase).replace("\\n", "\n")
    event = RecurringEvent(now=args.now)

    if args.format:
        print(event.format(phrase))
        return 0

    try:
        result = event.parse(phrase)
    except ValueError as exc:
        logger.debug("Parse of %r aborted: %s", phrase, exc)
        result = None

    if result is None:
        print(NOT_RECOGNIZED.format(phrase=phrase), file=sys.stderr)
        return 1
    if isinstance(result, datetime.datetime):
        print(result.isoformat(timespec="seconds"))
    else:
        print(result)
    return 0


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    try:
        status = run()
    except Exception:
        logger.exception("Unhandled error")
        status = 2
    sys.exit(status)


if __name__ == "__main__":
    main()
