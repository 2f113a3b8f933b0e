"""Calendar arithmetic on naive datetimes."""

from __future__ import annotations

import calendar
import datetime


def _shift_months(dt: datetime.datetime, months: int) -> datetime.datetime:
    # Jan 31 + 1 month is Feb 28 (or 29); Feb 29 + 12 months is Feb 28.
    year, month0 = divmod(dt.year * 12 + dt.month - 1 + months, 12)
    day = min(dt.day, calendar.monthrange(year, month0 + 1)[1])
    return dt.replace(year=year, month=month0 + 1, day=day)


def add_units(dt: datetime.datetime, unit: str, count: int = 1) -> datetime.datetime:
    """Add *count* calendar units (``day``, ``week``, ``month`` or ``year``).

    Month and year steps keep the day of month where it exists and clamp it
    to the month's last day otherwise.
    """
    unit = unit.removesuffix("s")
    if unit == "year":
        return _shift_months(dt, 12 * count)
    if unit == "month":
        return _shift_months(dt, count)
    if unit == "week":
        return dt + datetime.timedelta(weeks=count)
    if unit == "day":
        return dt + datetime.timedelta(days=count)
    raise ValueError(f"Unsupported calendar unit: {unit!r}")


def start_of_month(dt: datetime.datetime) -> datetime.datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(dt: datetime.datetime) -> datetime.datetime:
    last_day = calendar.monthrange(dt.year, dt.month)[1]
    return dt.replace(day=last_day, hour=23, minute=59, second=59, microsecond=0)
