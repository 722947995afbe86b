"""
Date and time helpers.

Two clocks are in play:
- Audit timestamps (created_at/updated_at) are naive UTC.
- Match and pick dates are naive server-local datetimes, so "today" is the
  server's local calendar day. `local_day_bounds()` is the single definition
  of that window and is shared by upload counting and the today's-matches
  query.
"""
import numbers
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional, Tuple

import pandas as pd

# Day zero of the Excel 1900 date system (accounts for the 1900 leap-year bug)
EXCEL_EPOCH = datetime(1899, 12, 30)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (database convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Half-open [start, end) window covering the local calendar day of `now`.

    Examples:
        >>> local_day_bounds(datetime(2025, 1, 29, 15, 45))
        (datetime.datetime(2025, 1, 29, 0, 0), datetime.datetime(2025, 1, 30, 0, 0))
    """
    now = now or datetime.now()
    start = datetime.combine(now.date(), time.min)
    return start, start + timedelta(days=1)


def is_in_local_day(value: datetime, now: Optional[datetime] = None) -> bool:
    start, end = local_day_bounds(now)
    return start <= value < end


def parse_match_date(value: Any) -> datetime:
    """
    Parse a spreadsheet or JSON date cell into a naive local datetime.

    Accepts datetime/date objects, pandas Timestamps, ISO-like strings
    (with or without an offset) and Excel serial day numbers. Values carrying
    a timezone are converted to server-local time before the offset is
    dropped. Date-only values resolve to local midnight.

    Raises:
        ValueError: if the value cannot be interpreted as a date
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("empty date")

    if isinstance(value, bool):
        raise ValueError(f"not a date: {value!r}")

    if isinstance(value, numbers.Real):
        try:
            return EXCEL_EPOCH + timedelta(days=float(value))
        except (OverflowError, ValueError) as e:
            raise ValueError(f"date serial out of range: {value!r}") from e

    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)

    if isinstance(value, str):
        value = value.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"

    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"not a date: {value!r}") from e

    if pd.isna(parsed):
        raise ValueError(f"not a date: {value!r}")

    if parsed.tzinfo is not None:
        local_tz = datetime.now().astimezone().tzinfo
        parsed = parsed.tz_convert(local_tz).tz_localize(None)

    return parsed.to_pydatetime()


def parse_filter_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a `dateFrom`/`dateTo` query value.

    A date-only upper bound covers the whole day so that the range stays
    inclusive for picks logged during that day.
    """
    if not value:
        return None
    parsed = parse_match_date(value)
    if end_of_day and len(value.strip()) <= 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return parsed
