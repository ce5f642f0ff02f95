# dates.py

import re
from datetime import date, datetime, timedelta
from typing import List

ISO_FORMAT = "%Y-%m-%d"
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def as_date(d: date) -> date:
    """Drop the time-of-day from a datetime; plain dates pass through."""
    if isinstance(d, datetime):
        return d.date()
    return d


def to_iso_date(d: date) -> str:
    """Format as YYYY-MM-DD from the local year/month/day (no UTC shift)."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_iso_date(value: str) -> date:
    """Strict YYYY-MM-DD. Unpadded months or days are rejected."""
    if not isinstance(value, str) or not _ISO_DATE.fullmatch(value):
        raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")
    return datetime.strptime(value, ISO_FORMAT).date()


def add_days(d: date, n: int) -> date:
    return d + timedelta(days=n)


def monday_index(d: date) -> int:
    """
    Weekday with Monday = 0 .. Sunday = 6.

    Same as (sunday_based_weekday + 6) % 7, which is what date.weekday()
    already returns.
    """
    return d.weekday()


def start_of_week_monday(d: date) -> date:
    """Monday at or before d, at midnight."""
    d = as_date(d)
    return add_days(d, -monday_index(d))


def week_days(d: date) -> List[date]:
    monday = start_of_week_monday(d)
    return [add_days(monday, i) for i in range(7)]


def within_inclusive(date_iso: str, start_iso: str, end_iso: str) -> bool:
    # zero-padded ISO dates sort lexicographically
    return start_iso <= date_iso <= end_iso


def week_start_iso(date_iso: str) -> str:
    return to_iso_date(start_of_week_monday(parse_iso_date(date_iso)))


def day_index_for(date_iso: str) -> int:
    return monday_index(parse_iso_date(date_iso))
