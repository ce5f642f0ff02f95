# time_ranges.py

from dataclasses import dataclass
from datetime import date
import calendar
import re
from typing import Final, List, Optional, Tuple

from domain.dates import (
    add_days,
    as_date,
    parse_iso_date,
    start_of_week_monday,
    to_iso_date,
)


ALL_TIME_START: Final[str] = "0001-01-01"
ALL_TIME_END: Final[str] = "9999-12-31"

# Filter modes used by the log screen
DATE_MODES: Final[List[str]] = [
    "THIS_WEEK",
    "LAST_7",
    "THIS_MONTH",
    "ALL_TIME",
]

_LAST_N = re.compile(r"^(?:last-(\d+)|(\d+)d)$")


@dataclass(frozen=True)
class ResolvedRange:
    start_iso: str
    end_iso: str
    day_count: int


def _week_bounds(d: date) -> Tuple[date, date]:
    """
    Return (monday, sunday) for the week containing date d.
    """
    monday = start_of_week_monday(d)
    sunday = add_days(monday, 6)
    return monday, sunday


def _month_bounds(d: date) -> Tuple[date, date]:
    """
    Return first and last day of the calendar month containing date d.
    """
    first_day = d.replace(day=1)
    last_day = d.replace(
        day=calendar.monthrange(d.year, d.month)[1]
    )
    return first_day, last_day


def _span(start: date, end: date) -> ResolvedRange:
    return ResolvedRange(
        start_iso=to_iso_date(start),
        end_iso=to_iso_date(end),
        day_count=(end - start).days + 1,
    )


def resolve_range(
    kind: str,
    now: date,
    custom_start: Optional[str] = None,
    custom_end: Optional[str] = None,
) -> ResolvedRange:
    """
    Resolve a symbolic range into an inclusive (start_iso, end_iso) window.

    kind: "last-N" (or "Nd"), "this-week", "this-month", "all-time", "custom"
    now: reference instant; only its local date is used

    A custom range is not checked for start <= end here. Callers run
    custom_range_error() first and show the message instead.
    """
    today = as_date(now)
    kind = kind.lower()

    # -----------------------------
    # LAST N DAYS (today inclusive)
    # -----------------------------
    m = _LAST_N.match(kind)
    if m:
        n = int(m.group(1) or m.group(2))
        if n < 1:
            raise ValueError(f"Range must cover at least one day: {kind}")
        return ResolvedRange(
            start_iso=to_iso_date(add_days(today, -(n - 1))),
            end_iso=to_iso_date(today),
            day_count=n,
        )

    # -----------------------------
    # CUSTOM
    # -----------------------------
    if kind == "custom":
        if not custom_start or not custom_end:
            raise ValueError("Custom range needs both a start and an end date")
        return _span(parse_iso_date(custom_start), parse_iso_date(custom_end))

    # -----------------------------
    # THIS WEEK (Mon–Sun)
    # -----------------------------
    if kind == "this-week":
        return _span(*_week_bounds(today))

    # -----------------------------
    # THIS MONTH (calendar month)
    # -----------------------------
    if kind == "this-month":
        return _span(*_month_bounds(today))

    if kind == "all-time":
        return _span(parse_iso_date(ALL_TIME_START), parse_iso_date(ALL_TIME_END))

    raise ValueError(f"Unknown range kind: {kind}")


def custom_range_error(
    custom_start: Optional[str],
    custom_end: Optional[str],
) -> Optional[str]:
    """Message to show for an unusable custom range, or None if it is fine."""
    if not custom_start or not custom_end:
        return "Pick both a start and an end date."
    if custom_start > custom_end:
        return "Custom range is invalid: start date must be on or before end date."
    return None


def in_range(date_iso: str, mode: str, now: date) -> bool:
    """
    Classify an ISO date against a named window relative to now.

    LAST_7 only checks the lower bound; future dates count as inside.
    """
    if mode == "ALL_TIME":
        return True

    today = as_date(now)
    d = parse_iso_date(date_iso)

    if mode == "LAST_7":
        return d >= add_days(today, -6)

    if mode == "THIS_MONTH":
        return d.year == today.year and d.month == today.month

    if mode == "THIS_WEEK":
        monday, sunday = _week_bounds(today)
        return monday <= d <= sunday

    raise ValueError(f"Unknown date mode: {mode}")
