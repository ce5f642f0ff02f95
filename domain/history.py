from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List

from loguru import logger

from domain.dates import as_date, parse_iso_date
from domain.models import CompletedSession
from domain.time_ranges import DATE_MODES, in_range


TYPE_FILTERS = ["ALL", "BADMINTON", "GYM", "RECOVERY"]


@dataclass
class DayGroup:
    key: str                  # ISO date
    title: str                # "Today", "Yesterday", "Monday", ...
    subtitle: str             # "Jan 26"
    items: List[CompletedSession]


def filter_completed(
    items: Iterable[CompletedSession],
    date_mode: str,
    type_filter: str,
    now: date,
) -> List[CompletedSession]:
    """Sessions matching both filters. Records with a malformed date are skipped."""
    if date_mode not in DATE_MODES:
        raise ValueError(f"Unknown date mode: {date_mode}")

    out = []
    for s in items:
        if type_filter != "ALL" and s.type != type_filter:
            continue
        try:
            parse_iso_date(s.date_iso)
        except ValueError:
            logger.debug(f"Skipping session {s.id} with bad date {s.date_iso!r}")
            continue
        if in_range(s.date_iso, date_mode, now):
            out.append(s)
    return out


def human_day_label(d: date, today: date) -> str:
    diff = (as_date(today) - d).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Yesterday"
    return d.strftime("%A")


def group_by_day(items: Iterable[CompletedSession], today: date) -> List[DayGroup]:
    """
    Group sessions by date, newest day first.

    Order inside a day follows the input order.
    """
    buckets: Dict[str, List[CompletedSession]] = defaultdict(list)
    days: Dict[str, date] = {}
    for s in items:
        if s.date_iso not in days:
            try:
                days[s.date_iso] = parse_iso_date(s.date_iso)
            except ValueError:
                logger.debug(f"Skipping session {s.id} with bad date {s.date_iso!r}")
                continue
        buckets[s.date_iso].append(s)

    groups = []
    for key in sorted(buckets, reverse=True):
        d = days[key]
        groups.append(
            DayGroup(
                key=key,
                title=human_day_label(d, today),
                subtitle=f"{d.strftime('%b')} {d.day}",
                items=buckets[key],
            )
        )
    return groups


def format_hours_minutes(total_minutes: int) -> str:
    h, m = divmod(int(total_minutes), 60)
    if h <= 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"
