"""Training insights computed from completed sessions.

Every function here is a pure reducer over the records it is given plus an
explicit reference date. Nothing reads the clock and nothing is cached, so
the Insights screen simply recomputes on every rerun.

Records that cannot be bucketed (unknown session type, unparseable date) are
skipped rather than raised; callers are expected to have dropped them already.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List

from loguru import logger

from domain.dates import (
    add_days,
    as_date,
    monday_index,
    parse_iso_date,
    to_iso_date,
    week_days,
    within_inclusive,
)
from domain.models import SESSION_TYPES, CompletedSession, compute_load
from domain.time_ranges import resolve_range

NO_TITLE = "-"

HINT_EMPTY = "Log a completed session to see patterns."
HINT_RECOVERY = "You've trained a lot. Consider adding 1 recovery session."
HINT_ADD_GYM = "Nice badminton focus. Adding a gym day could boost stability and power."
HINT_ADD_BADMINTON = "Good gym consistency. Try adding a badminton session for skill work."
HINT_STEADY = "Keep it steady. Small consistency beats big spikes."

WEEKDAY_WINDOW_DAYS = 30

__all__ = [
    "TypeTotal",
    "RangeSummary",
    "Insights",
    "compute_load",
    "type_totals",
    "most_common_title",
    "compute_streak",
    "weekday_counts_last_n_days",
    "best_weekday",
    "best_type",
    "summarize_range",
    "balance_hint",
    "week_consistency",
    "build_insights",
]


@dataclass
class TypeTotal:
    count: int = 0
    minutes: int = 0
    load: float = 0


@dataclass(frozen=True)
class RangeSummary:
    total_sessions: int
    total_minutes: int
    total_load: float
    avg_minutes: float
    avg_load: float
    sessions_per_day: float


@dataclass
class Insights:
    summary: RangeSummary
    totals: Dict[str, TypeTotal]
    common_title: str
    streak: int
    weekday_counts: List[int]
    best_weekday: int
    best_type: str
    hint: str
    week: Dict[str, List[CompletedSession]] = field(default_factory=dict)


def type_totals(items: Iterable[CompletedSession]) -> Dict[str, TypeTotal]:
    totals = {t: TypeTotal() for t in SESSION_TYPES}

    for s in items:
        bucket = totals.get(s.type)
        if bucket is None:
            logger.debug(f"Skipping session {s.id} with unknown type {s.type!r}")
            continue
        bucket.count += 1
        bucket.minutes += s.duration_min
        bucket.load += compute_load(s.duration_min, s.rpe)

    return totals


def most_common_title(items: Iterable[CompletedSession]) -> str:
    # Counter keeps insertion order, and max() returns the first maximal
    # entry, so ties go to the title seen first.
    counts = Counter(s.title for s in items)
    if not counts:
        return NO_TITLE
    return max(counts.items(), key=lambda kv: kv[1])[0]


def compute_streak(all_completed: Iterable[CompletedSession], today: date) -> int:
    """Consecutive days with a session, ending today. 0 if today is empty."""
    days = {s.date_iso for s in all_completed}

    cursor = as_date(today)
    streak = 0
    while to_iso_date(cursor) in days:
        streak += 1
        cursor = add_days(cursor, -1)

    return streak


def weekday_counts_last_n_days(
    all_completed: Iterable[CompletedSession],
    n: int,
    now: date,
) -> List[int]:
    window = resolve_range(f"last-{n}", now)

    counts = [0] * 7
    for s in all_completed:
        if not within_inclusive(s.date_iso, window.start_iso, window.end_iso):
            continue
        try:
            idx = monday_index(parse_iso_date(s.date_iso))
        except ValueError:
            logger.debug(f"Skipping session {s.id} with bad date {s.date_iso!r}")
            continue
        counts[idx] += 1

    return counts


def best_weekday(counts: List[int]) -> int:
    best = 0
    for i in range(1, len(counts)):
        if counts[i] > counts[best]:
            best = i
    return best


def best_type(totals: Dict[str, TypeTotal]) -> str:
    best = SESSION_TYPES[0]
    for t in SESSION_TYPES[1:]:
        if totals[t].count > totals[best].count:
            best = t
    return best


def summarize_range(items: List[CompletedSession], day_count: int) -> RangeSummary:
    count = len(items)
    minutes = sum(s.duration_min for s in items)
    load = sum(compute_load(s.duration_min, s.rpe) for s in items)

    return RangeSummary(
        total_sessions=count,
        total_minutes=minutes,
        total_load=load,
        avg_minutes=minutes / max(count, 1),
        avg_load=load / max(count, 1),
        sessions_per_day=count / max(day_count, 1),
    )


def balance_hint(totals: Dict[str, TypeTotal], total_sessions: int) -> str:
    """Pick one fixed guidance line from the type mix. First match wins."""
    b = totals["BADMINTON"].count
    g = totals["GYM"].count
    r = totals["RECOVERY"].count

    if total_sessions == 0:
        return HINT_EMPTY
    if r == 0 and total_sessions >= 5:
        return HINT_RECOVERY
    if b > 0 and g == 0 and total_sessions >= 3:
        return HINT_ADD_GYM
    if g > 0 and b == 0 and total_sessions >= 3:
        return HINT_ADD_BADMINTON
    return HINT_STEADY


def week_consistency(
    all_completed: Iterable[CompletedSession],
    now: date,
) -> Dict[str, List[CompletedSession]]:
    """Sessions of each day of the current Monday-start week, by start time."""
    by_date: Dict[str, List[CompletedSession]] = {
        to_iso_date(d): [] for d in week_days(now)
    }
    for s in all_completed:
        if s.date_iso in by_date:
            by_date[s.date_iso].append(s)

    for items in by_date.values():
        items.sort(key=lambda s: s.start_time)
    return by_date


def build_insights(
    range_items: List[CompletedSession],
    all_completed: List[CompletedSession],
    day_count: int,
    now: date,
) -> Insights:
    # unknown types would count in the summary but not in any type bucket
    items = sorted(
        (s for s in range_items if s.type in SESSION_TYPES),
        key=lambda s: (s.date_iso, s.start_time),
    )

    totals = type_totals(items)
    summary = summarize_range(items, day_count)
    counts = weekday_counts_last_n_days(all_completed, WEEKDAY_WINDOW_DAYS, now)

    return Insights(
        summary=summary,
        totals=totals,
        common_title=most_common_title(items),
        streak=compute_streak(all_completed, now),
        weekday_counts=counts,
        best_weekday=best_weekday(counts),
        best_type=best_type(totals),
        hint=balance_hint(totals, summary.total_sessions),
        week=week_consistency(all_completed, now),
    )
