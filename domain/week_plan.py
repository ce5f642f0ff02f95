import re
import uuid as uuidlib
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from domain.models import CompletedSession, PlannedSession, Template


DEFAULT_START_TIME = "18:00"

_HHMM = re.compile(r"([01]\d|2[0-3]):[0-5]\d")

_DEFAULT_TITLES = {
    "BADMINTON": "Badminton Session",
    "GYM": "Gym Workout",
    "RECOVERY": "Recovery",
}


def sessions_by_day(sessions: Iterable[PlannedSession]) -> Dict[int, List[PlannedSession]]:
    """
    Bucket planned sessions into weekday slots 0 (Mon) .. 6 (Sun).

    Sessions with a day_index outside that range are dropped.
    """
    days: Dict[int, List[PlannedSession]] = {i: [] for i in range(7)}

    for s in sessions:
        if s.day_index < 0 or s.day_index > 6:
            continue
        days[s.day_index].append(s)

    for items in days.values():
        items.sort(key=lambda s: s.start_time)
    return days


def add_minutes_hhmm(hhmm: str, minutes: int) -> str:
    h, m = (int(x) for x in hhmm.split(":"))
    total = (h * 60 + m + minutes) % 1440
    return f"{total // 60:02d}:{total % 60:02d}"


def next_free_time(
    day_sessions: Iterable[PlannedSession],
    base: str = DEFAULT_START_TIME,
) -> str:
    """First hourly slot from base not taken on that day."""
    used = {s.start_time for s in day_sessions}
    t = base

    for _ in range(24):
        if t not in used:
            return t
        t = add_minutes_hhmm(t, 60)

    # every hour taken
    return base


def is_hhmm(value: str) -> bool:
    """24-hour zero-padded "HH:MM"."""
    return isinstance(value, str) and _HHMM.fullmatch(value) is not None


def default_title(session_type: str) -> str:
    return _DEFAULT_TITLES.get(session_type, "Session")


def new_planned_session(
    session_type: str,
    title: str,
    day_index: int,
    start_time: str,
    duration_min: int,
    rpe_planned: int,
) -> PlannedSession:
    title = title.strip()
    if not title:
        raise ValueError("A planned session needs a title")
    if day_index < 0 or day_index > 6:
        raise ValueError(f"day_index must be 0..6, got {day_index}")
    if not is_hhmm(start_time):
        raise ValueError(f"start_time must be HH:MM (24-hour), got {start_time!r}")

    return PlannedSession(
        id=str(uuidlib.uuid4()),
        type=session_type,
        title=title,
        day_index=day_index,
        start_time=start_time,
        duration_min=duration_min,
        rpe_planned=rpe_planned,
    )


def apply_template(draft: PlannedSession, template: Template) -> PlannedSession:
    return replace(
        draft,
        type=template.type,
        title=template.title,
        duration_min=template.duration_min,
        rpe_planned=template.rpe_default,
    )


def complete_planned(
    session: PlannedSession,
    date_iso: str,
    duration_min: int,
    rpe: int,
    notes: Optional[str] = None,
) -> CompletedSession:
    """Build the log entry for a planned session. Type and title are copied."""
    notes = (notes or "").strip()

    return CompletedSession(
        id=str(uuidlib.uuid4()),
        planned_session_id=session.id,
        type=session.type,
        title=session.title,
        date_iso=date_iso,
        start_time=session.start_time,
        duration_min=duration_min,
        rpe=rpe,
        notes=notes or None,
    )
