from dataclasses import dataclass, field, asdict
from typing import Final, Dict, List, Literal, Optional, Any, Mapping


# ---------------------------------------------------------------------
# Session types
# ---------------------------------------------------------------------

SESSION_TYPES: Final[List[str]] = [
    "BADMINTON",
    "GYM",
    "RECOVERY",
]

TYPE_LABEL: Final[Dict[str, str]] = {
    "BADMINTON": "Badminton",
    "GYM": "Workout",
    "RECOVERY": "Recovery",
}

TYPE_COLOR: Final[Dict[str, str]] = {
    "BADMINTON": "#0ea5e9",
    "GYM": "#10b981",
    "RECOVERY": "#8b5cf6",
}


# ---------------------------------------------------------------------
# Planned status
# ---------------------------------------------------------------------

PLANNED_STATUSES: Final[List[str]] = [
    "PLANNED",
    "DONE",
    "SKIPPED",
    "PARTIAL",
]


# ---------------------------------------------------------------------
# Weekdays (Monday = 0)
# ---------------------------------------------------------------------

DOW_LABEL: Final[List[str]] = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def compute_load(duration_min: float, rpe: float) -> float:
    """Training load: minutes times RPE. No clamping."""
    return duration_min * rpe


# ---------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------

@dataclass
class PlannedSession:
    id: str
    type: str
    title: str
    day_index: int            # 0 (Mon) .. 6 (Sun)
    start_time: str           # "HH:MM"
    duration_min: int
    rpe_planned: int
    status: Optional[str] = None
    kind: Literal["planned"] = "planned"

    @property
    def effective_status(self) -> str:
        # missing or unrecognised statuses read as PLANNED
        if self.status in PLANNED_STATUSES:
            return self.status
        return "PLANNED"


@dataclass(frozen=True)
class CompletedSession:
    id: str
    planned_session_id: str
    type: str
    title: str
    date_iso: str             # "YYYY-MM-DD"
    start_time: str           # "HH:MM"
    duration_min: int
    rpe: int
    notes: Optional[str] = None
    kind: Literal["completed"] = "completed"

    @property
    def load(self) -> float:
        return compute_load(self.duration_min, self.rpe)


@dataclass
class Template:
    id: str
    type: str
    title: str
    duration_min: int
    rpe_default: int
    focus_tags: List[str] = field(default_factory=list)


@dataclass
class Settings:
    primary_type: str = "BADMINTON"
    default_duration: int = 60
    default_rpe: int = 6
    week_starts_monday: bool = True
    confirm_delete: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_SETTINGS: Final[Settings] = Settings()


def settings_from_dict(raw: Optional[Mapping[str, Any]]) -> Settings:
    """Build Settings from a stored payload, defaulting any missing key."""
    if not raw:
        return Settings()

    defaults = DEFAULT_SETTINGS.to_dict()
    values = {k: raw.get(k, v) for k, v in defaults.items()}
    if values["primary_type"] not in SESSION_TYPES:
        values["primary_type"] = DEFAULT_SETTINGS.primary_type
    return Settings(**values)


# ---------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------

def normalize_tags(tags: List[str]) -> List[str]:
    """Lowercase, trim and de-duplicate tags, keeping first-seen order."""
    seen: List[str] = []
    for t in tags:
        t = t.lower().strip()
        if t and t not in seen:
            seen.append(t)
    return seen


# Seeded into an account that has no templates yet
DEFAULT_TEMPLATES: Final[List[Dict[str, Any]]] = [
    {"type": "BADMINTON", "title": "Footwork + Defense", "duration_min": 75, "rpe_default": 7, "focus_tags": ["footwork", "defense"]},
    {"type": "BADMINTON", "title": "Net + Drops", "duration_min": 60, "rpe_default": 6, "focus_tags": ["net", "control"]},
    {"type": "BADMINTON", "title": "Matchplay", "duration_min": 90, "rpe_default": 8, "focus_tags": ["matchplay", "tactics"]},
    {"type": "GYM", "title": "Upper Strength", "duration_min": 60, "rpe_default": 7, "focus_tags": ["upper", "strength"]},
    {"type": "GYM", "title": "Lower Strength", "duration_min": 60, "rpe_default": 7, "focus_tags": ["lower", "strength"]},
    {"type": "RECOVERY", "title": "Mobility + Stretch", "duration_min": 20, "rpe_default": 2, "focus_tags": ["mobility"]},
    {"type": "RECOVERY", "title": "Easy cardio", "duration_min": 30, "rpe_default": 3, "focus_tags": ["zone2"]},
]


# ---------------------------------------------------------------------
# Boundary: raw record -> tagged session
# ---------------------------------------------------------------------

def session_from_record(record: Mapping[str, Any]):
    """
    Resolve a raw mapping into a PlannedSession or CompletedSession.

    The "kind" field decides. Records without one are classified once
    here (a "date_iso" field means completed) so nothing downstream
    has to sniff shapes again.
    """
    kind = record.get("kind")
    if kind is None:
        kind = "completed" if "date_iso" in record else "planned"

    if kind == "planned":
        return PlannedSession(
            id=str(record["id"]),
            type=record["type"],
            title=record["title"],
            day_index=int(record["day_index"]),
            start_time=record["start_time"],
            duration_min=int(record["duration_min"]),
            rpe_planned=int(record["rpe_planned"]),
            status=record.get("status") or None,
        )

    if kind == "completed":
        return CompletedSession(
            id=str(record["id"]),
            planned_session_id=str(record.get("planned_session_id") or ""),
            type=record["type"],
            title=record["title"],
            date_iso=str(record["date_iso"]),
            start_time=record["start_time"],
            duration_min=int(record["duration_min"]),
            rpe=int(record["rpe"]),
            notes=record.get("notes") or None,
        )

    raise ValueError(f"Unknown session kind: {kind}")
