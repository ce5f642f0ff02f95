from abc import ABC, abstractmethod
from typing import List

from domain.models import (
    DEFAULT_TEMPLATES,
    CompletedSession,
    PlannedSession,
    Settings,
    Template,
    normalize_tags,
)
from domain.time_ranges import ALL_TIME_END, ALL_TIME_START


# ---------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------

class RepositoryError(Exception):
    """Base class for persistence failures."""


class NotAuthenticatedError(RepositoryError):
    def __init__(self, message: str = "NOT_AUTHENTICATED"):
        super().__init__(message)


class BackendError(RepositoryError):
    """The hosted backend answered with an error or an unusable payload."""


# ---------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------

class Repository(ABC):
    """
    Per-user storage of templates, planned and completed sessions and
    settings. Every call is scoped to the user the repository was built
    for.
    """

    def __init__(self, user_id: str):
        self._user_id = user_id

    def require_user_id(self) -> str:
        if not self._user_id:
            raise NotAuthenticatedError()
        return self._user_id

    # --- templates
    @abstractmethod
    def list_templates(self) -> List[Template]: ...

    @abstractmethod
    def create_template(self, template: Template) -> Template: ...

    @abstractmethod
    def delete_template(self, template_id: str) -> None: ...

    # --- planned week
    @abstractmethod
    def list_planned_week(self, week_start_iso: str) -> List[PlannedSession]: ...

    @abstractmethod
    def upsert_planned(self, week_start_iso: str, session: PlannedSession) -> None: ...

    @abstractmethod
    def delete_planned(self, session: PlannedSession) -> None: ...

    @abstractmethod
    def mark_planned_done(self, session: PlannedSession) -> None: ...

    # --- completed log
    @abstractmethod
    def insert_completed(self, entry: CompletedSession) -> None: ...

    @abstractmethod
    def delete_completed_by_planned_id(self, planned_session_id: str) -> None: ...

    @abstractmethod
    def list_completed_range(self, start_iso: str, end_iso: str) -> List[CompletedSession]:
        """Completed sessions with start_iso <= date_iso <= end_iso, newest first."""

    # --- settings
    @abstractmethod
    def load_settings(self) -> Settings: ...

    @abstractmethod
    def save_settings(self, settings: Settings) -> None: ...

    @abstractmethod
    def reset_all(self) -> None: ...

    # -----------------------------------------------------------------
    # Composite operations
    # -----------------------------------------------------------------

    def list_all_completed(self) -> List[CompletedSession]:
        return self.list_completed_range(ALL_TIME_START, ALL_TIME_END)

    def ensure_seeded(self) -> int:
        """Create the default templates if the user has none. Returns how many."""
        if self.list_templates():
            return 0

        for raw in DEFAULT_TEMPLATES:
            self.create_template(
                Template(
                    id="",
                    type=raw["type"],
                    title=raw["title"],
                    duration_min=raw["duration_min"],
                    rpe_default=raw["rpe_default"],
                    focus_tags=normalize_tags(raw["focus_tags"]),
                )
            )
        return len(DEFAULT_TEMPLATES)

    def delete_planned_cascade(self, session: PlannedSession) -> None:
        # completed rows reference the planned one; remove them first
        self.delete_completed_by_planned_id(session.id)
        self.delete_planned(session)

    def clear_week(self, week_start_iso: str) -> int:
        sessions = self.list_planned_week(week_start_iso)
        for s in sessions:
            self.delete_planned_cascade(s)
        return len(sessions)

    def complete(self, session: PlannedSession, entry: CompletedSession) -> None:
        self.insert_completed(entry)
        self.mark_planned_done(session)
