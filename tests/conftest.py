"""Shared fixtures for the test suite."""

import itertools

import pytest

from domain.models import CompletedSession, PlannedSession
from infrastructure.db import SqliteRepository

_ids = itertools.count(1)


@pytest.fixture
def make_completed():
    """Factory for CompletedSession records with sensible defaults."""

    def _make(date_iso="2026-01-26", type="BADMINTON", title="Matchplay",
              duration_min=60, rpe=6, start_time="18:00", **kwargs):
        n = next(_ids)
        return CompletedSession(
            id=kwargs.pop("id", f"c{n}"),
            planned_session_id=kwargs.pop("planned_session_id", f"p{n}"),
            type=type,
            title=title,
            date_iso=date_iso,
            start_time=start_time,
            duration_min=duration_min,
            rpe=rpe,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_planned():
    """Factory for PlannedSession records."""

    def _make(day_index=0, start_time="18:00", type="GYM", title="Upper Strength",
              duration_min=60, rpe_planned=7, **kwargs):
        n = next(_ids)
        return PlannedSession(
            id=kwargs.pop("id", f"p{n}"),
            type=type,
            title=title,
            day_index=day_index,
            start_time=start_time,
            duration_min=duration_min,
            rpe_planned=rpe_planned,
            **kwargs,
        )

    return _make


@pytest.fixture
def repo(tmp_path):
    return SqliteRepository(str(tmp_path / "training.db"), "user-a")
