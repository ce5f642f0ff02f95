"""Tests for the SQLite repository."""

import pytest

from domain.models import Settings, Template
from domain.week_plan import complete_planned
from infrastructure.db import SqliteRepository
from infrastructure.repository import NotAuthenticatedError

WEEK = "2026-01-26"


def test_ensure_seeded_only_once(repo):
    assert repo.ensure_seeded() == 7
    assert repo.ensure_seeded() == 0

    templates = repo.list_templates()
    assert len(templates) == 7
    assert templates[0].title == "Footwork + Defense"
    assert templates[0].focus_tags == ["footwork", "defense"]


def test_create_and_delete_template(repo):
    t = repo.create_template(
        Template(id="", type="GYM", title=" Core ", duration_min=30, rpe_default=5,
                 focus_tags=["Core", "core ", "abs"])
    )
    assert t.id
    assert t.title == "Core"
    assert repo.list_templates() == [t]

    repo.delete_template(t.id)
    assert repo.list_templates() == []


def test_planned_week_ordering_and_upsert(repo, make_planned):
    late = make_planned(day_index=1, start_time="19:00")
    early = make_planned(day_index=1, start_time="07:00")
    monday = make_planned(day_index=0, start_time="20:00")
    for s in (late, early, monday):
        repo.upsert_planned(WEEK, s)

    assert [s.id for s in repo.list_planned_week(WEEK)] == [monday.id, early.id, late.id]
    assert repo.list_planned_week("2026-02-02") == []

    late.title = "Evening lift"
    repo.upsert_planned(WEEK, late)
    stored = {s.id: s for s in repo.list_planned_week(WEEK)}
    assert stored[late.id].title == "Evening lift"
    assert len(stored) == 3


def test_complete_marks_done_and_logs(repo, make_planned):
    planned = make_planned(day_index=2, start_time="18:00", type="BADMINTON", title="Matchplay")
    repo.upsert_planned(WEEK, planned)

    entry = complete_planned(planned, "2026-01-28", 85, 8, "tired legs")
    repo.complete(planned, entry)

    assert repo.list_planned_week(WEEK)[0].status == "DONE"

    [logged] = repo.list_all_completed()
    assert logged.planned_session_id == planned.id
    assert logged.title == "Matchplay"
    assert logged.notes == "tired legs"
    assert logged.load == 680


def test_insert_completed_replaces_same_slot(repo, make_completed):
    repo.insert_completed(make_completed(date_iso="2026-01-28", start_time="18:00", rpe=5))
    repo.insert_completed(make_completed(date_iso="2026-01-28", start_time="18:00", rpe=9))

    [logged] = repo.list_all_completed()
    assert logged.rpe == 9


def test_list_completed_range_inclusive_newest_first(repo, make_completed):
    for d, t in [("2026-01-19", "18:00"), ("2026-01-20", "07:00"), ("2026-01-20", "19:00"),
                 ("2026-01-26", "18:00"), ("2026-01-27", "18:00")]:
        repo.insert_completed(make_completed(date_iso=d, start_time=t))

    got = repo.list_completed_range("2026-01-20", "2026-01-26")
    assert [(s.date_iso, s.start_time) for s in got] == [
        ("2026-01-26", "18:00"),
        ("2026-01-20", "19:00"),
        ("2026-01-20", "07:00"),
    ]


def test_delete_planned_cascade_and_clear_week(repo, make_planned):
    a = make_planned(day_index=0)
    b = make_planned(day_index=3)
    for s in (a, b):
        repo.upsert_planned(WEEK, s)
    repo.complete(a, complete_planned(a, "2026-01-26", 60, 6))

    repo.delete_planned_cascade(a)
    assert [s.id for s in repo.list_planned_week(WEEK)] == [b.id]
    assert repo.list_all_completed() == []

    assert repo.clear_week(WEEK) == 1
    assert repo.list_planned_week(WEEK) == []


def test_settings_round_trip_and_defaults(repo):
    assert repo.load_settings() == Settings()

    repo.save_settings(Settings(primary_type="GYM", default_duration=45, confirm_delete=False))
    loaded = repo.load_settings()
    assert loaded.primary_type == "GYM"
    assert loaded.default_duration == 45
    assert loaded.confirm_delete is False


def test_users_are_isolated_and_reset_is_scoped(tmp_path, make_completed):
    path = str(tmp_path / "shared.db")
    a = SqliteRepository(path, "user-a")
    b = SqliteRepository(path, "user-b")

    a.ensure_seeded()
    b.ensure_seeded()
    a.insert_completed(make_completed(date_iso="2026-01-26"))

    assert b.list_all_completed() == []

    a.reset_all()
    assert a.list_templates() == []
    assert a.list_all_completed() == []
    assert len(b.list_templates()) == 7


def test_missing_user_is_not_authenticated(tmp_path):
    anon = SqliteRepository(str(tmp_path / "anon.db"), "")
    with pytest.raises(NotAuthenticatedError):
        anon.list_templates()
