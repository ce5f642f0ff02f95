"""Tests for log filtering and grouping."""

from datetime import date

import pytest

from domain.history import filter_completed, format_hours_minutes, group_by_day, human_day_label

TODAY = date(2026, 1, 28)  # Wednesday


def test_filter_completed_by_date_and_type(make_completed):
    items = [
        make_completed(date_iso="2026-01-26", type="GYM"),
        make_completed(date_iso="2026-01-27", type="BADMINTON"),
        make_completed(date_iso="2026-01-20", type="GYM"),
    ]

    assert len(filter_completed(items, "THIS_WEEK", "ALL", TODAY)) == 2
    assert len(filter_completed(items, "THIS_WEEK", "GYM", TODAY)) == 1
    assert len(filter_completed(items, "ALL_TIME", "GYM", TODAY)) == 2
    assert filter_completed(items, "THIS_MONTH", "RECOVERY", TODAY) == []


def test_group_by_day_newest_first(make_completed):
    items = [
        make_completed(date_iso="2026-01-22", title="a"),
        make_completed(date_iso="2026-01-28", title="b"),
        make_completed(date_iso="2026-01-27", title="c"),
        make_completed(date_iso="2026-01-28", title="d"),
    ]

    groups = group_by_day(items, TODAY)

    assert [g.key for g in groups] == ["2026-01-28", "2026-01-27", "2026-01-22"]
    assert [g.title for g in groups] == ["Today", "Yesterday", "Thursday"]
    assert groups[0].subtitle == "Jan 28"
    assert [s.title for s in groups[0].items] == ["b", "d"]


def test_group_by_day_empty():
    assert group_by_day([], TODAY) == []


def test_human_day_label():
    assert human_day_label(date(2026, 1, 28), TODAY) == "Today"
    assert human_day_label(date(2026, 1, 26), TODAY) == "Monday"


def test_format_hours_minutes():
    assert format_hours_minutes(45) == "45m"
    assert format_hours_minutes(0) == "0m"
    assert format_hours_minutes(120) == "2h"
    assert format_hours_minutes(75) == "1h 15m"


def test_filter_completed_skips_malformed_dates(make_completed):
    good = make_completed(date_iso="2026-01-27")
    items = [
        make_completed(date_iso="not-a-date"),
        make_completed(date_iso="2026-1-26"),
        good,
    ]

    assert filter_completed(items, "LAST_7", "ALL", TODAY) == [good]
    assert filter_completed(items, "THIS_WEEK", "ALL", TODAY) == [good]
    assert filter_completed(items, "ALL_TIME", "ALL", TODAY) == [good]


def test_filter_completed_unknown_mode_raises(make_completed):
    with pytest.raises(ValueError, match="Unknown date mode"):
        filter_completed([make_completed()], "LAST_YEAR", "ALL", TODAY)


def test_group_by_day_skips_malformed_dates(make_completed):
    items = [
        make_completed(date_iso="not-a-date"),
        make_completed(date_iso="2026-01-28", title="kept"),
    ]

    groups = group_by_day(items, TODAY)

    assert [g.key for g in groups] == ["2026-01-28"]
    assert [s.title for s in groups[0].items] == ["kept"]
