from datetime import date
from typing import Dict, List, Optional

import altair as alt
import pandas as pd
import plotly.express as px
import streamlit as st
from loguru import logger

from domain.history import format_hours_minutes
from domain.insights import Insights, TypeTotal, build_insights
from domain.models import DOW_LABEL, SESSION_TYPES, TYPE_COLOR, TYPE_LABEL, CompletedSession
from domain.time_ranges import ResolvedRange, custom_range_error, resolve_range
from infrastructure.repository import Repository, RepositoryError


# --------------------------------------------------
# Public entry point (called from app.py)
# --------------------------------------------------

def render_insights_screen(repo: Repository) -> None:
    st.title("Insights")
    st.caption("Patterns from your completed training.")

    today = date.today()
    window = _select_range(today)
    if window is None:
        return

    st.caption(f"Range: {window.start_iso} → {window.end_iso}")

    try:
        range_items = repo.list_completed_range(window.start_iso, window.end_iso)
        all_completed = repo.list_all_completed()
    except RepositoryError:
        logger.exception("Loading insights failed")
        st.error("Could not load insights for this range.")
        return

    if not all_completed:
        st.info("No completed sessions yet. Mark a planned session as done on the Week page.")
        return

    insights = build_insights(range_items, all_completed, window.day_count, today)

    _render_summary(insights)
    _render_type_breakdown(insights.totals)
    _render_weekday_chart(insights)
    _render_week_consistency(insights.week, today)
    _render_recent(range_items)


# --------------------------------------------------
# UI components
# --------------------------------------------------

def _select_range(today: date) -> Optional[ResolvedRange]:
    labels = {
        "7d": "7 days",
        "30d": "30 days",
        "custom": "Custom",
    }

    key = st.radio(
        "Range",
        list(labels.keys()),
        format_func=lambda k: labels[k],
        horizontal=True,
    )

    if key != "custom":
        return resolve_range(key, today)

    cols = st.columns(2)
    start = cols[0].date_input("From", value=None, key="insights_from")
    end = cols[1].date_input("To", value=None, key="insights_to")

    start_iso = start.isoformat() if start else None
    end_iso = end.isoformat() if end else None

    error = custom_range_error(start_iso, end_iso)
    if error:
        if start_iso and end_iso:
            st.error(error)
        else:
            st.info(error)
        return None

    return resolve_range("custom", today, start_iso, end_iso)


def _render_summary(insights: Insights) -> None:
    s = insights.summary

    cols = st.columns(4)
    cols[0].metric(
        "Sessions",
        s.total_sessions,
        help="No activity in range" if s.total_sessions == 0 else f"{round(s.sessions_per_day, 1)}/day",
    )
    cols[1].metric(
        "Time",
        format_hours_minutes(s.total_minutes),
        help="—" if s.total_minutes == 0 else f"{round(s.avg_minutes)}m avg",
    )
    cols[2].metric(
        "Load",
        round(s.total_load),
        help="—" if s.total_load == 0 else f"~{round(s.avg_load)} avg",
    )
    cols[3].metric(
        "Streak",
        f"{insights.streak}d",
        help="No session today" if insights.streak == 0 else "Ending today",
    )

    cols = st.columns(3)
    cols[0].metric("Most common", insights.common_title)
    cols[1].metric("Top type", TYPE_LABEL[insights.best_type])
    cols[2].metric("Best day (30d)", DOW_LABEL[insights.best_weekday])

    st.caption(insights.hint)


def _render_type_breakdown(totals: Dict[str, TypeTotal]) -> None:
    st.subheader("By type")

    df = pd.DataFrame(
        [
            {
                "Type": TYPE_LABEL[t],
                "Sessions": totals[t].count,
                "Minutes": totals[t].minutes,
                "Load": totals[t].load,
                "Avg minutes": round(totals[t].minutes / max(totals[t].count, 1)),
            }
            for t in SESSION_TYPES
        ]
    )

    chart = (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopRight=2, cornerRadiusBottomRight=2)
        .encode(
            y=alt.Y("Type:N", title=None, sort=None),
            x=alt.X("Sessions:Q", title="Sessions"),
            color=alt.Color(
                "Type:N",
                scale=alt.Scale(
                    domain=[TYPE_LABEL[t] for t in SESSION_TYPES],
                    range=[TYPE_COLOR[t] for t in SESSION_TYPES],
                ),
                legend=None,
            ),
            tooltip=[
                alt.Tooltip("Type:N"),
                alt.Tooltip("Sessions:Q"),
                alt.Tooltip("Minutes:Q"),
                alt.Tooltip("Load:Q"),
            ],
        )
        .properties(height=140)
    )

    st.altair_chart(chart, width="stretch")
    st.dataframe(df, width="stretch", hide_index=True)


def _render_weekday_chart(insights: Insights) -> None:
    st.subheader("Weekday pattern (last 30 days)")

    df = pd.DataFrame({"Day": DOW_LABEL, "Sessions": insights.weekday_counts})

    st.plotly_chart(
        px.bar(
            df,
            x="Day",
            y="Sessions",
            labels={"Day": "", "Sessions": "Sessions"},
        ),
        width="stretch",
    )


def _render_week_consistency(week: Dict[str, List[CompletedSession]], today: date) -> None:
    st.subheader("This week")

    today_iso = today.isoformat()
    cols = st.columns(7)
    for idx, (iso, items) in enumerate(week.items()):
        with cols[idx]:
            label = f"**{DOW_LABEL[idx]}**" if iso == today_iso else DOW_LABEL[idx]
            st.markdown(f"{label}  \n{int(iso[-2:])}")

            if not items:
                st.markdown("·")
                continue

            dots = "".join(_type_dot(s.type) for s in items[:3])
            extra = len(items) - 3
            st.markdown(dots + (f" +{extra}" if extra > 0 else ""))


def _render_recent(items: List[CompletedSession]) -> None:
    st.subheader("Recent completed sessions")

    if not items:
        st.info("No completed sessions in this range.")
        return

    df = pd.DataFrame(
        [
            {
                "Date": s.date_iso,
                "Time": s.start_time,
                "Type": TYPE_LABEL.get(s.type, s.type),
                "Title": s.title,
                "Minutes": s.duration_min,
                "RPE": s.rpe,
                "Load": s.load,
            }
            for s in items[:10]
        ]
    )
    st.dataframe(df, width="stretch", hide_index=True)


# --------------------------------------------------
# Helpers
# --------------------------------------------------

def _type_dot(session_type: str) -> str:
    return {"BADMINTON": "🔵", "GYM": "🟢", "RECOVERY": "🟣"}.get(session_type, "⚪")
