from datetime import date

import pandas as pd
import streamlit as st
from loguru import logger

from domain.history import TYPE_FILTERS, filter_completed, format_hours_minutes, group_by_day
from domain.models import TYPE_LABEL
from domain.time_ranges import DATE_MODES
from infrastructure.repository import Repository, RepositoryError

DATE_LABELS = {
    "THIS_WEEK": "This week",
    "LAST_7": "Last 7 days",
    "THIS_MONTH": "This month",
    "ALL_TIME": "All time",
}


def render_log_screen(repo: Repository) -> None:
    st.title("Log")
    st.markdown("Review what you actually did across the week.")

    cols = st.columns(2)
    date_mode = cols[0].selectbox(
        "Date",
        DATE_MODES,
        format_func=lambda k: DATE_LABELS[k],
    )
    type_filter = cols[1].selectbox(
        "Type",
        TYPE_FILTERS,
        format_func=lambda k: "All types" if k == "ALL" else TYPE_LABEL[k],
    )

    try:
        sessions = repo.list_all_completed()
    except RepositoryError:
        logger.exception("Loading the log failed")
        st.error("Could not load your log.")
        return

    today = date.today()
    filtered = filter_completed(sessions, date_mode, type_filter, today)

    st.caption(f"{len(filtered)} item{'' if len(filtered) == 1 else 's'}")

    if not filtered:
        st.info("No completed sessions for this filter.")
        return

    for group in group_by_day(filtered, today):
        minutes = sum(s.duration_min for s in group.items)
        st.subheader(group.title)
        st.caption(f"{group.subtitle} · {format_hours_minutes(minutes)}")

        df = pd.DataFrame(
            [
                {
                    "Time": s.start_time,
                    "Type": TYPE_LABEL.get(s.type, s.type),
                    "Title": s.title,
                    "Minutes": s.duration_min,
                    "RPE": s.rpe,
                    "Notes": s.notes or "",
                }
                for s in group.items
            ]
        )
        st.dataframe(df, width="stretch", hide_index=True)
