from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import List

import streamlit as st
from loguru import logger

from domain.dates import add_days, monday_index, start_of_week_monday, to_iso_date
from domain.models import (
    DOW_LABEL,
    SESSION_TYPES,
    TYPE_LABEL,
    PlannedSession,
    Settings,
    Template,
)
from domain.week_plan import (
    apply_template,
    complete_planned,
    default_title,
    new_planned_session,
    next_free_time,
    sessions_by_day,
)
from infrastructure.repository import Repository, RepositoryError


def render_week_screen(repo: Repository) -> None:
    st.title("This week")

    today = date.today()
    week_start = start_of_week_monday(today)
    week_start_iso = to_iso_date(week_start)

    st.caption(f"Week of {week_start_iso} → {to_iso_date(add_days(week_start, 6))}")

    try:
        sessions = repo.list_planned_week(week_start_iso)
        templates = repo.list_templates()
        settings = repo.load_settings()
    except RepositoryError:
        logger.exception("Loading the week failed")
        st.error("Could not load this week's plan.")
        return

    by_day = sessions_by_day(sessions)

    selected_day = st.radio(
        "Day",
        list(range(7)),
        index=monday_index(today),
        format_func=lambda i: f"{DOW_LABEL[i]} ({len(by_day[i])})",
        horizontal=True,
    )

    day_sessions = by_day[selected_day]

    if not day_sessions:
        st.info("Nothing planned for this day.")

    for s in day_sessions:
        _render_planned(repo, s, settings, today)

    st.divider()
    _render_add_form(repo, week_start_iso, selected_day, day_sessions, templates, settings)

    st.divider()
    _render_clear_week(repo, week_start_iso, len(sessions))


# --------------------------------------------------
# Planned session card
# --------------------------------------------------

def _render_planned(
    repo: Repository,
    s: PlannedSession,
    settings: Settings,
    today: date,
) -> None:
    done = s.effective_status == "DONE"

    st.subheader(f"{s.start_time} · {s.title}")
    cols = st.columns(4)
    cols[0].metric("Type", TYPE_LABEL.get(s.type, s.type))
    cols[1].metric("Duration", f"{s.duration_min} min")
    cols[2].metric("RPE", s.rpe_planned)
    cols[3].metric("Status", s.effective_status.capitalize())

    if not done:
        with st.expander("Mark complete"):
            with st.form(f"complete_{s.id}"):
                done_date = st.date_input("Date", value=today)
                duration = st.number_input(
                    "Duration (minutes)", min_value=1, max_value=600, value=s.duration_min, step=5
                )
                rpe = st.slider("RPE", 1, 10, value=s.rpe_planned)
                notes = st.text_input("Notes", placeholder="How did it go?")

                if st.form_submit_button("Save as done"):
                    entry = complete_planned(
                        s,
                        date_iso=done_date.isoformat(),
                        duration_min=int(duration),
                        rpe=int(rpe),
                        notes=notes,
                    )
                    try:
                        repo.complete(s, entry)
                    except RepositoryError:
                        logger.exception(f"Completing planned session {s.id} failed")
                        st.error("Could not save the completed session.")
                        return
                    st.success("Session logged.")
                    st.rerun()

    delete_key = f"confirm_delete_{s.id}"

    if st.button("Delete", key=f"delete_{s.id}"):
        if settings.confirm_delete:
            st.session_state[delete_key] = True
        else:
            _delete(repo, s)

    if st.session_state.get(delete_key):
        st.warning("This removes the planned session and its logged result.")
        cols = st.columns(2)

        with cols[0]:
            if st.button("Confirm delete", key=f"confirm_{s.id}"):
                del st.session_state[delete_key]
                _delete(repo, s)

        with cols[1]:
            if st.button("Cancel", key=f"cancel_{s.id}"):
                del st.session_state[delete_key]
                st.rerun()


def _delete(repo: Repository, s: PlannedSession) -> None:
    try:
        repo.delete_planned_cascade(s)
    except RepositoryError:
        logger.exception(f"Deleting planned session {s.id} failed")
        st.error("Could not delete the session.")
        return
    st.success("Session deleted.")
    st.rerun()


# --------------------------------------------------
# Add flow
# --------------------------------------------------

def _render_add_form(
    repo: Repository,
    week_start_iso: str,
    day_index: int,
    day_sessions: List[PlannedSession],
    templates: List[Template],
    settings: Settings,
) -> None:
    st.subheader(f"Add to {DOW_LABEL[day_index]}")

    mode = st.radio("Start from", ["custom", "template"], horizontal=True, format_func=str.capitalize)

    draft = PlannedSession(
        id="",
        type=settings.primary_type,
        title=default_title(settings.primary_type),
        day_index=day_index,
        start_time=next_free_time(day_sessions),
        duration_min=settings.default_duration,
        rpe_planned=settings.default_rpe,
    )

    if mode == "template":
        if not templates:
            st.info("No templates yet. Create some on the Templates page.")
            return
        template = st.selectbox(
            "Template",
            templates,
            format_func=lambda t: f"{TYPE_LABEL.get(t.type, t.type)} · {t.title} ({t.duration_min} min)",
        )
        draft = apply_template(draft, template)
    else:
        session_type = st.selectbox(
            "Type",
            SESSION_TYPES,
            index=SESSION_TYPES.index(draft.type),
            format_func=lambda t: TYPE_LABEL[t],
        )
        if session_type != draft.type:
            draft = replace(draft, type=session_type, title=default_title(session_type))

    with st.form(f"add_{day_index}_{mode}", clear_on_submit=True):
        title = st.text_input("Title", value=draft.title)
        start = st.time_input(
            "Start time",
            value=datetime.strptime(draft.start_time, "%H:%M").time(),
            step=timedelta(minutes=15),
        )
        duration = st.number_input(
            "Duration (minutes)", min_value=5, max_value=600, value=draft.duration_min, step=5
        )
        rpe = st.slider("Planned RPE", 1, 10, value=draft.rpe_planned)

        if not st.form_submit_button("Add session"):
            return

    try:
        session = new_planned_session(
            draft.type, title, day_index, start.strftime("%H:%M"), int(duration), int(rpe)
        )
    except ValueError as e:
        st.error(str(e))
        return

    try:
        repo.upsert_planned(week_start_iso, session)
    except RepositoryError:
        logger.exception("Adding planned session failed")
        st.error("Could not add the session.")
        return

    logger.info(f"Planned {session.type} on day {day_index} at {session.start_time}")
    st.rerun()


def _render_clear_week(repo: Repository, week_start_iso: str, count: int) -> None:
    if count == 0:
        return

    if st.button(f"Clear week ({count} sessions)"):
        st.session_state["confirm_clear_week"] = True

    if st.session_state.get("confirm_clear_week"):
        st.warning("This removes every planned session this week and their logged results.")
        if st.button("Yes, clear the week"):
            del st.session_state["confirm_clear_week"]
            try:
                removed = repo.clear_week(week_start_iso)
            except RepositoryError:
                logger.exception("Clearing the week failed")
                st.error("Could not clear the week.")
                return
            st.success(f"Removed {removed} sessions.")
            st.rerun()
