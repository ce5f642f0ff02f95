import streamlit as st
from loguru import logger

from domain.models import SESSION_TYPES, TYPE_LABEL, Settings
from infrastructure.repository import Repository, RepositoryError


def render_settings_screen(repo: Repository) -> None:
    st.title("Settings")

    try:
        settings = repo.load_settings()
    except RepositoryError:
        logger.exception("Loading settings failed")
        st.error("Could not load settings.")
        return

    with st.form("settings"):
        primary_type = st.selectbox(
            "Primary focus",
            SESSION_TYPES,
            index=SESSION_TYPES.index(settings.primary_type),
            format_func=lambda k: TYPE_LABEL[k],
        )
        default_duration = st.number_input(
            "Default duration (minutes)",
            min_value=5,
            max_value=600,
            value=settings.default_duration,
            step=5,
        )
        default_rpe = st.slider("Default RPE", 1, 10, value=settings.default_rpe)
        week_starts_monday = st.toggle(
            "Week starts Monday",
            value=settings.week_starts_monday,
            help="Statistics always use Monday-start weeks.",
        )
        confirm_delete = st.toggle("Confirm before delete", value=settings.confirm_delete)

        if st.form_submit_button("Save settings"):
            try:
                repo.save_settings(
                    Settings(
                        primary_type=primary_type,
                        default_duration=int(default_duration),
                        default_rpe=int(default_rpe),
                        week_starts_monday=week_starts_monday,
                        confirm_delete=confirm_delete,
                    )
                )
            except RepositoryError:
                logger.exception("Saving settings failed")
                st.error("Could not save settings.")
            else:
                st.success("Settings saved.")

    st.divider()
    st.subheader("Danger zone")

    if not st.session_state.get("confirm_reset"):
        if st.button("Reset all data"):
            st.session_state["confirm_reset"] = True
            st.rerun()
        return

    st.warning("This will permanently delete all sessions, templates, and settings.")
    cols = st.columns(2)

    with cols[0]:
        if st.button("Yes, delete everything"):
            del st.session_state["confirm_reset"]
            try:
                repo.reset_all()
            except RepositoryError:
                logger.exception("Reset failed")
                st.error("Could not reset your data.")
                return
            st.success("All data deleted.")
            st.rerun()

    with cols[1]:
        if st.button("Cancel"):
            del st.session_state["confirm_reset"]
            st.rerun()
