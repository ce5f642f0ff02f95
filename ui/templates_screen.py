import streamlit as st
from loguru import logger

from domain.models import SESSION_TYPES, TYPE_LABEL, Template
from infrastructure.repository import Repository, RepositoryError


def render_templates_screen(repo: Repository) -> None:
    st.title("Templates")
    st.caption("Presets for quickly planning a session.")

    try:
        templates = repo.list_templates()
    except RepositoryError:
        logger.exception("Loading templates failed")
        st.error("Could not load templates.")
        return

    counts = {t: sum(1 for x in templates if x.type == t) for t in SESSION_TYPES}

    type_filter = st.radio(
        "Show",
        ["ALL"] + SESSION_TYPES,
        format_func=lambda k: f"All ({len(templates)})" if k == "ALL" else f"{TYPE_LABEL[k]} ({counts[k]})",
        horizontal=True,
    )

    for session_type in SESSION_TYPES:
        if type_filter not in ("ALL", session_type):
            continue

        group = sorted(
            (t for t in templates if t.type == session_type),
            key=lambda t: t.title.lower(),
        )
        if not group:
            continue

        st.subheader(TYPE_LABEL[session_type])
        for t in group:
            _render_template(repo, t)

    st.divider()
    _render_new_template(repo)


def _render_template(repo: Repository, t: Template) -> None:
    cols = st.columns([4, 1])
    tags = " ".join(f"`{tag}`" for tag in t.focus_tags)
    cols[0].markdown(f"**{t.title}** · {t.duration_min} min · RPE {t.rpe_default}  \n{tags}")

    delete_key = f"confirm_delete_template_{t.id}"
    if cols[1].button("Delete", key=f"delete_template_{t.id}"):
        st.session_state[delete_key] = True

    if st.session_state.get(delete_key):
        st.warning(f"Delete template \"{t.title}\"? Planned sessions are not affected.")
        cols = st.columns(2)
        with cols[0]:
            if st.button("Confirm delete", key=f"confirm_template_{t.id}"):
                del st.session_state[delete_key]
                try:
                    repo.delete_template(t.id)
                except RepositoryError:
                    logger.exception(f"Deleting template {t.id} failed")
                    st.error("Could not delete the template.")
                    return
                st.rerun()
        with cols[1]:
            if st.button("Cancel", key=f"cancel_template_{t.id}"):
                del st.session_state[delete_key]
                st.rerun()


def _render_new_template(repo: Repository) -> None:
    st.subheader("New template")

    with st.form("new_template", clear_on_submit=True):
        session_type = st.selectbox("Type", SESSION_TYPES, format_func=lambda k: TYPE_LABEL[k])
        title = st.text_input("Title")
        duration = st.number_input("Duration (minutes)", min_value=5, max_value=600, value=60, step=5)
        rpe = st.slider("Default RPE", 1, 10, value=6)
        tags = st.text_input("Focus tags", placeholder="footwork, defense")

        if not st.form_submit_button("Save template"):
            return

    if not title.strip():
        st.error("A template needs a title.")
        return

    try:
        repo.create_template(
            Template(
                id="",
                type=session_type,
                title=title,
                duration_min=int(duration),
                rpe_default=int(rpe),
                focus_tags=tags.split(","),
            )
        )
    except RepositoryError:
        logger.exception("Creating template failed")
        st.error("Could not save the template.")
        return

    st.success("Template saved.")
    st.rerun()
