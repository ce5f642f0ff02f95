import streamlit as st
from loguru import logger

from infrastructure.config import AppConfig, load_config
from infrastructure.db import SqliteRepository
from infrastructure.logger import setup_logger
from infrastructure.remote import RestRepository
from infrastructure.repository import Repository, RepositoryError
from ui.insights import render_insights_screen
from ui.log_screen import render_log_screen
from ui.settings_screen import render_settings_screen
from ui.templates_screen import render_templates_screen
from ui.week import render_week_screen


def build_repository(config: AppConfig) -> Repository:
    if config.use_backend:
        if not config.backend_api_key:
            raise ValueError("BACKEND_URL is set but BACKEND_API_KEY is missing")
        logger.info(f"Using hosted backend at {config.backend_url}")
        return RestRepository(
            base_url=config.backend_url,
            api_key=config.backend_api_key,
            access_token=config.backend_access_token,
            user_id=config.user_id,
        )

    logger.info(f"Using local database {config.db_path}")
    return SqliteRepository(config.db_path, config.user_id)


def main() -> None:
    st.set_page_config(
        page_title="Training Planner",
        layout="centered",
    )

    config = load_config()
    setup_logger(level=config.log_level, log_file=config.log_file)

    repo = build_repository(config)

    # New accounts start with a set of default templates
    try:
        seeded = repo.ensure_seeded()
    except RepositoryError:
        logger.exception("Seeding default templates failed")
        seeded = 0
    if seeded:
        logger.info(f"Seeded {seeded} default templates")

    page = st.sidebar.radio(
        "Navigation",
        [
            "Week",
            "Log",
            "Insights",
            "Templates",
            "Settings",
        ],
    )

    if page == "Week":
        render_week_screen(repo)
    elif page == "Log":
        render_log_screen(repo)
    elif page == "Insights":
        render_insights_screen(repo)
    elif page == "Templates":
        render_templates_screen(repo)
    elif page == "Settings":
        render_settings_screen(repo)


if __name__ == "__main__":
    main()
