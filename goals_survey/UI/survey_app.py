from __future__ import annotations

import streamlit as st

from goals_survey.UI import components, state
from goals_survey.core.config import get_settings
from goals_survey.core.errors import ConfigurationError
from goals_survey.core.logging import set_session_id, setup_logging
from goals_survey.models.survey import AppState


@st.cache_resource
def _configure_logging(level: str, json_logs: bool) -> bool:
    setup_logging(level, json_logs)
    return True


def run_app() -> None:
    """Entry point for the Streamlit-based survey UI."""

    st.set_page_config(page_title="AI-Powered Personal Survey", page_icon="📝", layout="centered")

    try:
        settings = get_settings()
    except ConfigurationError as exc:
        st.error(str(exc))
        return

    _configure_logging(settings.log_level, settings.log_json)

    session = state.get_session()
    set_session_id(session.session_id)
    if session.state == AppState.LOADING:
        with st.spinner("Loading..."):
            session.initialize()

    components.render_theme(session.platform)
    st.title("AI-Powered Personal Survey")

    current = session.state
    if current == AppState.WELCOME_BACK:
        components.render_welcome_back(on_view=_view_saved_report, on_start_over=state.reset)
    elif current == AppState.PLATFORM_SELECT:
        components.render_platform_select(on_select=session.select_platform)
    elif current == AppState.LANGUAGE_SELECT:
        components.render_language_select(session)
    elif current in (AppState.SURVEY_RUNNING, AppState.SURVEY_COMPLETE):
        components.render_chat(session)
        if session.state == AppState.SURVEY_COMPLETE:
            components.render_generate_report(session)
    elif current == AppState.REPORT_GENERATING:
        components.render_report_generating()
    elif current == AppState.REPORT_VIEW:
        components.render_report(session, state.get_chart_renderer(), on_start_over=state.reset)


def _view_saved_report() -> None:
    session = state.get_session()
    if not session.load_saved_report():
        state.reset()
