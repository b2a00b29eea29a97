from __future__ import annotations

from typing import Optional

import streamlit as st

from goals_survey.services.charts import ChartRenderer
from goals_survey.services.LLM import LLM
from goals_survey.services.report_agent import ReportAgent
from goals_survey.services.report_storage import get_report_storage, is_valid_client_id, new_client_id
from goals_survey.services.survey_session import SurveySession

SESSION_KEY = "survey_session"
CHART_RENDERER_KEY = "chart_renderer"
LANGUAGE_SEARCH_KEY = "language_search"
DRAFT_KEY = "answer_draft"
PENDING_DRAFT_KEY = "answer_draft_pending"
CLIENT_ID_PARAM = "client"

_WIDGET_KEYS = (LANGUAGE_SEARCH_KEY, DRAFT_KEY, PENDING_DRAFT_KEY)


@st.cache_resource
def _get_chat_llm() -> LLM:
    """Return a shared LLM instance for the survey chat."""

    return LLM()


@st.cache_resource
def _get_report_agent() -> ReportAgent:
    """Return the shared report generation agent."""

    return ReportAgent()


def get_client_id() -> str:
    """Return this browser's id, kept in the URL so a reload finds the same saved report."""

    client_id = st.query_params.get(CLIENT_ID_PARAM)
    if not client_id or not is_valid_client_id(client_id):
        client_id = new_client_id()
        st.query_params[CLIENT_ID_PARAM] = client_id
    return client_id


def get_session() -> SurveySession:
    """Return this browser session's survey, creating it on first use."""

    session: Optional[SurveySession] = st.session_state.get(SESSION_KEY)
    if session is None:
        session = SurveySession(
            chat_llm=_get_chat_llm(),
            report_generator=_get_report_agent(),
            storage=get_report_storage(get_client_id()),
        )
        st.session_state[SESSION_KEY] = session
    return session


def get_chart_renderer() -> ChartRenderer:
    """Return the chart renderer owned by this browser session."""

    renderer: Optional[ChartRenderer] = st.session_state.get(CHART_RENDERER_KEY)
    if renderer is None:
        renderer = ChartRenderer()
        st.session_state[CHART_RENDERER_KEY] = renderer
    return renderer


def reset() -> None:
    """Run the reset transition and forget widget values tied to the old run."""

    get_session().reset()
    get_chart_renderer().destroy()
    for key in _WIDGET_KEYS:
        st.session_state.pop(key, None)


def restore_pending_draft() -> None:
    """Put a failed answer back into the input before the widget is drawn."""

    pending = st.session_state.pop(PENDING_DRAFT_KEY, None)
    if pending:
        st.session_state[DRAFT_KEY] = pending


def set_pending_draft(text: str) -> None:
    if text:
        st.session_state[PENDING_DRAFT_KEY] = text
    else:
        st.session_state.pop(PENDING_DRAFT_KEY, None)
