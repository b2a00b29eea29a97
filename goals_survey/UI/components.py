from __future__ import annotations

from typing import Callable, Dict

import streamlit as st

from goals_survey.core.config import get_settings
from goals_survey.models.survey import AppState, Platform
from goals_survey.services.charts import ChartRenderer
from goals_survey.services.language_catalog import find_language
from goals_survey.services.report_renderer import (
    CSV_FILENAME,
    CSV_MIME,
    PDF_FILENAME,
    PDF_MIME,
    PdfExporter,
    build_csv,
    build_document,
)
from goals_survey.services.survey_session import SurveySession

from . import state

_PLATFORM_LABELS: Dict[Platform, str] = {
    Platform.WEB: "Web App",
    Platform.WHATSAPP: "WhatsApp",
    Platform.TELEGRAM: "Telegram",
}

_PLATFORM_ACCENTS: Dict[Platform, str] = {
    Platform.WEB: "#4bc0c0",
    Platform.WHATSAPP: "#25d366",
    Platform.TELEGRAM: "#2aabee",
}

_CHAT_HEADERS: Dict[Platform, tuple[str, str]] = {
    Platform.WHATSAPP: ("Goals Assistant", "online"),
    Platform.TELEGRAM: ("Goals Assistant Bot", "bot"),
}


def render_theme(platform: Platform) -> None:
    """Tint buttons and the chat header with the chosen platform's colour."""

    accent = _PLATFORM_ACCENTS[platform]
    st.markdown(
        f"""
        <style>
        .stButton>button[kind="primary"], .stFormSubmitButton>button {{
            background-color: {accent};
            border-color: {accent};
        }}
        .survey-chat-header {{
            display: flex;
            flex-direction: column;
            padding: 0.6rem 1rem;
            border-radius: 0.6rem;
            background: {accent};
            color: #fff;
            margin-bottom: 0.75rem;
        }}
        .survey-chat-header h3 {{
            margin: 0;
            padding: 0;
            font-size: 1.05rem;
            color: #fff;
        }}
        .survey-chat-header p {{
            margin: 0;
            font-size: 0.8rem;
            opacity: 0.85;
        }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_welcome_back(on_view: Callable[[], None], on_start_over: Callable[[], None]) -> None:
    st.subheader("Welcome Back!")
    st.write("You have a previously generated report.")
    view_col, restart_col = st.columns(2)
    with view_col:
        st.button("View Last Report", type="primary", on_click=on_view, use_container_width=True)
    with restart_col:
        st.button("Start New Survey", on_click=on_start_over, use_container_width=True)


def render_platform_select(on_select: Callable[[Platform], None]) -> None:
    st.subheader("Choose Your Experience")
    columns = st.columns(len(Platform))
    for column, platform in zip(columns, Platform):
        with column:
            st.button(
                _PLATFORM_LABELS[platform],
                key=f"platform_{platform.value}",
                on_click=on_select,
                args=(platform,),
                use_container_width=True,
            )


def render_language_select(session: SurveySession) -> None:
    """Searchable language grid plus the start button."""

    st.button("← Back", key="language_back_button", on_click=session.back_to_platforms)
    st.subheader("Select Your Language")

    if state.LANGUAGE_SEARCH_KEY not in st.session_state:
        st.session_state[state.LANGUAGE_SEARCH_KEY] = session.language_search

    st.text_input(
        "Search for a language...",
        key=state.LANGUAGE_SEARCH_KEY,
        on_change=lambda: session.set_language_search(st.session_state.get(state.LANGUAGE_SEARCH_KEY, "")),
        label_visibility="collapsed",
        placeholder="Search for a language...",
    )

    languages = session.filtered_languages()
    if not languages:
        st.info("No languages match your search.")

    columns = st.columns(3)
    for position, language in enumerate(languages):
        with columns[position % 3]:
            st.button(
                language.name,
                key=f"language_{language.code}",
                type="primary" if session.language == language.code else "secondary",
                on_click=session.select_language,
                args=(language.code,),
                use_container_width=True,
            )

    if session.notice:
        st.error(session.notice)

    selected = find_language(session.language)
    if selected:
        st.caption(f"Selected: {selected.name}")

    if st.button("Start Survey", key="start_survey_button", type="primary", disabled=not session.can_start):
        with st.spinner("Starting your survey..."):
            session.start_survey()
        st.rerun()


def render_chat(session: SurveySession) -> None:
    """Chat transcript, typing indicator and the answer form."""

    header = _CHAT_HEADERS.get(session.platform)
    if header:
        title, subtitle = header
        st.markdown(
            f'<div class="survey-chat-header"><h3>{title}</h3><p>{subtitle}</p></div>',
            unsafe_allow_html=True,
        )

    for message in session.messages:
        role = "assistant" if message.sender == "bot" else "user"
        with st.chat_message(role):
            if message.is_error:
                st.error(message.text)
            else:
                st.write(message.text)

    st.caption(f"Answered {session.question_count} of {session.total_questions} questions")

    state.restore_pending_draft()
    input_disabled = not session.accepts_input
    with st.form("answer_form", clear_on_submit=True):
        answer = st.text_input(
            "Your answer",
            key=state.DRAFT_KEY,
            placeholder="Type your answer...",
            disabled=input_disabled,
        )
        submitted = st.form_submit_button("Send", disabled=input_disabled)

    if submitted and answer.strip():
        with st.chat_message("assistant"):
            with st.spinner("Typing..."):
                session.submit_answer(answer)
        state.set_pending_draft(session.draft)
        st.rerun()


def render_generate_report(session: SurveySession) -> None:
    if session.notice:
        st.error(session.notice)

    if st.button("Generate Report", key="generate_report_button", type="primary", disabled=session.is_busy):
        with st.spinner("Analyzing responses and generating your report..."):
            session.generate_report()
        st.rerun()


def render_report_generating() -> None:
    st.info("Analyzing responses and generating your report...")


def render_report(
    session: SurveySession,
    renderer: ChartRenderer,
    on_start_over: Callable[[], None],
) -> None:
    """Display the report with its chart and export buttons."""

    report = session.report
    if report is None or session.state != AppState.REPORT_VIEW:
        return

    document = build_document(report)

    st.header(document.title)
    st.subheader("Summary")
    st.write(document.summary)

    if document.analysis:
        st.subheader("Detailed Analysis")
        for entry in document.analysis:
            st.markdown(f"**{entry.label}**")
            st.markdown(f"_{entry.answer}_")
            st.markdown(f"💡 Insight: {entry.insight}")

    chart_png = None
    if document.chart is not None:
        st.subheader("Data Visualization")
        figure = renderer.render(document.chart)
        st.pyplot(figure)
        chart_png = renderer.to_png()
    else:
        renderer.destroy()

    st.subheader("Conclusion")
    st.write(document.conclusion)

    st.divider()

    pdf_bytes = PdfExporter(font_path=get_settings().pdf_font_path).export(document, chart_png=chart_png)
    pdf_col, csv_col, restart_col = st.columns(3)
    with pdf_col:
        st.download_button(
            "Download PDF",
            data=pdf_bytes,
            file_name=PDF_FILENAME,
            mime=PDF_MIME,
            type="primary",
            use_container_width=True,
        )
    with csv_col:
        st.download_button(
            "Download CSV",
            data=build_csv(session.responses).encode("utf-8"),
            file_name=CSV_FILENAME,
            mime=CSV_MIME,
            use_container_width=True,
        )
    with restart_col:
        st.button("Start New Survey", key="report_restart_button", on_click=on_start_over, use_container_width=True)
