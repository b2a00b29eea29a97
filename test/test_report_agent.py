from __future__ import annotations

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, ToolCallPart
from pydantic_ai.models import test as ai_test_models
from pydantic_ai.models.function import AgentInfo, FunctionModel

from goals_survey.core.errors import GenerationError
from goals_survey.models.survey import ReportData, SurveyResponse
from goals_survey.services.report_agent import ReportAgent

_VALID_REPORT = {
    "title": "Tu plan de acción",
    "summary": "Quieres aprender a nadar.",
    "detailedAnalysis": [
        {"question": "¿Cuál es tu meta?", "answer": "Nadar", "insight": "Meta clara"},
    ],
    "conclusion": "¡Ánimo!",
    "chartData": {"title": "Prioridad", "labels": ["Nadar"], "values": [9]},
}

_RESPONSES = [SurveyResponse(question="¿Cuál es tu meta?", answer="Nadar")]


def test_generate_returns_validated_report() -> None:
    agent = ReportAgent(model=ai_test_models.TestModel(custom_output_args=_VALID_REPORT))

    report = agent.generate(_RESPONSES, "Spanish")

    assert isinstance(report, ReportData)
    assert report.title == "Tu plan de acción"
    assert report.detailed_analysis[0].insight == "Meta clara"
    assert report.chart_data.values == [9.0]


def test_schema_mismatch_becomes_generation_error() -> None:
    agent = ReportAgent(model=ai_test_models.TestModel(custom_output_args={"title": "incomplete"}))

    with pytest.raises(GenerationError):
        agent.generate(_RESPONSES, "Spanish")


def test_generate_requires_responses_and_language() -> None:
    agent = ReportAgent(model=ai_test_models.TestModel(custom_output_args=_VALID_REPORT))

    with pytest.raises(ValueError):
        agent.generate([], "Spanish")
    with pytest.raises(ValueError):
        agent.generate(_RESPONSES, "")


def test_instructions_name_the_report_language() -> None:
    captured: list[str | None] = []

    def _respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        captured.append(info.instructions)
        return ModelResponse(parts=[ToolCallPart(info.output_tools[0].name, _VALID_REPORT)])

    agent = ReportAgent(model=FunctionModel(_respond))

    agent.generate(_RESPONSES, "Spanish")

    assert len(captured) == 1
    assert "All text values in the report must be written in Spanish." in captured[0]
    assert "never invent facts" in captured[0]
