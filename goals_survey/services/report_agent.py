from __future__ import annotations

from textwrap import dedent
from typing import Sequence

from pydantic_ai import Agent, RunContext, exceptions as ai_exceptions
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.settings import ModelSettings

from goals_survey.core.config import get_settings
from goals_survey.core.errors import GenerationError
from goals_survey.core.logging import get_logger
from goals_survey.models.survey import ReportData, SurveyResponse
from goals_survey.services.prompts import build_report_prompt

logger = get_logger(__name__)


class ReportAgent:
    """Thin wrapper around a PydanticAI agent that turns survey answers into a report."""

    _agent: Agent[str, ReportData]

    def __init__(self, *, model: Model | None = None) -> None:
        settings = get_settings()
        try:
            resolved_model = model or GoogleModel(
                settings.llm_model,
                provider=GoogleProvider(api_key=settings.llm_api_key),
            )
            self._agent = Agent(
                resolved_model,
                deps_type=str,
                output_type=ReportData,
                instructions=dedent(
                    """
                    You write short, encouraging personal action plans from survey conversations.
                    Base every statement on the user's answers and never invent facts they did not give.
                    Keep the detailed analysis in the same order as the responses you receive.
                    """
                ).strip(),
                model_settings=ModelSettings(temperature=0.2),
                retries=0,
            )
        except Exception as exc:
            raise GenerationError(f"Failed to initialize report agent: {exc}") from exc

        @self._agent.instructions
        def _report_language(ctx: RunContext[str]) -> str:
            return f"All text values in the report must be written in {ctx.deps}."

    def generate(self, responses: Sequence[SurveyResponse], language: str) -> ReportData:
        """Run the agent and return the validated report."""

        if not responses:
            raise ValueError("At least one survey response is required.")
        if not language:
            raise ValueError("A report language must be provided.")

        prompt = build_report_prompt(responses, language)
        try:
            run_result = self._agent.run_sync(prompt, deps=language)
        except (ai_exceptions.AgentRunError, ai_exceptions.UserError) as exc:
            raise GenerationError(f"Report agent failed: {exc}") from exc
        except Exception as exc:
            raise GenerationError(f"Report agent encountered an unexpected error: {exc}") from exc

        logger.info(
            "Report generated",
            extra={"language": language, "analysis_items": len(run_result.output.detailed_analysis)},
        )
        return run_result.output


__all__ = ["ReportAgent"]
