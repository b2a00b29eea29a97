from __future__ import annotations

import json
from textwrap import dedent
from typing import Iterable, Sequence

from goals_survey.models.survey import ChatMessage, SurveyResponse

TOTAL_QUESTIONS = 5
SURVEY_PERSONA = "Personal Needs & Goals Assistant"
OPENING_PROMPT = "Please start the survey now."


def build_system_instruction(language: str, question_count: int | None = None) -> str:
    """Return the survey persona instruction.

    ``question_count`` is ``None`` for the opening turn; afterwards it is the
    number of answers recorded before the one being sent.
    """

    preamble = (
        f"You are a friendly and helpful '{SURVEY_PERSONA}'. "
        "Your goal is to understand what the user needs or wants to accomplish. "
        f"The survey consists of {TOTAL_QUESTIONS} questions. "
        "You must ask adaptive questions based on the user's previous answers. "
        f"Your responses must always be in {language}."
    )
    if question_count is None:
        return (
            f"{preamble} Start with a friendly greeting and ask the first question to "
            "understand the user's primary goal or need right now."
        )
    return (
        f"{preamble} You have asked {question_count} questions so far. "
        "Based on the conversation history, ask the next relevant question to get more "
        f"clarity on their needs. If the survey is complete ({TOTAL_QUESTIONS} questions asked), "
        "thank the user and tell them you will now summarize their needs."
    )


def build_transcript(messages: Iterable[ChatMessage]) -> str:
    """Render the chat as ``sender: text`` lines, leaving out error notices."""

    return "\n".join(f"{message.sender}: {message.text}" for message in messages if not message.is_error)


def build_turn_prompt(transcript: str) -> str:
    return f"Conversation History:\n{transcript}\n\nAsk the next question."


def build_report_prompt(responses: Sequence[SurveyResponse], language: str) -> str:
    """Create the report request sent to the structured-output agent."""

    serialized = json.dumps(
        [response.model_dump() for response in responses],
        indent=2,
        ensure_ascii=False,
    )
    instructions = dedent(
        f"""
        Analyze the following conversation where a user describes their needs and goals.
        Generate a personal action plan report based on their responses.
        Every string value in the JSON must be written in {language}.

        The report must include:
        1. A concise title (e.g., 'Your Personal Action Plan').
        2. A one-paragraph summary of their stated needs.
        3. A detailed analysis section. This should be an array where each item contains the
           original question, the user's answer, and a concise insight or analysis of that
           specific exchange.
        4. A brief conclusion with encouragement.
        5. Identify any quantifiable data suitable for a simple bar chart (like priority levels,
           or estimated timeframes). If no clear numerical data is found, provide an empty array
           for chartData labels and values.
        """
    ).strip()
    return f"{instructions}\nConversation responses:\n{serialized}"


__all__ = [
    "OPENING_PROMPT",
    "SURVEY_PERSONA",
    "TOTAL_QUESTIONS",
    "build_report_prompt",
    "build_system_instruction",
    "build_transcript",
    "build_turn_prompt",
]
