from __future__ import annotations

import json

from goals_survey.models.survey import ChatMessage, SurveyResponse
from goals_survey.services.prompts import (
    build_report_prompt,
    build_system_instruction,
    build_transcript,
    build_turn_prompt,
)


def test_opening_instruction_mentions_language_and_question_total() -> None:
    instruction = build_system_instruction("Korean")

    assert "Your responses must always be in Korean." in instruction
    assert "The survey consists of 5 questions." in instruction
    assert "greeting" in instruction


def test_turn_instruction_reports_running_count() -> None:
    instruction = build_system_instruction("Thai", 3)

    assert "You have asked 3 questions so far." in instruction
    assert "Thai" in instruction


def test_transcript_skips_error_messages() -> None:
    messages = [
        ChatMessage(sender="bot", text="Hi, what is your goal?"),
        ChatMessage(sender="user", text="Run a marathon"),
        ChatMessage(sender="bot", text="Sorry, an error occurred.", is_error=True),
    ]

    assert build_transcript(messages) == "bot: Hi, what is your goal?\nuser: Run a marathon"


def test_turn_prompt_wraps_transcript() -> None:
    assert build_turn_prompt("bot: hi") == "Conversation History:\nbot: hi\n\nAsk the next question."


def test_report_prompt_embeds_responses_and_language() -> None:
    responses = [SurveyResponse(question="Goal?", answer="Learn Greek")]

    prompt = build_report_prompt(responses, "Greek")

    assert "must be written in Greek" in prompt
    payload = prompt.split("Conversation responses:\n", 1)[1]
    assert json.loads(payload) == [{"question": "Goal?", "answer": "Learn Greek"}]
