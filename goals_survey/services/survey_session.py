from __future__ import annotations

import uuid
from typing import List, Protocol, Sequence, Tuple

from goals_survey.core.logging import get_logger
from goals_survey.models.survey import (
    AppState,
    ChatMessage,
    Platform,
    ReportData,
    SurveyResponse,
)
from goals_survey.services.language_catalog import Language, filter_languages, find_language
from goals_survey.services.LLM import LLMInterface
from goals_survey.services.prompts import (
    OPENING_PROMPT,
    TOTAL_QUESTIONS,
    build_system_instruction,
    build_transcript,
    build_turn_prompt,
)
from goals_survey.services.report_storage import ReportStorage

logger = get_logger(__name__)

START_ERROR_NOTICE = "Sorry, I encountered an error. Please try again."
TURN_ERROR_MESSAGE = "Sorry, an error occurred."
REPORT_ERROR_NOTICE = "We couldn't generate your report. Please try again."


class ReportGenerator(Protocol):
    def generate(self, responses: Sequence[SurveyResponse], language: str) -> ReportData: ...


class SurveySession:
    """Owns the survey state machine and everything collected during one run.

    LLM calls are made synchronously, but each one takes the current epoch
    before it starts and only applies its result if no reset happened in the
    meantime. While a call is outstanding ``is_busy`` is True and every other
    action is a no-op.
    """

    def __init__(
        self,
        *,
        chat_llm: LLMInterface,
        report_generator: ReportGenerator,
        storage: ReportStorage,
        total_questions: int = TOTAL_QUESTIONS,
    ) -> None:
        if total_questions <= 0:
            raise ValueError("total_questions must be a positive integer")

        self._chat_llm = chat_llm
        self._report_generator = report_generator
        self._storage = storage
        self._total_questions = total_questions

        self.session_id = uuid.uuid4().hex[:12]
        self._state = AppState.LOADING
        self._platform = Platform.WEB
        self._epoch = 0
        self._busy = False
        self._clear_run()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def state(self) -> AppState:
        return self._state

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def language(self) -> str:
        return self._language

    @property
    def language_search(self) -> str:
        return self._language_search

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def responses(self) -> Tuple[SurveyResponse, ...]:
        return tuple(self._responses)

    @property
    def report(self) -> ReportData | None:
        return self._report

    @property
    def notice(self) -> str | None:
        """A user-facing error from the last action, if it failed."""

        return self._notice

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def question_count(self) -> int:
        return len(self._responses)

    @property
    def total_questions(self) -> int:
        return self._total_questions

    @property
    def can_start(self) -> bool:
        return self._state == AppState.LANGUAGE_SELECT and bool(self._language) and not self._busy

    @property
    def accepts_input(self) -> bool:
        return self._state == AppState.SURVEY_RUNNING and not self._busy

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def initialize(self) -> AppState:
        """Leave ``loading`` for the welcome-back screen or the platform picker."""

        if self._state != AppState.LOADING:
            return self._state
        if self._storage.has_saved_report():
            self._transition(AppState.WELCOME_BACK)
        else:
            self._transition(AppState.PLATFORM_SELECT)
        return self._state

    def select_platform(self, platform: Platform | str) -> None:
        if self._state != AppState.PLATFORM_SELECT:
            return
        self._platform = Platform(platform)
        self._transition(AppState.LANGUAGE_SELECT)

    def back_to_platforms(self) -> None:
        if self._state != AppState.LANGUAGE_SELECT or self._busy:
            return
        self._notice = None
        self._language_search = ""
        self._transition(AppState.PLATFORM_SELECT)

    def select_language(self, code: str) -> None:
        if self._state != AppState.LANGUAGE_SELECT or self._busy:
            return
        if find_language(code) is None:
            raise ValueError(f"Unknown language: {code}")
        self._language = code

    def set_language_search(self, term: str) -> None:
        self._language_search = term or ""

    def filtered_languages(self) -> List[Language]:
        return filter_languages(self._language_search)

    def set_draft(self, text: str) -> None:
        self._draft = text or ""

    def start_survey(self) -> bool:
        """Ask the model for the greeting and first question."""

        if not self.can_start:
            return False

        ticket = self._begin_request()
        self._notice = None
        try:
            reply = self._chat_llm(
                OPENING_PROMPT,
                system_instruction=build_system_instruction(self._language),
            )
        except Exception:
            logger.exception("Error starting survey")
            if self._is_current(ticket):
                self._notice = START_ERROR_NOTICE
            return False
        finally:
            self._end_request(ticket)

        if not self._is_current(ticket):
            return False
        self._messages = [ChatMessage(sender="bot", text=reply)]
        self._transition(AppState.SURVEY_RUNNING)
        return True

    def submit_answer(self, text: str) -> bool:
        """Record an answer and fetch the next question.

        Returns True when the model replied and the conversation moved on.
        """

        answer = text or ""
        if not answer.strip() or not self.accepts_input:
            return False

        previous_count = len(self._responses)
        user_message = ChatMessage(sender="user", text=answer)
        self._messages.append(user_message)
        self._responses.append(SurveyResponse(question=self._last_bot_question(), answer=answer))
        self._draft = ""

        transcript = build_transcript(self._messages)
        ticket = self._begin_request()
        try:
            reply = self._chat_llm(
                build_turn_prompt(transcript),
                system_instruction=build_system_instruction(self._language, previous_count),
            )
        except Exception:
            logger.exception("Error sending message", extra={"question_count": previous_count})
            if self._is_current(ticket):
                self._rollback_answer(user_message, answer)
                self._messages.append(ChatMessage(sender="bot", text=TURN_ERROR_MESSAGE, is_error=True))
            return False
        finally:
            self._end_request(ticket)

        if not self._is_current(ticket):
            return False
        self._messages.append(ChatMessage(sender="bot", text=reply))
        if previous_count >= self._total_questions - 1:
            self._transition(AppState.SURVEY_COMPLETE)
        return True

    def generate_report(self) -> bool:
        """Turn the collected answers into a report, rolling back on failure."""

        if self._state != AppState.SURVEY_COMPLETE or self._busy:
            return False

        responses = list(self._responses)
        language = self._language
        self._notice = None
        self._transition(AppState.REPORT_GENERATING)
        ticket = self._begin_request()
        try:
            report = self._report_generator.generate(responses, language)
        except Exception:
            logger.exception("Error generating report")
            if self._is_current(ticket):
                self._notice = REPORT_ERROR_NOTICE
                self._transition(AppState.SURVEY_COMPLETE)
            return False
        finally:
            self._end_request(ticket)

        if not self._is_current(ticket):
            return False
        self._storage.save(report, responses)
        self._report = report
        self._transition(AppState.REPORT_VIEW)
        return True

    def load_saved_report(self) -> bool:
        """Show the stored report, or start over when it can't be fully loaded."""

        if self._state != AppState.WELCOME_BACK:
            return False

        snapshot = self._storage.load()
        if snapshot is None:
            logger.warning("Failed to load saved report, starting over")
            self.reset()
            return False

        self._report = snapshot.report
        self._responses = list(snapshot.responses)
        self._transition(AppState.REPORT_VIEW)
        return True

    def reset(self) -> None:
        """Forget the saved report and the current run; back to the platform picker."""

        self._storage.clear()
        self._epoch += 1
        self._busy = False
        self._clear_run()
        self._transition(AppState.PLATFORM_SELECT)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _clear_run(self) -> None:
        self._language = ""
        self._language_search = ""
        self._draft = ""
        self._messages: List[ChatMessage] = []
        self._responses: List[SurveyResponse] = []
        self._report: ReportData | None = None
        self._notice: str | None = None

    def _transition(self, target: AppState) -> None:
        if target != self._state:
            logger.info("State change %s -> %s", self._state.value, target.value)
        self._state = target

    def _begin_request(self) -> int:
        self._busy = True
        return self._epoch

    def _end_request(self, ticket: int) -> None:
        if self._is_current(ticket):
            self._busy = False

    def _is_current(self, ticket: int) -> bool:
        return ticket == self._epoch

    def _last_bot_question(self) -> str:
        for message in reversed(self._messages):
            if message.sender == "bot" and not message.is_error:
                return message.text
        return ""

    def _rollback_answer(self, user_message: ChatMessage, answer: str) -> None:
        if self._messages and self._messages[-1] is user_message:
            self._messages.pop()
        if self._responses:
            self._responses.pop()
        self._draft = answer


__all__ = [
    "REPORT_ERROR_NOTICE",
    "START_ERROR_NOTICE",
    "TURN_ERROR_MESSAGE",
    "ReportGenerator",
    "SurveySession",
]
