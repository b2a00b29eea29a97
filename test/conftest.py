from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("LLM_MODEL", "gemini-2.5-flash")

from goals_survey.core.errors import GenerationError, StorageError  # noqa: E402
from goals_survey.models.survey import ChartData, ReportData, SurveyResponse  # noqa: E402


class MemoryStore:
    """In-memory key-value store that can be told to fail."""

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.fail_get = False
        self.fail_set_keys: set[str] = set()
        self.fail_remove = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise StorageError("storage disabled")
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if key in self.fail_set_keys:
            raise StorageError("quota exceeded")
        self.data[key] = value

    def remove(self, key: str) -> None:
        if self.fail_remove:
            raise StorageError("storage disabled")
        self.data.pop(key, None)


class StubChatLLM:
    """Returns canned replies and records every request."""

    def __init__(self, replies: Sequence[str] | None = None) -> None:
        self._replies = list(replies or [])
        self.calls: List[Dict[str, Optional[str]]] = []
        self.fail_next = False
        self.on_call = None

    def __call__(self, prompt: str, *, system_instruction: str | None = None) -> str:
        self.calls.append({"prompt": prompt, "system_instruction": system_instruction})
        if self.on_call is not None:
            self.on_call()
        if self.fail_next:
            self.fail_next = False
            raise GenerationError("network down")
        if self._replies:
            return self._replies.pop(0)
        return f"Question {len(self.calls)}?"


class StubReportGenerator:
    def __init__(self, report: ReportData) -> None:
        self._report = report
        self.calls: List[tuple[List[SurveyResponse], str]] = []
        self.failures_remaining = 0

    def generate(self, responses: Sequence[SurveyResponse], language: str) -> ReportData:
        self.calls.append((list(responses), language))
        if self.failures_remaining:
            self.failures_remaining -= 1
            raise GenerationError("malformed JSON")
        return self._report


@pytest.fixture
def sample_report() -> ReportData:
    return ReportData(
        title="Votre plan d'action",
        summary="Vous voulez changer de carrière.",
        detailedAnalysis=[
            {"question": "Quel est votre objectif ?", "answer": "Changer de métier", "insight": "Motivation forte"},
            {"question": "Pourquoi ?", "answer": 'Il a dit "bonjour"', "insight": "Influence sociale"},
        ],
        conclusion="Bonne chance !",
        chartData=ChartData(title="Priorités", labels=["Carrière", "Santé"], values=[8, 5]),
    )


@pytest.fixture
def sample_responses() -> List[SurveyResponse]:
    return [
        SurveyResponse(question="Quel est votre objectif ?", answer="Changer de métier"),
        SurveyResponse(question="Pourquoi ?", answer='Il a dit "bonjour"'),
    ]


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def chat_llm() -> StubChatLLM:
    return StubChatLLM()


@pytest.fixture
def report_generator(sample_report: ReportData) -> StubReportGenerator:
    return StubReportGenerator(sample_report)
