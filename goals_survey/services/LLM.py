from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from google import genai

from goals_survey.core.config import get_settings
from goals_survey.core.errors import GenerationError
from goals_survey.core.logging import get_logger

logger = get_logger(__name__)


class LLMInterface(ABC):
    """Defines the expected behaviour for language model wrappers."""

    @abstractmethod
    def __call__(self, prompt: str, *, system_instruction: str | None = None) -> str:
        """Execute the language model with the provided prompt."""
        raise NotImplementedError


class GeminiLLM(LLMInterface):
    """Stateless wrapper around Google's Gemini SDK."""

    def __init__(
        self,
        *,
        model_name: str | None = None,
        temperature: float | None = None,
        api_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        settings = get_settings()
        self._model_name = model_name or settings.llm_model
        self._temperature = settings.llm_temperature if temperature is None else temperature

        if client is not None:
            self._client = client
            return

        resolved_api_key = api_key or settings.llm_api_key
        if not resolved_api_key:
            raise ValueError("A Gemini API key must be configured.")
        self._client = genai.Client(api_key=resolved_api_key)

    @property
    def model_name(self) -> str:
        return self._model_name

    def __call__(self, prompt: str, *, system_instruction: str | None = None) -> str:
        if not isinstance(prompt, str):
            raise TypeError("prompt must be a string")

        config: dict[str, Any] = {"temperature": self._temperature}
        if system_instruction:
            config["system_instruction"] = system_instruction

        try:
            response = self._client.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config=config,
            )
        except Exception as exc:
            raise GenerationError(f"Gemini request failed: {exc}") from exc

        text = _extract_response_text(response).strip()
        if not text:
            raise GenerationError("Gemini returned an empty response.")
        logger.debug("Gemini reply received", extra={"model": self._model_name, "chars": len(text)})
        return text


class LLM(GeminiLLM):
    """Current default LLM implementation backed by Gemini."""


def _extract_response_text(response: Any) -> str:
    """Normalize Google GenAI responses to plain strings."""

    text = getattr(response, "text", None)
    if isinstance(text, str) and text:
        return text

    candidates = getattr(response, "candidates", None) or []
    collected: list[str] = []

    for candidate in candidates:
        content = getattr(candidate, "content", None)
        if not content:
            continue
        parts = getattr(content, "parts", None) or []
        for part in parts:
            part_text = getattr(part, "text", None)
            if isinstance(part_text, str) and part_text:
                collected.append(part_text)

    return "".join(collected)
