from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from goals_survey.core.errors import ConfigurationError

load_dotenv()

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_STORAGE_PATH = "goals_survey/data/saved_report.json"


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _parse_bool(value: Optional[str]) -> bool:
    return (_strip_or_none(value) or "").lower() in {"1", "true", "yes", "on"}


class Settings:

    def __init__(self) -> None:
        api_key = (
            _strip_or_none(os.getenv("GEMINI_API_KEY"))
            or _strip_or_none(os.getenv("LLM_API_KEY"))
            or _strip_or_none(os.getenv("API_KEY"))
        )
        if not api_key:
            raise ConfigurationError("API_KEY environment variable not set.")
        self.llm_api_key = api_key

        self.llm_model = _strip_or_none(os.getenv("LLM_MODEL")) or DEFAULT_MODEL

        raw_temperature = _strip_or_none(os.getenv("LLM_TEMPERATURE")) or "0.7"
        try:
            self.llm_temperature = float(raw_temperature)
        except ValueError as exc:
            raise ConfigurationError(f"LLM_TEMPERATURE must be a number, got {raw_temperature!r}") from exc

        storage_path = _strip_or_none(os.getenv("SURVEY_STORAGE_PATH")) or DEFAULT_STORAGE_PATH
        self.storage_path = Path(storage_path).expanduser().resolve()

        font_path = _strip_or_none(os.getenv("PDF_FONT_PATH"))
        self.pdf_font_path = Path(font_path).expanduser().resolve() if font_path else None

        self.log_level = _strip_or_none(os.getenv("LOG_LEVEL")) or "INFO"
        self.log_json = _parse_bool(os.getenv("LOG_JSON"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, raising ConfigurationError when incomplete."""

    return Settings()
