from __future__ import annotations


class SurveyAppError(Exception):
    """Base class for failures the survey app knows how to report."""


class ConfigurationError(SurveyAppError):
    """Raised when required runtime configuration is missing or invalid."""


class GenerationError(SurveyAppError):
    """Raised when the language model call fails or returns unusable output."""


class StorageError(SurveyAppError):
    """Raised by key-value stores when a read, write or delete fails."""
