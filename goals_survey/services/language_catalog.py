from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Language:
    """A survey language: ``code`` goes into prompts, ``name`` is shown to the user."""

    code: str
    name: str


LANGUAGES: Tuple[Language, ...] = (
    Language("English", "English"),
    Language("Spanish", "Español"),
    Language("French", "Français"),
    Language("German", "Deutsch"),
    Language("Mandarin Chinese", "中文 (普通话)"),
    Language("Hindi", "हिन्दी"),
    Language("Arabic", "العربية"),
    Language("Portuguese", "Português"),
    Language("Bengali", "বাংলা"),
    Language("Russian", "Русский"),
    Language("Japanese", "日本語"),
    Language("Punjabi", "ਪੰਜਾਬੀ"),
    Language("Korean", "한국어"),
    Language("Vietnamese", "Tiếng Việt"),
    Language("Telugu", "తెలుగు"),
    Language("Marathi", "मराठी"),
    Language("Turkish", "Türkçe"),
    Language("Tamil", "தமிழ்"),
    Language("Italian", "Italiano"),
    Language("Urdu", "اردو"),
    Language("Persian", "فارسی"),
    Language("Gujarati", "ગુજરાતી"),
    Language("Polish", "Polski"),
    Language("Ukrainian", "Українська"),
    Language("Malayalam", "മലയാളം"),
    Language("Kannada", "ಕನ್ನಡ"),
    Language("Thai", "ไทย"),
    Language("Dutch", "Nederlands"),
    Language("Greek", "Ελληνικά"),
    Language("Czech", "Čeština"),
    Language("Swedish", "Svenska"),
    Language("Romanian", "Română"),
    Language("Hungarian", "Magyar"),
    Language("Hebrew", "עברית"),
    Language("Indonesian", "Bahasa Indonesia"),
)


def filter_languages(term: str | None) -> List[Language]:
    """Return entries whose name or code contains ``term``, ignoring case."""

    needle = (term or "").lower()
    if not needle:
        return list(LANGUAGES)
    return [
        language
        for language in LANGUAGES
        if needle in language.name.lower() or needle in language.code.lower()
    ]


def find_language(code: str | None) -> Language | None:
    """Look up a catalog entry by its code."""

    for language in LANGUAGES:
        if language.code == code:
            return language
    return None


__all__ = ["LANGUAGES", "Language", "filter_languages", "find_language"]
