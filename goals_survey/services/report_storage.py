from __future__ import annotations

import json
import re
import threading
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from goals_survey.core.config import get_settings
from goals_survey.core.errors import StorageError
from goals_survey.core.logging import get_logger
from goals_survey.models.survey import ReportData, SavedSnapshot, SurveyResponse

REPORT_KEY = "savedReport"
RESPONSES_KEY = "savedSurveyResponses"

_CLIENT_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

logger = get_logger(__name__)

_RESPONSES_ADAPTER = TypeAdapter(List[SurveyResponse])


class KeyValueStore(Protocol):
    """String key-value storage. Implementations may raise ``StorageError``."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class JsonFileStore(KeyValueStore):
    """Keeps every key in a single JSON object on disk."""

    def __init__(self, storage_path: Path) -> None:
        self._path = Path(storage_path)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all_unlocked().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            payload[key] = value
            self._write_all_unlocked(payload)

    def remove(self, key: str) -> None:
        with self._lock:
            payload = self._read_all_unlocked()
            if payload.pop(key, None) is not None:
                self._write_all_unlocked(payload)

    def _read_all_unlocked(self) -> Dict[str, str]:
        if not self._path.is_file():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Unable to read {self._path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"Unexpected content in {self._path}")
        return payload

    def _write_all_unlocked(self, payload: Dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to write {self._path}: {exc}") from exc


class ReportStorage:
    """Saves the most recent report and its answers; never raises to the caller.

    With a ``client_id`` both slots are namespaced to that client, so clients
    sharing one store never see each other's snapshot.
    """

    def __init__(self, store: KeyValueStore, client_id: Optional[str] = None) -> None:
        if client_id is not None and not is_valid_client_id(client_id):
            raise ValueError(f"Invalid client id: {client_id!r}")
        self._store = store
        self._prefix = f"{client_id}:" if client_id else ""

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def has_saved_report(self) -> bool:
        try:
            return bool(self._store.get(self._key(REPORT_KEY)))
        except Exception:
            logger.exception("Could not access saved report storage")
            return False

    def save(self, report: ReportData, responses: Sequence[SurveyResponse]) -> None:
        """Write both slots independently."""

        self._write(REPORT_KEY, report.model_dump_json(by_alias=True))
        self._write(
            RESPONSES_KEY,
            _RESPONSES_ADAPTER.dump_json(list(responses), by_alias=True).decode("utf-8"),
        )

    def load(self) -> Optional[SavedSnapshot]:
        """Return the saved snapshot, or ``None`` when either slot is missing or corrupt."""

        try:
            raw_report = self._store.get(self._key(REPORT_KEY))
            raw_responses = self._store.get(self._key(RESPONSES_KEY))
        except Exception:
            logger.exception("Could not read saved report")
            return None

        if not raw_report or not raw_responses:
            logger.info("Saved report is incomplete", extra={"has_report": bool(raw_report)})
            return None

        try:
            report = ReportData.model_validate_json(raw_report)
            responses = _RESPONSES_ADAPTER.validate_json(raw_responses)
        except ValidationError:
            logger.exception("Saved report is corrupt")
            return None

        return SavedSnapshot(report=report, responses=responses)

    def clear(self) -> None:
        for key in (REPORT_KEY, RESPONSES_KEY):
            try:
                self._store.remove(self._key(key))
            except Exception:
                logger.exception("Failed to clear saved data", extra={"key": key})

    def _write(self, key: str, value: str) -> None:
        try:
            self._store.set(self._key(key), value)
        except Exception:
            logger.exception("Failed to persist saved data", extra={"key": key})


def new_client_id() -> str:
    return uuid.uuid4().hex


def is_valid_client_id(value: str) -> bool:
    return bool(_CLIENT_ID_PATTERN.match(value or ""))


_STORE_INSTANCE: Optional[JsonFileStore] = None
_STORE_LOCK = threading.Lock()


def get_report_store() -> JsonFileStore:
    """Return the process-wide file store backed by the configured path."""

    global _STORE_INSTANCE
    if _STORE_INSTANCE is None:
        with _STORE_LOCK:
            if _STORE_INSTANCE is None:
                _STORE_INSTANCE = JsonFileStore(get_settings().storage_path)
    return _STORE_INSTANCE


def get_report_storage(client_id: str) -> ReportStorage:
    """Return report storage scoped to one browser client."""

    return ReportStorage(get_report_store(), client_id=client_id)


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "REPORT_KEY",
    "RESPONSES_KEY",
    "ReportStorage",
    "get_report_storage",
    "get_report_store",
    "is_valid_client_id",
    "new_client_id",
]
