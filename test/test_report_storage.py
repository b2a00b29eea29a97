from __future__ import annotations

import json

import pytest

from goals_survey.models.survey import ReportData
from goals_survey.services.report_storage import (
    REPORT_KEY,
    RESPONSES_KEY,
    JsonFileStore,
    ReportStorage,
    is_valid_client_id,
    new_client_id,
)


def test_save_then_load_round_trips(memory_store, sample_report, sample_responses) -> None:
    storage = ReportStorage(memory_store)

    storage.save(sample_report, sample_responses)
    snapshot = storage.load()

    assert snapshot is not None
    assert snapshot.report == sample_report
    assert snapshot.responses == sample_responses


def test_saved_report_uses_camel_case_keys(memory_store, sample_report, sample_responses) -> None:
    ReportStorage(memory_store).save(sample_report, sample_responses)

    payload = json.loads(memory_store.data[REPORT_KEY])

    assert "detailedAnalysis" in payload
    assert payload["chartData"]["labels"] == ["Carrière", "Santé"]
    assert json.loads(memory_store.data[RESPONSES_KEY])[1]["answer"] == 'Il a dit "bonjour"'


def test_failed_write_still_attempts_other_key(memory_store, sample_report, sample_responses) -> None:
    memory_store.fail_set_keys = {REPORT_KEY}
    storage = ReportStorage(memory_store)

    storage.save(sample_report, sample_responses)

    assert REPORT_KEY not in memory_store.data
    assert RESPONSES_KEY in memory_store.data
    assert storage.has_saved_report() is False


def test_load_returns_none_when_a_slot_is_missing(memory_store, sample_report, sample_responses) -> None:
    storage = ReportStorage(memory_store)
    storage.save(sample_report, sample_responses)
    del memory_store.data[RESPONSES_KEY]

    assert storage.has_saved_report() is True
    assert storage.load() is None


def test_load_returns_none_for_corrupt_json(memory_store) -> None:
    memory_store.data[REPORT_KEY] = "{not json"
    memory_store.data[RESPONSES_KEY] = "[]"

    assert ReportStorage(memory_store).load() is None


def test_load_returns_none_for_schema_mismatch(memory_store) -> None:
    memory_store.data[REPORT_KEY] = json.dumps({"title": "only a title"})
    memory_store.data[RESPONSES_KEY] = "[]"

    assert ReportStorage(memory_store).load() is None


def test_read_failure_is_treated_as_absent(memory_store, sample_report, sample_responses) -> None:
    storage = ReportStorage(memory_store)
    storage.save(sample_report, sample_responses)
    memory_store.fail_get = True

    assert storage.has_saved_report() is False
    assert storage.load() is None


def test_clear_removes_both_keys_and_swallows_failures(memory_store, sample_report, sample_responses) -> None:
    storage = ReportStorage(memory_store)
    storage.save(sample_report, sample_responses)

    storage.clear()
    assert memory_store.data == {}

    memory_store.fail_remove = True
    storage.clear()


def test_json_file_store_persists_between_instances(tmp_path, sample_report: ReportData, sample_responses) -> None:
    path = tmp_path / "nested" / "saved.json"
    ReportStorage(JsonFileStore(path)).save(sample_report, sample_responses)

    snapshot = ReportStorage(JsonFileStore(path)).load()

    assert snapshot is not None
    assert snapshot.report.title == sample_report.title
    assert len(snapshot.responses) == 2


def test_json_file_store_corrupt_file_reads_as_absent(tmp_path) -> None:
    path = tmp_path / "saved.json"
    path.write_text("garbage", encoding="utf-8")
    storage = ReportStorage(JsonFileStore(path))

    assert storage.has_saved_report() is False
    assert storage.load() is None
    storage.clear()


def test_json_file_store_remove(tmp_path) -> None:
    store = JsonFileStore(tmp_path / "saved.json")
    store.set("a", "1")
    store.set("b", "2")

    store.remove("a")

    assert store.get("a") is None
    assert store.get("b") == "2"


def test_clients_sharing_a_store_do_not_see_each_other(
    tmp_path, sample_report, sample_responses
) -> None:
    store = JsonFileStore(tmp_path / "saved.json")
    alice = ReportStorage(store, client_id=new_client_id())
    bob = ReportStorage(store, client_id=new_client_id())

    alice.save(sample_report, sample_responses)

    assert alice.has_saved_report() is True
    assert bob.has_saved_report() is False
    assert bob.load() is None

    bob.clear()

    assert alice.load() is not None


def test_client_slots_are_prefixed(memory_store, sample_report, sample_responses) -> None:
    client_id = new_client_id()

    ReportStorage(memory_store, client_id=client_id).save(sample_report, sample_responses)

    assert set(memory_store.data) == {f"{client_id}:{REPORT_KEY}", f"{client_id}:{RESPONSES_KEY}"}


def test_client_id_must_be_a_uuid_hex() -> None:
    assert is_valid_client_id(new_client_id()) is True
    assert is_valid_client_id("../../etc") is False
    assert is_valid_client_id("") is False

    with pytest.raises(ValueError):
        ReportStorage(JsonFileStore("unused.json"), client_id="not-a-client")
