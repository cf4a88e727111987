"""Tests for the local key/value storage and record persistence."""

import json

import pytest

from participant_tracker.participant import Participant
from participant_tracker.store import (
    STORAGE_KEY,
    LocalStorage,
    load_records,
    save_records,
)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "data" / "storage.json")


class TestLocalStorage:
    """Behavior of the JSON-file key/value store."""

    def test_missing_file_reads_as_empty(self, storage):
        assert storage.get_item(STORAGE_KEY) is None

    def test_set_then_get(self, storage):
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        assert storage.get_item("a") == "1"
        assert storage.get_item("b") == "2"
        assert storage.path.exists()

    def test_remove_item(self, storage):
        storage.set_item("a", "1")
        storage.remove_item("a")
        storage.remove_item("never-set")
        assert storage.get_item("a") is None

    def test_unreadable_file_reads_as_empty(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text("{not json", encoding="utf-8")
        assert storage.get_item(STORAGE_KEY) is None
        # writing replaces the broken file
        storage.set_item("a", "1")
        assert storage.get_item("a") == "1"

    def test_non_string_values_are_ignored(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text(json.dumps({"a": [1, 2]}), encoding="utf-8")
        assert storage.get_item("a") is None


class TestLoadRecords:
    """Loading falls back to an empty collection for any bad content."""

    def test_absent_key(self, storage):
        assert load_records(storage) == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            json.dumps("not an array"),
            json.dumps({"id": "1", "name": "Ali"}),
            json.dumps([{"id": "1"}]),
            json.dumps([{"id": "1", "name": "Ali", "attended": "maybe"}]),
        ],
    )
    def test_bad_content_yields_empty_collection(self, storage, raw):
        storage.set_item(STORAGE_KEY, raw)
        assert load_records(storage) == []

    def test_browser_snapshot_loads(self, storage):
        # optional keys may be absent entirely
        snapshot = [
            {
                "id": "x1",
                "name": "Ali",
                "attended": True,
                "receivedStipend": False,
                "stipendDate": None,
                "markedBy": None,
                "notes": "",
            },
            {"id": "x2", "name": "Bob", "attended": False, "receivedStipend": True},
        ]
        storage.set_item(STORAGE_KEY, json.dumps(snapshot))
        records = load_records(storage)
        assert [r.id for r in records] == ["x1", "x2"]
        assert records[0].attended is True
        assert records[1].received_stipend is True
        assert records[1].identifier is None

    def test_duplicate_ids_collapse_to_one_record(self, storage):
        snapshot = [
            {"id": "x1", "name": "Ali"},
            {"id": "x2", "name": "Bob"},
            {"id": "x1", "name": "Ali bin Ahmad", "attended": True},
        ]
        storage.set_item(STORAGE_KEY, json.dumps(snapshot))
        records = load_records(storage)
        assert [r.id for r in records] == ["x1", "x2"]
        assert records[0].name == "Ali bin Ahmad"
        assert records[0].attended is True


class TestSaveRecords:
    """Saving overwrites the whole collection."""

    def test_save_then_load(self, storage):
        records = [
            Participant(id="2", name="Bob", received_stipend=True, marked_by="Siti"),
            Participant(id="1", name="Ali"),
        ]
        save_records(storage, records)
        assert load_records(storage) == records

        stored = json.loads(storage.get_item(STORAGE_KEY))
        assert stored[0]["receivedStipend"] is True
        assert stored[0]["markedBy"] == "Siti"

    def test_save_overwrites(self, storage):
        save_records(storage, [Participant(id="1", name="Ali")])
        save_records(storage, [])
        assert load_records(storage) == []

    def test_custom_key(self, storage):
        save_records(storage, [Participant(id="1", name="Ali")], key="other:v1")
        assert load_records(storage) == []
        assert len(load_records(storage, key="other:v1")) == 1

    def test_write_failure_propagates(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = LocalStorage(blocker / "storage.json")
        with pytest.raises(OSError):
            save_records(storage, [Participant(id="1", name="Ali")])
