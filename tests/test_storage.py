import logging

from partyconnect.core.storage import FileKeyValueStorage, JsonSlot, MemoryKeyValueStorage


def test_file_storage_set_get_remove(tmp_path):
    storage = FileKeyValueStorage(tmp_path / "kv")

    assert storage.get("event-storage") is None
    storage.set("event-storage", '{"events": []}')
    assert storage.get("event-storage") == '{"events": []}'
    assert (tmp_path / "kv" / "event-storage.json").is_file()
    assert not list((tmp_path / "kv").glob("*.tmp"))

    storage.remove("event-storage")
    storage.remove("event-storage")
    assert storage.get("event-storage") is None


def test_file_storage_keys_are_reversible(tmp_path):
    storage = FileKeyValueStorage(tmp_path)
    storage.set("user_a/b_messages", "[]")
    storage.set("event-storage", "{}")

    assert sorted(storage.keys()) == ["event-storage", "user_a/b_messages"]


def test_file_storage_keys_on_missing_dir(tmp_path):
    assert list(FileKeyValueStorage(tmp_path / "missing").keys()) == []


def test_json_slot_round_trip():
    slot = JsonSlot(MemoryKeyValueStorage(), "k")
    assert slot.load() is None
    assert slot.save({"a": [1, "ü"]}) is True
    assert slot.load() == {"a": [1, "ü"]}
    slot.clear()
    assert slot.load() is None


def test_json_slot_corrupt_payload_loads_as_none(caplog):
    slot = JsonSlot(MemoryKeyValueStorage({"k": "{oops"}), "k")
    with caplog.at_level(logging.WARNING, logger="partyconnect.core.storage"):
        assert slot.load() is None
    assert "corrupt payload" in caplog.text


def test_json_slot_reports_failed_writes():
    class ReadOnly(MemoryKeyValueStorage):
        def set(self, key, value):
            raise PermissionError("read-only")

    assert JsonSlot(ReadOnly(), "k").save({"a": 1}) is False
    assert JsonSlot(MemoryKeyValueStorage(), "k").save({"a": object()}) is False
