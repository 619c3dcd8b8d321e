from __future__ import annotations

from app.client.local_history import (
    HISTORY_KEY,
    JsonFileStorage,
    LocalHistoryEntry,
    LocalHistoryStore,
    MemoryStorage,
)


def _entry(i: int, rid: str | None = None) -> LocalHistoryEntry:
    return LocalHistoryEntry(
        original_text=f"original text {i}",
        summary=f"summary {i}",
        created_at=f"2024-01-01T00:00:{i:02d}.000Z",
        id=rid,
    )


def test_add_is_most_recent_first():
    store = LocalHistoryStore(MemoryStorage())
    store.add(_entry(1))
    store.add(_entry(2))
    assert [e.created_at for e in store.load()] == [_entry(2).created_at, _entry(1).created_at]


def test_capacity_evicts_oldest():
    store = LocalHistoryStore(MemoryStorage())
    for i in range(60):
        store.add(_entry(i))
    items = store.load()
    assert len(items) == 50
    assert items[0] == _entry(59)
    assert items[-1] == _entry(10)


def test_attach_id_marks_entry_saved():
    store = LocalHistoryStore(MemoryStorage())
    store.add(_entry(1))
    store.add(_entry(2))
    assert store.attach_id(_entry(1).created_at, "rec-1") is True
    items = store.load()
    assert items[1].id == "rec-1"
    assert items[1].saved
    assert not items[0].saved


def test_attach_id_without_match_is_noop():
    storage = MemoryStorage()
    store = LocalHistoryStore(storage)
    store.add(_entry(1))
    before = storage.get_item(HISTORY_KEY)
    assert store.attach_id("1999-01-01T00:00:00.000Z", "rec-x") is False
    assert storage.get_item(HISTORY_KEY) == before


def test_clear_removes_everything():
    storage = MemoryStorage()
    store = LocalHistoryStore(storage)
    store.add(_entry(1))
    store.clear()
    assert store.load() == []
    assert storage.get_item(HISTORY_KEY) is None


def test_corrupt_storage_reads_as_empty():
    storage = MemoryStorage()
    storage.set_item(HISTORY_KEY, "{not json")
    assert LocalHistoryStore(storage).load() == []
    storage.set_item(HISTORY_KEY, '[{"summary": "missing fields"}]')
    assert LocalHistoryStore(storage).load() == []


def test_serialized_form_omits_missing_id():
    assert "id" not in _entry(1).to_dict()
    data = _entry(1, "abc").to_dict()
    assert data["id"] == "abc"
    assert LocalHistoryEntry.from_dict(data) == _entry(1, "abc")


def test_search_matches_either_field():
    store = LocalHistoryStore(MemoryStorage())
    store.add(LocalHistoryEntry("an original about Foo", "s", "t1"))
    store.add(LocalHistoryEntry("plain original", "summary with FOO", "t2"))
    store.add(LocalHistoryEntry("plain original", "plain summary", "t3"))
    assert [e.created_at for e in store.search("foo")] == ["t2", "t1"]
    assert len(store.search(None)) == 3
    assert len(store.search("", limit=2)) == 2


def test_json_file_storage_persists(tmp_path):
    path = tmp_path / "nested" / "history.json"
    LocalHistoryStore(JsonFileStorage(path)).add(_entry(1, "rec-1"))
    reopened = LocalHistoryStore(JsonFileStorage(path))
    assert reopened.load() == [_entry(1, "rec-1")]
    reopened.clear()
    assert LocalHistoryStore(JsonFileStorage(path)).load() == []


def test_json_file_storage_keeps_other_keys(tmp_path):
    storage = JsonFileStorage(tmp_path / "store.json")
    storage.set_item("other", "value")
    LocalHistoryStore(storage).add(_entry(1))
    LocalHistoryStore(storage).clear()
    assert storage.get_item("other") == "value"


def test_corrupt_file_is_replaced_on_add(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalHistoryStore(JsonFileStorage(path))
    assert store.load() == []

    store.add(_entry(1))
    assert LocalHistoryStore(JsonFileStorage(path)).load() == [_entry(1)]


def test_corrupt_file_can_be_cleared(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("{not json", encoding="utf-8")
    store = LocalHistoryStore(JsonFileStorage(path))
    store.clear()
    assert store.load() == []
    assert store.attach_id("missing", "rec-1") is False


def test_search_folds_non_ascii_case():
    store = LocalHistoryStore(MemoryStorage())
    store.add(LocalHistoryEntry("an original about the École", "s", "t1"))
    assert [e.created_at for e in store.search("école")] == ["t1"]
