"""KeyValueStore 测试"""

from unittest.mock import patch

from gridbrowser.storage import KeyValueStore


class TestKeyValueStore:
    def test_get_default(self, store):
        assert store.get("urls") is None
        assert store.get("urls", []) == []
        assert "urls" not in store

    def test_set_autosaves(self, store, state_file):
        store.set("zoom", 85)

        reopened = KeyValueStore(state_file)
        assert reopened.load() is True
        assert reopened.get("zoom") == 85

    def test_unchanged_value_not_written(self, store):
        store.set("zoom", 85)

        with patch("gridbrowser.storage.store.persistence.save") as save:
            store.set("zoom", 85)

        save.assert_not_called()

    def test_manual_flush(self, state_file):
        store = KeyValueStore(state_file, autosave=False)
        store.set("urls", ["https://a.com"])

        assert store.dirty
        assert not state_file.exists()

        assert store.flush() is True
        assert not store.dirty
        assert state_file.exists()

    def test_values_are_copied(self, store):
        urls = ["https://a.com"]
        store.set("urls", urls)
        urls.append("https://b.com")

        stored = store.get("urls")
        stored.append("https://c.com")

        assert store.get("urls") == ["https://a.com"]

    def test_update_writes_once(self, store):
        with patch("gridbrowser.storage.store.persistence.save", return_value=True) as save:
            store.update({"columnsCount": 4, "rowsCount": 3})

        save.assert_called_once()
        assert store.get("rowsCount") == 3

    def test_load_missing_file(self, store):
        store.set("zoom", 90)
        store.path.unlink()

        assert store.load() is False
        assert store.to_dict() == {}

    def test_load_corrupted_file(self, store, state_file):
        state_file.write_text("{{{")

        assert store.load() is False
        assert store.get("urls", []) == []

    def test_failed_flush_stays_dirty(self, store):
        with patch("gridbrowser.storage.store.persistence.save", return_value=False):
            store.set("zoom", 80)

        assert store.dirty
