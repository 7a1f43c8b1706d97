"""
Tests for the JSON document store.
"""
import json
import shutil
import tempfile
import threading
from pathlib import Path

import pytest

from membership_service.document_store import DocumentStoreError, JsonDocumentStore


class TestJsonDocumentStore:

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = JsonDocumentStore(self.temp_dir / "data")

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_get_missing_returns_none(self):
        assert self.store.get("users", "nobody") is None

    def test_set_and_get(self):
        self.store.set("users", "u1", {"email": "a@example.com"})
        assert self.store.get("users", "u1") == {"email": "a@example.com"}
        assert (self.temp_dir / "data" / "users" / "u1.json").exists()

    def test_no_temp_files_left_behind(self):
        self.store.set("users", "u1", {"x": 1})
        leftovers = [p.name for p in (self.temp_dir / "data" / "users").iterdir() if not p.name.endswith(".json")]
        assert leftovers == []

    def test_update_merges_fields(self):
        self.store.set("users", "u1", {"email": "a@example.com", "tier": "A"})
        merged = self.store.update("users", "u1", {"tier": "B"})
        assert merged == {"email": "a@example.com", "tier": "B"}
        assert self.store.get("users", "u1")["tier"] == "B"

    def test_update_missing_raises(self):
        with pytest.raises(DocumentStoreError):
            self.store.update("users", "ghost", {"tier": "B"})

    def test_delete(self):
        self.store.set("users", "u1", {})
        assert self.store.delete("users", "u1") is True
        assert self.store.delete("users", "u1") is False

    def test_list_and_find(self):
        self.store.set("users", "u1", {"email": "a@example.com"})
        self.store.set("users", "u2", {"email": "b@example.com"})

        docs = self.store.list("users")
        assert {d["id"] for d in docs} == {"u1", "u2"}

        found = self.store.find_one("users", "email", "b@example.com")
        assert found["id"] == "u2"
        assert self.store.find_one("users", "email", "c@example.com") is None
        assert len(self.store.find_all("users", "email", "a@example.com")) == 1

    def test_list_skips_corrupt_documents(self):
        self.store.set("users", "good", {"ok": True})
        (self.temp_dir / "data" / "users" / "bad.json").write_text("{not json", encoding="utf-8")
        assert [d["id"] for d in self.store.list("users")] == ["good"]

    def test_get_corrupt_document_raises(self):
        path = self.temp_dir / "data" / "users" / "bad.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DocumentStoreError):
            self.store.get("users", "bad")

    @pytest.mark.parametrize("bad_id", ["", "../etc", "a/b", "a\\b", ".hidden"])
    def test_invalid_ids_rejected(self, bad_id):
        assert not JsonDocumentStore.is_valid_id(bad_id)
        with pytest.raises(DocumentStoreError):
            self.store.set("users", bad_id, {})

    def test_clear(self):
        self.store.set("articles", "a1", {})
        self.store.set("articles", "a2", {})
        assert self.store.clear("articles") == 2
        assert self.store.list("articles") == []

    def test_new_ids_are_unique(self):
        assert len({self.store.new_id() for _ in range(100)}) == 100

    def test_transaction_serializes_read_modify_write(self):
        self.store.set("counters", "c", {"n": 0})

        def bump():
            for _ in range(50):
                with self.store.transaction():
                    n = self.store.get("counters", "c")["n"]
                    self.store.set("counters", "c", {"n": n + 1})

        threads = [threading.Thread(target=bump) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert self.store.get("counters", "c")["n"] == 200

    def test_values_serialized_as_json(self):
        self.store.set("users", "u1", {"tags": ["a", "b"], "n": 1})
        raw = json.loads((self.temp_dir / "data" / "users" / "u1.json").read_text(encoding="utf-8"))
        assert raw == {"tags": ["a", "b"], "n": 1}
