"""
Tests for the JSON document store: queries, versioned updates and recovery
from a corrupted collection file.
"""

import json
import os

import pytest

from civic_backend.database import DocumentStore, check_id, is_valid_id, new_id, public
from civic_backend.errors import ConflictError, ValidationError


def test_open_creates_collection_files(tmp_path):
    store = DocumentStore(str(tmp_path / "db")).open()
    for name in ("users", "reports", "departments", "notifications"):
        assert json.loads((tmp_path / "db" / f"{name}.json").read_text()) == []
    assert store.is_open


def test_closed_store_refuses_reads(tmp_path):
    store = DocumentStore(str(tmp_path / "db")).open()
    store.close()
    with pytest.raises(RuntimeError):
        store.find("users")


def test_insert_find_and_where(store):
    a = store.insert("reports", {"title": "a", "status": "submitted"})
    store.insert("reports", {"title": "b", "status": "resolved"})

    assert is_valid_id(a["_id"])
    assert [d["title"] for d in store.find("reports", {"status": "submitted"})] == ["a"]
    assert store.count("reports", where=lambda d: d["title"] in ("a", "b")) == 2
    assert store.find_one("reports", {"status": "closed"}) is None


def test_versioned_update(store):
    doc = store.insert("reports", {"title": "a", "version": 0})

    updated = store.update("reports", doc["_id"], {"title": "b"}, expected_version=0)
    assert updated["version"] == 1
    assert updated["title"] == "b"

    with pytest.raises(ConflictError):
        store.update("reports", doc["_id"], {"title": "c"}, expected_version=0)
    assert store.get("reports", doc["_id"])["title"] == "b"


def test_update_missing_document(store):
    assert store.update("reports", new_id(), {"title": "x"}) is None


def test_update_many_push_pull_delete(store):
    user = store.insert("users", {"name": "u", "notifications": []})
    for read in (False, False, True):
        store.insert("notifications", {"recipient": user["_id"], "read": read})

    assert store.update_many("notifications", {"read": True}, {"read": False}) == 2
    assert store.count("notifications", {"read": True}) == 3

    assert store.push("users", user["_id"], "notifications", "n1")
    assert store.pull("users", user["_id"], "notifications", "n1")
    assert not store.pull("users", user["_id"], "notifications", "n1")

    assert store.delete("users", user["_id"])
    assert not store.delete("users", user["_id"])


def test_corrupted_file_is_reset(store):
    with open(os.path.join(store.data_dir, "reports.json"), "w") as f:
        f.write("{not json")
    assert store.find("reports") == []
    store.insert("reports", {"title": "fresh"})
    assert store.count("reports") == 1


def test_unknown_collection(store):
    with pytest.raises(KeyError):
        store.find("widgets")


def test_public_renames_id():
    assert public({"_id": "abc", "title": "t"}) == {"id": "abc", "title": "t"}


def test_check_id():
    good = new_id()
    assert check_id(good) == good
    with pytest.raises(ValidationError) as exc:
        check_id("123", "report ID")
    assert exc.value.message == "Invalid report ID"
