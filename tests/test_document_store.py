"""Tests for the SQLite backed document store."""

import pytest

from clinic_directory_api.app.core.documents import (
    CLINICS,
    DOCTORS,
    HEALTH_SERVICES,
    DocumentStore,
    Patch,
)
from clinic_directory_api.app.core.errors import DuplicateKeyError, StorageError


def test_patch_apply_reports_changes():
    document = {"id": "x", "name": "A", "doctors": {"d1"}}
    assert Patch.add("doctors", "d1").apply(document) is False
    assert Patch.add("doctors", "d2").apply(document) is True
    assert document["doctors"] == {"d1", "d2"}
    assert Patch.remove("doctors", "d1").apply(document) is True
    assert document["doctors"] == {"d2"}
    assert Patch.assign(name="A").apply(document) is False
    assert Patch.assign(name="B").apply(document) is True


def test_insert_and_find(database_path):
    store = DocumentStore(database_path, CLINICS)
    clinic = store.insert_one({"name": "North"})

    assert len(clinic["id"]) == 32
    assert clinic["doctors"] == set()
    assert clinic["health_services"] == set()
    assert store.find_by_id(clinic["id"]) == clinic
    assert store.find_by_id("0" * 32) is None


def test_find_by_ids_skips_unknown(database_path):
    store = DocumentStore(database_path, DOCTORS)
    first = store.insert_one({"name": "A"})
    second = store.insert_one({"name": "B"})

    found = store.find_by_ids([first["id"], second["id"], "f" * 32])
    assert {doc["id"] for doc in found} == {first["id"], second["id"]}
    assert store.find_by_ids([]) == []


def test_update_one_applies_patch_and_persists_sets(database_path):
    store = DocumentStore(database_path, CLINICS)
    clinic = store.insert_one({"name": "North"})

    updated = store.update_one(
        clinic["id"], Patch(add_ids={"doctors": {"d1", "d2"}, "health_services": {"h1"}})
    )
    assert updated["doctors"] == {"d1", "d2"}
    assert updated["health_services"] == {"h1"}

    updated = store.update_one(clinic["id"], Patch.remove("doctors", "d1"))
    assert store.find_by_id(clinic["id"])["doctors"] == {"d2"}
    assert updated["doctors"] == {"d2"}


def test_update_one_missing_document_returns_none(database_path):
    store = DocumentStore(database_path, CLINICS)
    assert store.update_one("0" * 32, Patch.assign(name="x")) is None


def test_update_many_counts_only_modified_documents(database_path):
    store = DocumentStore(database_path, DOCTORS)
    a = store.insert_one({"name": "A", "clinics": {"c1"}})
    b = store.insert_one({"name": "B", "clinics": {"c1", "c2"}})
    c = store.insert_one({"name": "C", "clinics": {"c2"}})

    assert store.update_many({"clinics": "c1"}, Patch.remove("clinics", "c1")) == 2
    assert store.find_by_id(a["id"])["clinics"] == set()
    assert store.find_by_id(b["id"])["clinics"] == {"c2"}
    assert store.find_by_id(c["id"])["clinics"] == {"c2"}

    assert store.update_many({"clinics": "c1"}, Patch.remove("clinics", "c1")) == 0


def test_find_filters_sorts_and_paginates(database_path):
    store = DocumentStore(database_path, CLINICS)
    store.insert_one({"name": "Beta", "doctors": {"d1"}})
    store.insert_one({"name": "Alpha", "doctors": {"d1"}})
    store.insert_one({"name": "Gamma"})

    names = [doc["name"] for doc in store.find({"doctors": "d1"}, sort_by="name")]
    assert names == ["Alpha", "Beta"]

    names = [doc["name"] for doc in store.find(sort_by="name", order="desc", limit=2)]
    assert names == ["Gamma", "Beta"]

    assert [doc["name"] for doc in store.find({"name": "Gamma"})] == ["Gamma"]


def test_unique_name_violation(database_path):
    store = DocumentStore(database_path, HEALTH_SERVICES)
    store.insert_one({"name": "MRI"})
    with pytest.raises(DuplicateKeyError):
        store.insert_one({"name": "MRI"})


def test_unknown_fields_are_rejected(database_path):
    store = DocumentStore(database_path, CLINICS)
    with pytest.raises(ValueError):
        store.update_many({"bogus": "x"}, Patch())
    with pytest.raises(ValueError):
        store.update_many({}, Patch.add("name", "x"))
    with pytest.raises(ValueError):
        store.update_one("0" * 32, Patch.assign(id="y"))


def test_delete_one(database_path):
    store = DocumentStore(database_path, HEALTH_SERVICES)
    service = store.insert_one({"name": "X-ray"})
    assert store.delete_one(service["id"]) is True
    assert store.delete_one(service["id"]) is False
    assert store.find_by_id(service["id"]) is None


def test_storage_failure_raises_storage_error(tmp_path):
    store = DocumentStore(str(tmp_path / "unmigrated.db"), CLINICS)
    with pytest.raises(StorageError, match="clinics DB update error"):
        store.update_many({"doctors": "x"}, Patch.remove("doctors", "x"))
    with pytest.raises(StorageError):
        store.find({"doctors": "x"})
