# backend/tests/test_firestore_store.py

from typing import Any, Dict, List, Optional

import pytest
from google.api_core import exceptions as google_exceptions

from app.family.firestore_store import FirestoreDocumentStore
from app.family.store import DocumentStoreError


class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]) -> None:
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, client: "FakeFirestore", collection: str, doc_id: str) -> None:
        self._client = client
        self._collection = collection
        self._doc_id = doc_id

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self._doc_id, self._client.data[self._collection].get(self._doc_id))

    def update(self, fields: Dict[str, Any]) -> None:
        self._client.updates.append((self._collection, self._doc_id, fields))
        self._client.data[self._collection][self._doc_id].update(fields)


class FakeQuery:
    def __init__(self, client: "FakeFirestore", collection: str, flt) -> None:
        self._client = client
        self._collection = collection
        self._filter = flt

    def stream(self):
        self._client.filters.append(
            (self._collection, self._filter.field_path, self._filter.op_string, self._filter.value)
        )
        for doc_id, data in self._client.data[self._collection].items():
            if data.get(self._filter.field_path) == self._filter.value:
                yield FakeSnapshot(doc_id, data)


class FakeCollection:
    def __init__(self, client: "FakeFirestore", name: str) -> None:
        self._client = client
        self._name = name

    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self._client, self._name, doc_id)

    def where(self, *, filter) -> FakeQuery:  # noqa: A002 - Firestore のキーワード名に合わせる
        return FakeQuery(self._client, self._name, filter)


class FakeFirestore:
    """firestore.Client のうち、ストアが使う部分だけを再現したフェイク。"""

    def __init__(self) -> None:
        self.data: Dict[str, Dict[str, Dict[str, Any]]] = {"users": {}, "pets": {}, "pet_tasks": {}}
        self.updates: List[tuple] = []
        self.filters: List[tuple] = []

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)


@pytest.fixture
def fake_db() -> FakeFirestore:
    db = FakeFirestore()
    db.data["users"] = {
        "u1": {"familyCode": "F1", "displayName": "Ana", "fcmTokens": ["t1"]},
        "u2": {"familyCode": "F1", "fcmTokens": "garbage"},
        "u3": {"familyCode": "F2", "fcmTokens": ["t3"]},
    }
    db.data["pets"] = {"p1": {"familyCode": "F1", "name": "Rex", "species": "cachorro"}}
    db.data["pet_tasks"] = {
        "k1": {"familyCode": "F1", "petId": "p1", "title": "Banho", "done": True},
        "k2": {"familyCode": "F2", "petId": "p1", "title": "Outro", "done": False},
    }
    return db


def test_get_user_and_missing_user(fake_db) -> None:
    store = FirestoreDocumentStore(client=fake_db)

    user = store.get_user("u1")

    assert user.family_code == "F1"
    assert user.display_name == "Ana"
    assert user.fcm_tokens == ["t1"]
    assert store.get_user("nobody") is None


def test_query_users_filters_by_family_code_in_store(fake_db) -> None:
    store = FirestoreDocumentStore(client=fake_db)

    users = store.query_users_by_family("F1")

    assert sorted(u.id for u in users) == ["u1", "u2"]
    assert next(u for u in users if u.id == "u2").fcm_tokens == []
    assert fake_db.filters == [("users", "familyCode", "==", "F1")]


def test_tasks_are_filtered_by_family_code(fake_db) -> None:
    store = FirestoreDocumentStore(client=fake_db)

    tasks = store.query_tasks_by_family("F1")

    assert [t.id for t in tasks] == ["k1"]
    assert fake_db.filters == [("pet_tasks", "familyCode", "==", "F1")]


def test_pets_lookup_and_query(fake_db) -> None:
    store = FirestoreDocumentStore(client=fake_db)

    assert store.get_pet("p1").name == "Rex"
    assert store.get_pet("p9") is None
    assert [p.id for p in store.query_pets_by_family("F1")] == ["p1"]


def test_update_user_writes_partial_fields(fake_db) -> None:
    store = FirestoreDocumentStore(client=fake_db)

    store.update_user("u1", {"fcmTokens": []})

    assert fake_db.updates == [("users", "u1", {"fcmTokens": []})]
    assert fake_db.data["users"]["u1"]["displayName"] == "Ana"


def test_google_api_errors_are_wrapped(fake_db, monkeypatch) -> None:
    def unavailable(self):
        raise google_exceptions.ServiceUnavailable("firestore down")

    monkeypatch.setattr(FakeDocument, "get", unavailable)
    store = FirestoreDocumentStore(client=fake_db)

    with pytest.raises(DocumentStoreError):
        store.get_user("u1")
