"""
============================================================================
FILE: mock_firestore.py
LOCATION: isim_api/mock_firestore.py
============================================================================

PURPOSE:
    In-memory stand-in for the subset of the Firestore client the catalogue
    gateway uses: collections, documents, filtered queries and write
    batches with create() preconditions.

ROLE IN PROJECT:
    - Default store when USE_REAL_FIREBASE is not "true" (local dev, tests)
    - Optional persistence to a JSON file (MOCK_DB_FILE) so seeded data
      survives restarts
    - Raises the same google.api_core AlreadyExists error as Firestore when
      a create() hits an existing document

KEY COMPONENTS:
    - MockFirestoreClient: Main client class (collection(), batch())
    - MockCollectionReference: document(), where(), limit(), stream()
    - MockDocumentReference: get(), set(), create(), delete()
    - MockDocumentSnapshot: Represents document state with to_dict()
    - MockQuery: where() with "==" and "in", limit()
    - MockWriteBatch: All-or-nothing commit of queued writes

DEPENDENCIES:
    - External: google-api-core (exception types only)
    - Internal: None

USAGE:
    from isim_api.mock_firestore import MockFirestoreClient

    client = MockFirestoreClient()
    names = client.collection("names")
    names.document("Deniz").create({"name": "Deniz", "gender": "Her ikisi"})
============================================================================
"""
import copy
import json
import operator
import os
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from google.api_core.exceptions import AlreadyExists

# Operators the gateway pushes down: equality for origin/inQuran,
# membership for the gender set
QUERY_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "in": lambda stored, allowed: bool(allowed) and stored in allowed,
}

Condition = Tuple[str, str, Any]


def _condition(field, op, value, filter) -> Condition:
    # FieldFilter exposes field_path/op_string/value
    if filter is not None:
        field, op, value = filter.field_path, filter.op_string, filter.value
    if op not in QUERY_OPERATORS:
        raise ValueError(f"Mock Firestore does not support the '{op}' operator")
    return field, op, value


class MockDocumentSnapshot:
    def __init__(self, reference: "MockDocumentReference", data: Optional[Dict[str, Any]]):
        self.reference = reference
        self.id = reference.id
        self.exists = data is not None
        self._data = data

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data) if self.exists else None


class MockDocumentReference:
    def __init__(self, collection: "MockCollectionReference", document_id: str):
        self.collection = collection
        self.id = document_id

    @property
    def path(self) -> str:
        return f"{self.collection.id}/{self.id}"

    @property
    def _store(self) -> Dict[str, Dict[str, Any]]:
        return self.collection.documents

    def get(self) -> MockDocumentSnapshot:
        return MockDocumentSnapshot(self, self._store.get(self.id))

    def set(self, data: Dict[str, Any]) -> None:
        with self.collection.client.lock:
            self._store[self.id] = copy.deepcopy(data)
        self.collection.client.flush()

    def create(self, data: Dict[str, Any]) -> None:
        """Write only if the document is new, like Firestore's create()."""
        with self.collection.client.lock:
            if self.id in self._store:
                raise AlreadyExists(f"Document already exists: {self.path}")
            self._store[self.id] = copy.deepcopy(data)
        self.collection.client.flush()

    def delete(self) -> None:
        with self.collection.client.lock:
            self._store.pop(self.id, None)
        self.collection.client.flush()


class MockQuery:
    def __init__(self, collection: "MockCollectionReference"):
        self.collection = collection
        self.conditions: List[Condition] = []
        self.max_results: Optional[int] = None

    def where(self, field=None, op=None, value=None, *, filter=None) -> "MockQuery":
        self.conditions.append(_condition(field, op, value, filter))
        return self

    def limit(self, count: int) -> "MockQuery":
        self.max_results = count
        return self

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        with self.collection.client.lock:
            snapshot = copy.deepcopy(self.collection.documents)

        emitted = 0
        for document_id, data in snapshot.items():
            if self.max_results is not None and emitted >= self.max_results:
                return
            if all(QUERY_OPERATORS[op](data.get(field), value) for field, op, value in self.conditions):
                emitted += 1
                yield MockDocumentSnapshot(self.collection.document(document_id), data)


class MockCollectionReference:
    def __init__(self, client: "MockFirestoreClient", name: str):
        self.client = client
        self.id = name

    @property
    def documents(self) -> Dict[str, Dict[str, Any]]:
        return self.client.collections.setdefault(self.id, {})

    def document(self, document_id: str) -> MockDocumentReference:
        return MockDocumentReference(self, document_id)

    def where(self, field=None, op=None, value=None, *, filter=None) -> MockQuery:
        return MockQuery(self).where(field, op, value, filter=filter)

    def limit(self, count: int) -> MockQuery:
        return MockQuery(self).limit(count)

    def stream(self) -> Iterator[MockDocumentSnapshot]:
        return MockQuery(self).stream()


class MockWriteBatch:
    """Queues writes and applies them all-or-nothing on commit()."""

    def __init__(self, client: "MockFirestoreClient"):
        self.client = client
        self._pending: List[Tuple[str, MockDocumentReference, Optional[Dict[str, Any]]]] = []

    def create(self, reference: MockDocumentReference, data: Dict[str, Any]) -> None:
        self._pending.append(("create", reference, data))

    def set(self, reference: MockDocumentReference, data: Dict[str, Any]) -> None:
        self._pending.append(("set", reference, data))

    def delete(self, reference: MockDocumentReference) -> None:
        self._pending.append(("delete", reference, None))

    def commit(self) -> list:
        with self.client.lock:
            # Check every create() precondition before touching anything
            claimed = set()
            for kind, reference, _ in self._pending:
                if kind != "create":
                    continue
                if reference.id in reference.collection.documents or reference.path in claimed:
                    raise AlreadyExists(f"Document already exists: {reference.path}")
                claimed.add(reference.path)

            for kind, reference, data in self._pending:
                if kind == "delete":
                    reference.collection.documents.pop(reference.id, None)
                else:
                    reference.collection.documents[reference.id] = copy.deepcopy(data)
        self._pending = []
        self.client.flush()
        return []


class MockFirestoreClient:
    """Collections held in a dict, optionally mirrored to a JSON file."""

    def __init__(self, db_file: Optional[str] = None):
        self.db_file = db_file
        self.lock = threading.RLock()
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        if db_file and os.path.exists(db_file):
            with open(db_file, "r", encoding="utf-8") as f:
                self.collections = json.load(f)

    def flush(self) -> None:
        if not self.db_file:
            return
        with self.lock:
            with open(self.db_file, "w", encoding="utf-8") as f:
                json.dump(self.collections, f, indent=2, default=str, ensure_ascii=False)

    def collection(self, name: str) -> MockCollectionReference:
        return MockCollectionReference(self, name)

    def batch(self) -> MockWriteBatch:
        return MockWriteBatch(self)
