import pytest

from schemas.packing_schema import GeneratorInput
from services import firebase_service, itinerary_service, packing_service


class FakeReference:
    """Just enough of firebase_admin.db.Reference for the storage services."""

    def __init__(self, store, path):
        self._store = store
        self._parts = [part for part in path.strip("/").split("/") if part]

    def get(self):
        node = self._store.data
        for part in self._parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def set(self, value):
        node = self._store.data
        for part in self._parts[:-1]:
            node = node.setdefault(part, {})
        node[self._parts[-1]] = value

    def delete(self):
        node = self._store.data
        for part in self._parts[:-1]:
            node = node.get(part, {})
        node.pop(self._parts[-1], None)

    def transaction(self, update):
        value = update(self.get())
        self.set(value)
        return value


class FakeDatabase:
    def __init__(self):
        self.data = {}

    def reference(self, path="/"):
        return FakeReference(self, path)


@pytest.fixture
def fake_db(monkeypatch):
    database = FakeDatabase()
    for module in (firebase_service, packing_service, itinerary_service):
        monkeypatch.setattr(module, "db", database)
    return database


@pytest.fixture
def oslo_business_trip():
    return GeneratorInput(
        destination="Oslo",
        days=10,
        season="winter",
        trip_type="business",
        activities="business meetings",
    )


@pytest.fixture
def beach_trip():
    return GeneratorInput(
        destination="Algarve",
        days=5,
        season="summer",
        trip_type="leisure",
        activities="beach, swimming",
    )
