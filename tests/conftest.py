"""Shared test fixtures."""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field

import pytest
from bson import ObjectId

from nutrient_normalizer.config import Settings
from nutrient_normalizer.containers import AppContainer, build_services
from nutrient_normalizer.services.store import (
    BulkInsertError,
    DocumentStore,
    IndexConflictError,
    IndexKeys,
    StoreUnavailableError,
)


@dataclass
class InMemoryDocumentStore(DocumentStore):
    """In-memory document store for tests.

    Unique indexes are enforced on insert, and failures can be queued per
    collection with ``fail_next_insert``.
    """

    collections: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    indexes: dict[str, dict[str, tuple[list[str], bool]]] = field(
        default_factory=dict
    )
    insert_calls: list[tuple[str, int]] = field(default_factory=list)
    index_calls: list[str] = field(default_factory=list)
    insert_failures: dict[str, list[Exception | None]] = field(default_factory=dict)
    index_failures: dict[str, Exception] = field(default_factory=dict)
    unavailable: bool = False

    def fail_next_insert(self, collection: str, error: Exception | None) -> None:
        self.insert_failures.setdefault(collection, []).append(error)

    def _check_available(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError("connection refused")

    def list_collection_names(self) -> list[str]:
        self._check_available()
        return sorted(self.collections)

    def count_all(self, collection: str) -> int:
        self._check_available()
        return len(self.collections.get(collection, []))

    def find_all(self, collection: str) -> Iterator[dict[str, object]]:
        self._check_available()
        for document in list(self.collections.get(collection, [])):
            yield dict(document)

    def find(
        self,
        collection: str,
        filter: Mapping[str, object] | None = None,  # noqa: A002
        *,
        sort: IndexKeys | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, object]]:
        self._check_available()
        criteria = dict(filter or {})
        documents = [
            dict(document)
            for document in self.collections.get(collection, [])
            if all(document.get(key) == value for key, value in criteria.items())
        ]
        for key, direction in reversed(list(sort or [])):
            documents.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        documents = documents[skip:]
        if limit:
            documents = documents[:limit]
        return documents

    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, object]]
    ) -> int:
        self._check_available()
        self.insert_calls.append((collection, len(documents)))
        queued = self.insert_failures.get(collection)
        if queued:
            error = queued.pop(0)
            if error is not None:
                raise error
        stored = self.collections.setdefault(collection, [])
        inserted = 0
        rejected = 0
        for document in documents:
            if self._violates_unique(collection, document):
                rejected += 1
                continue
            stored.append({"_id": ObjectId(), **document})
            inserted += 1
        if rejected:
            raise BulkInsertError(inserted, f"{rejected} duplicate key errors")
        return inserted

    def create_index(
        self, collection: str, keys: IndexKeys, *, unique: bool, name: str
    ) -> str:
        self._check_available()
        self.index_calls.append(name)
        if name in self.index_failures:
            raise self.index_failures[name]
        existing = self.indexes.setdefault(collection, {})
        if name in existing:
            raise IndexConflictError(name, f"Index with name: {name} already exists")
        existing[name] = ([key for key, _ in keys], unique)
        return name

    def _violates_unique(
        self, collection: str, document: Mapping[str, object]
    ) -> bool:
        for fields, unique in self.indexes.get(collection, {}).values():
            if not unique:
                continue
            key = tuple(document.get(name) for name in fields)
            for stored in self.collections.get(collection, []):
                if tuple(stored.get(name) for name in fields) == key:
                    return True
        return False


@pytest.fixture
def settings() -> Settings:
    return Settings(
        mongo_uri="mongodb://localhost:27017",
        mongo_database="bringthediet_test",
        admin_token="admin-token",
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def container(settings: Settings, store: InMemoryDocumentStore) -> AppContainer:
    migration_service, catalog_service = build_services(settings, store)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        store=store,
        migration_service=migration_service,
        catalog_service=catalog_service,
        close_resources=close_resources,
    )


def food(food_id: object, *entries: dict[str, object]) -> dict[str, object]:
    """Build a source food document with a foodNutrients array."""
    return {
        "_id": food_id,
        "description": f"Food {food_id}",
        "foodNutrients": list(entries),
    }


def nested(number: object, name: str, unit: str, amount: object) -> dict[str, object]:
    """Build an FDC-style nested nutrient entry."""
    return {
        "nutrient": {"number": number, "name": name, "unitName": unit},
        "amount": amount,
    }
