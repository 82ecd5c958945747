"""MongoDB implementation of the document store."""

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import (
    BulkWriteError,
    ConnectionFailure,
    OperationFailure,
    PyMongoError,
)

from nutrient_normalizer.config import Settings
from nutrient_normalizer.services.store import (
    BulkInsertError,
    DocumentStore,
    DocumentStoreError,
    IndexConflictError,
    IndexKeys,
    StoreUnavailableError,
)

# IndexAlreadyExists, IndexOptionsConflict, IndexKeySpecsConflict
INDEX_CONFLICT_CODES = frozenset({68, 85, 86})


def create_mongo_client(settings: Settings) -> MongoClient:
    """Create a MongoDB client with timeouts from settings."""
    return MongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        connectTimeoutMS=settings.mongo_connect_timeout_ms,
        socketTimeoutMS=settings.mongo_socket_timeout_ms,
        retryWrites=False,
    )


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    try:
        yield
    except ConnectionFailure as exc:
        raise StoreUnavailableError(
            f"MongoDB unreachable during {action}: {exc}"
        ) from exc
    except PyMongoError as exc:
        raise DocumentStoreError(f"MongoDB {action} failed: {exc}") from exc


@dataclass
class MongoDocumentStore(DocumentStore):
    """pymongo-backed document store."""

    database: Database

    @classmethod
    def create(cls, client: MongoClient, database_name: str) -> "MongoDocumentStore":
        """Create a store bound to one database of a client."""
        return cls(database=client[database_name])

    def list_collection_names(self) -> list[str]:
        """Return the names of all collections in the database."""
        with _translate_errors("list_collection_names"):
            return self.database.list_collection_names()

    def count_all(self, collection: str) -> int:
        """Return the number of documents in a collection."""
        with _translate_errors(f"count on {collection}"):
            return self.database[collection].count_documents({})

    def find_all(self, collection: str) -> Iterator[dict[str, object]]:
        """Iterate over every document in a collection."""
        with _translate_errors(f"find on {collection}"):
            yield from self.database[collection].find({})

    def find(
        self,
        collection: str,
        filter: Mapping[str, object] | None = None,  # noqa: A002
        *,
        sort: IndexKeys | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, object]]:
        """Return documents matching a filter."""
        with _translate_errors(f"find on {collection}"):
            cursor = self.database[collection].find(dict(filter or {}))
            if sort:
                cursor = cursor.sort(list(sort))
            if skip:
                cursor = cursor.skip(skip)
            if limit:
                cursor = cursor.limit(limit)
            return list(cursor)

    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, object]]
    ) -> int:
        """Insert documents unordered and return how many were written."""
        if not documents:
            return 0
        # insert_many adds _id to the dicts it is given.
        payload = [dict(document) for document in documents]
        try:
            with _translate_errors(f"insert_many on {collection}"):
                result = self.database[collection].insert_many(payload, ordered=False)
        except DocumentStoreError as exc:
            cause = exc.__cause__
            if isinstance(cause, BulkWriteError):
                inserted = int(cause.details.get("nInserted", 0))
                write_errors = cause.details.get("writeErrors", [])
                raise BulkInsertError(
                    inserted,
                    f"{len(write_errors)} write errors on {collection}: "
                    f"{_first_error_message(write_errors)}",
                ) from cause
            raise
        return len(result.inserted_ids)

    def create_index(
        self, collection: str, keys: IndexKeys, *, unique: bool, name: str
    ) -> str:
        """Create an index, raising IndexConflictError when it already exists."""
        try:
            with _translate_errors(f"create_index {name}"):
                return self.database[collection].create_index(
                    list(keys), unique=unique, name=name
                )
        except DocumentStoreError as exc:
            cause = exc.__cause__
            conflict = (
                isinstance(cause, OperationFailure)
                and cause.code in INDEX_CONFLICT_CODES
            )
            if conflict:
                raise IndexConflictError(name, str(cause)) from cause
            raise


def _first_error_message(write_errors: list[dict[str, object]]) -> str:
    if not write_errors:
        return "unknown error"
    return str(write_errors[0].get("errmsg", "unknown error"))
