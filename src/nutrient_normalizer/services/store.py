"""Document store interface and errors."""

from collections.abc import Iterator, Mapping, Sequence
from typing import Protocol

IndexKeys = Sequence[tuple[str, int]]


class DocumentStoreError(Exception):
    """Base error raised by document store adapters."""


class StoreUnavailableError(DocumentStoreError):
    """Raised when the store cannot be reached at all."""


class IndexConflictError(DocumentStoreError):
    """Raised when an index with the same name or key already exists."""

    def __init__(self, index_name: str, message: str) -> None:
        super().__init__(message)
        self.index_name = index_name


class BulkInsertError(DocumentStoreError):
    """Raised when a bulk insert only partially succeeded."""

    def __init__(self, inserted_count: int, message: str) -> None:
        super().__init__(message)
        self.inserted_count = inserted_count


class DocumentStore(Protocol):
    """Minimal document store capability used by the migration."""

    def list_collection_names(self) -> list[str]:
        """Return the names of all collections."""

    def count_all(self, collection: str) -> int:
        """Return the number of documents in a collection."""

    def find_all(self, collection: str) -> Iterator[dict[str, object]]:
        """Iterate over every document in a collection."""

    def find(
        self,
        collection: str,
        filter: Mapping[str, object] | None = None,  # noqa: A002
        *,
        sort: IndexKeys | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, object]]:
        """Return documents matching an equality filter."""

    def insert_many(
        self, collection: str, documents: Sequence[Mapping[str, object]]
    ) -> int:
        """Insert documents without ordering guarantees and return the count."""

    def create_index(
        self, collection: str, keys: IndexKeys, *, unique: bool, name: str
    ) -> str:
        """Create an index and return its name."""
