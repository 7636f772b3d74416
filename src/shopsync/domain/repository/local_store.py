"""Abstract durable local store.

Defined in the domain layer so the queue and caches never depend on
infrastructure.  Concrete implementations (JSON files, in-memory) live
in the infrastructure layer and in the test fakes.

The store is an explicit handle: it is opened once per process, passed
to every component that needs it, and closed on shutdown.  Every call is
atomic with respect to its own collection; there are no cross-collection
transactions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

INVENTORY = "inventory"
SALES = "sales"
CUSTOMERS = "customers"
PENDING_OPERATIONS = "pending_operations"
APP_STATE = "app_state"

# Collection name -> key field.  Collections keyed by "id" auto-increment.
KEY_PATHS: dict[str, str] = {
    INVENTORY: "id",
    SALES: "id",
    CUSTOMERS: "id",
    PENDING_OPERATIONS: "id",
    APP_STATE: "key",
}

INVENTORY_LAST_SYNC = "inventory_last_sync_timestamp"

Record = dict[str, Any]


class LocalStore(ABC):

    @abstractmethod
    async def open(self) -> None:
        """Open the store.  Raises StoreUnavailableError on failure."""

    @abstractmethod
    async def close(self) -> None:
        """Release the store.  Further calls raise StoreUnavailableError."""

    @abstractmethod
    async def get_all(self, collection: str) -> list[Record]:
        """Return every record ordered by key; empty list when none."""

    @abstractmethod
    async def get(self, collection: str, key: Any) -> Record | None:
        """Return one record by key, or None."""

    @abstractmethod
    async def add(self, collection: str, record: Record) -> Any:
        """Insert a record and return its key.

        Assigns the next id when the key is absent.  Raises
        DuplicateKeyError if an explicit key already exists.
        """

    @abstractmethod
    async def put(self, collection: str, record: Record) -> Any:
        """Insert or overwrite a record by key and return the key."""

    @abstractmethod
    async def delete(self, collection: str, key: Any) -> None:
        """Remove a record.  Deleting a missing key is a no-op."""

    @abstractmethod
    async def clear(self, collection: str) -> None:
        """Remove every record in the collection."""

    @abstractmethod
    async def replace_all(self, collection: str, records: list[Record]) -> list[Any]:
        """Swap the whole collection for *records* in one write; return their keys.

        Keys are assigned as in ``add``.  If the batch is invalid (for
        example two records share a key) nothing is written and the
        previous records stay in place.
        """

    async def __aenter__(self) -> LocalStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
