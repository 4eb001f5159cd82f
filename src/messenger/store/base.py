"""
Document store abstraction.

'DocumentStore' is the small query/command surface the rest of the system
needs from the database: exact-match lookup of a single document, insertion
with a store-generated id, and an update that appends to list fields and/or
sets scalar fields on one document. It offers no multi-document transactions;
the write orchestrator is built around that limitation.

Concrete implementations: 'MongoDocumentStore' (MongoDB via motor),
'InMemoryDocumentStore' (tests and local development). Implementations raise
'StoreError' for driver failures so callers never see driver exceptions.
"""

from abc import ABC, abstractmethod
from typing import Any

Document = dict[str, Any]


class DocumentStore(ABC):
    """Abstract base class for document store backends."""

    @abstractmethod
    async def find_one(self, collection: str, query: Document) -> Document | None:
        """Return the first document in 'collection' whose fields equal every item of 'query'."""
        pass

    @abstractmethod
    async def insert_one(self, collection: str, document: Document) -> str:
        """Insert 'document' and return the generated '_id' as a hex string."""
        pass

    @abstractmethod
    async def update_one(
        self,
        collection: str,
        query: Document,
        push: Document | None = None,
        set_fields: Document | None = None,
    ) -> bool:
        """Apply one combined update to the first matching document.

        Each 'push' item appends a value to a list field; each 'set_fields'
        item overwrites a field. Returns whether a document matched.
        """
        pass

    async def ping(self) -> None:
        """Check that the store is reachable. Backends without a connection need not override this."""

    async def close(self) -> None:
        """Release connections held by the backend."""
