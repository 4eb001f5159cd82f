"""
Process-local 'DocumentStore'.

Documents are deep-copied on the way in and on the way out so callers can
never mutate stored state through a returned reference, mirroring the
isolation a real database gives. Collections keep insertion order, which is
the order 'find_one' scans in. Like a unique index on '_id', inserting a
document whose id is already stored fails with 'StoreError'.
"""

import copy
from collections import defaultdict

from messenger.exceptions import StoreError
from messenger.store.base import Document, DocumentStore
from messenger.utils.database import generate_uid


class InMemoryDocumentStore(DocumentStore):
    def __init__(self) -> None:
        self.collections: defaultdict[str, list[Document]] = defaultdict(list)

    @staticmethod
    def _matches(document: Document, query: Document) -> bool:
        return all(field in document and document[field] == value for field, value in query.items())

    def _find(self, collection: str, query: Document) -> Document | None:
        return next((doc for doc in self.collections[collection] if self._matches(doc, query)), None)

    async def find_one(self, collection: str, query: Document) -> Document | None:
        document = self._find(collection, query)
        return copy.deepcopy(document) if document is not None else None

    async def insert_one(self, collection: str, document: Document) -> str:
        stored = copy.deepcopy(document)
        if "_id" in stored and self._find(collection, {"_id": stored["_id"]}) is not None:
            raise StoreError(f"insert_one on '{collection}' failed: duplicate _id {stored['_id']}")
        stored.setdefault("_id", generate_uid())
        self.collections[collection].append(stored)
        return str(stored["_id"])

    async def update_one(
        self,
        collection: str,
        query: Document,
        push: Document | None = None,
        set_fields: Document | None = None,
    ) -> bool:
        document = self._find(collection, query)
        if document is None:
            return False
        for field, value in (push or {}).items():
            document.setdefault(field, []).append(copy.deepcopy(value))
        for field, value in (set_fields or {}).items():
            document[field] = copy.deepcopy(value)
        return True

    def count(self, collection: str) -> int:
        return len(self.collections[collection])
