from messenger.store.base import Document, DocumentStore
from messenger.store.in_memory import InMemoryDocumentStore
from messenger.store.mongo import MongoDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MongoDocumentStore",
]
