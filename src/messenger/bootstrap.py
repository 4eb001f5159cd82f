"""
Construction of the store and controller from 'Settings'.

This is the only place that decides which 'DocumentStore' backend runs; the
rest of the system receives the store handle by injection.
"""

from loguru import logger

from messenger.config import Settings
from messenger.controller import MessengerController
from messenger.store.base import DocumentStore
from messenger.store.in_memory import InMemoryDocumentStore
from messenger.store.mongo import MongoDocumentStore


def build_store(settings: Settings) -> DocumentStore:
    match settings.STORE_BACKEND:
        case "mongo":
            logger.info(f"Store backend: MongoDB (database {settings.DATABASE_NAME!r})")
            return MongoDocumentStore(
                uri=settings.MONGO_URI.get_secret_value(),
                database_name=settings.DATABASE_NAME,
                connect_timeout=settings.CONNECT_TIMEOUT,
            )
        case "memory":
            logger.warning("Store backend: in-memory, data is lost on restart")
            return InMemoryDocumentStore()
        case _:
            raise ValueError(f"Unsupported store backend {settings.STORE_BACKEND!r}. Choose 'mongo' or 'memory'.")


def build_controller(settings: Settings) -> MessengerController:
    return MessengerController(build_store(settings), operation_timeout=settings.OPERATION_TIMEOUT)
