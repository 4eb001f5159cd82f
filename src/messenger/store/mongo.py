"""
MongoDB 'DocumentStore' backed by motor.

One 'AsyncIOMotorClient' is shared by every in-flight request; the driver's
connection pool makes it safe for concurrent use. The client is created with
'tz_aware=True' so stored dates come back as UTC-aware datetimes equal to the
ones that were written.
"""

from typing import Any

import motor.motor_asyncio
from bson.errors import BSONError
from loguru import logger
from pymongo.errors import PyMongoError

from messenger.exceptions import StoreError
from messenger.store.base import Document, DocumentStore


class MongoDocumentStore(DocumentStore):
    """
    Attributes:
        database_name: Name of the database holding all collections.
    """

    def __init__(
        self,
        uri: str,
        database_name: str,
        connect_timeout: float = 10.0,
        client: motor.motor_asyncio.AsyncIOMotorClient | None = None,
    ) -> None:
        self.database_name = database_name
        self._client = client or motor.motor_asyncio.AsyncIOMotorClient(
            uri,
            tz_aware=True,
            connectTimeoutMS=int(connect_timeout * 1000),
            serverSelectionTimeoutMS=int(connect_timeout * 1000),
        )
        self._db = self._client[database_name]

    async def find_one(self, collection: str, query: Document) -> Document | None:
        try:
            document: dict[str, Any] | None = await self._db[collection].find_one(query)
        except (PyMongoError, BSONError) as exc:
            raise StoreError(f"find_one on '{collection}' failed: {exc}") from exc
        return document

    async def insert_one(self, collection: str, document: Document) -> str:
        try:
            result = await self._db[collection].insert_one(dict(document))
        except (PyMongoError, BSONError) as exc:
            raise StoreError(f"insert_one on '{collection}' failed: {exc}") from exc
        return str(result.inserted_id)

    async def update_one(
        self,
        collection: str,
        query: Document,
        push: Document | None = None,
        set_fields: Document | None = None,
    ) -> bool:
        update: dict[str, Document] = {}
        if push:
            update["$push"] = push
        if set_fields:
            update["$set"] = set_fields
        if not update:
            raise ValueError("update_one needs at least one of 'push' or 'set_fields'")
        try:
            result = await self._db[collection].update_one(query, update)
        except (PyMongoError, BSONError) as exc:
            raise StoreError(f"update_one on '{collection}' failed: {exc}") from exc
        return result.matched_count > 0

    async def ping(self) -> None:
        try:
            await self._client.admin.command("ping")
        except (PyMongoError, BSONError) as exc:
            raise StoreError(f"MongoDB is not reachable: {exc}") from exc
        logger.info(f"Connected to MongoDB database {self.database_name!r}")

    async def close(self) -> None:
        self._client.close()
