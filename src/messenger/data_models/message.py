"""
Message data model and repository.

A message points at exactly one chat and one author. The reverse pointer,
the message id inside 'Chat.messages', is written after the message itself.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from messenger.store.base import DocumentStore
from messenger.utils.database import ObjectIdStr, to_object_id
from messenger.utils.text import Utf8Str

MESSAGES_COLLECTION = "messages"


class Message(BaseModel):
    """A single message posted by a chat member."""

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr | None = Field(default=None, alias="_id")
    chat: ObjectIdStr
    author: ObjectIdStr
    text: str
    created_at: datetime

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "chat": to_object_id(self.chat),
            "author": to_object_id(self.author),
            "text": self.text,
            "created_at": self.created_at,
        }
        if self.id is not None:
            document["_id"] = to_object_id(self.id)
        return document


class MessageInput(BaseModel):
    """Request body of '/messages/add'."""

    chat: ObjectIdStr
    author: ObjectIdStr
    text: Utf8Str


class MessageDatabase:
    """Repository for 'Message' records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create_message(self, message: Message) -> str:
        return await self.store.insert_one(MESSAGES_COLLECTION, message.to_document())

    async def get_message_by_id(self, message_id: str) -> Message | None:
        document = await self.store.find_one(MESSAGES_COLLECTION, {"_id": to_object_id(message_id)})
        return Message.model_validate(document) if document is not None else None
