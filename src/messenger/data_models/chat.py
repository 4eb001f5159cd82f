"""
Chat data model and repository.

'users' is fixed when the chat is created. 'messages' and 'last_message_at'
are maintained by the write orchestrator with one combined update per new
message, so the two never drift apart unless that update itself fails.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from messenger.store.base import DocumentStore
from messenger.utils.database import ObjectIdStr, to_object_id, to_object_ids
from messenger.utils.text import Utf8Str

CHATS_COLLECTION = "chats"


class Chat(BaseModel):
    """
    A named group of users and the ordered ids of its messages.

    'last_message_at' starts equal to 'created_at' and afterwards tracks the
    'created_at' of the newest message.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr | None = Field(default=None, alias="_id")
    name: str
    users: list[ObjectIdStr] = Field(default_factory=list)
    messages: list[ObjectIdStr] = Field(default_factory=list)
    created_at: datetime
    last_message_at: datetime

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "name": self.name,
            "users": to_object_ids(self.users),
            "messages": to_object_ids(self.messages),
            "created_at": self.created_at,
            "last_message_at": self.last_message_at,
        }
        if self.id is not None:
            document["_id"] = to_object_id(self.id)
        return document


class ChatInput(BaseModel):
    """Request body of '/chats/add'. Repeated user ids collapse to their first occurrence."""

    name: Utf8Str
    users: list[ObjectIdStr] = Field(default_factory=list)

    @field_validator("users")
    @classmethod
    def _unique_users(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))


class ChatRef(BaseModel):
    """Request body of '/messages/get'."""

    chat: ObjectIdStr


class ChatDatabase:
    """Repository for 'Chat' records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create_chat(self, chat: Chat) -> str:
        return await self.store.insert_one(CHATS_COLLECTION, chat.to_document())

    async def get_chat_by_id(self, chat_id: str) -> Chat | None:
        document = await self.store.find_one(CHATS_COLLECTION, {"_id": to_object_id(chat_id)})
        return Chat.model_validate(document) if document is not None else None

    async def get_chat_by_name(self, name: str) -> Chat | None:
        document = await self.store.find_one(CHATS_COLLECTION, {"name": name})
        return Chat.model_validate(document) if document is not None else None

    async def add_message(self, chat_id: str, message_id: str, timestamp: datetime) -> bool:
        """Append 'message_id' and move 'last_message_at' in a single update. Returns False if the chat does not exist."""
        return await self.store.update_one(
            CHATS_COLLECTION,
            {"_id": to_object_id(chat_id)},
            push={"messages": to_object_id(message_id)},
            set_fields={"last_message_at": timestamp},
        )
