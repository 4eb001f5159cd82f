"""
User data model and repository.

A user's 'chats' list is a back-reference: it is never written by the client
but appended to by the write orchestrator each time a chat naming the user is
created, in that creation order.

'UserDatabase' maps 'User' records onto the 'users' collection of a
'DocumentStore'. Ids cross this boundary as hex strings and are stored as
ObjectIds.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from messenger.store.base import DocumentStore
from messenger.utils.database import ObjectIdStr, to_object_id, to_object_ids
from messenger.utils.text import Utf8Str

USERS_COLLECTION = "users"


class User(BaseModel):
    """A registered user and the ids of the chats they belong to."""

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr | None = Field(default=None, alias="_id")
    username: str
    chats: list[ObjectIdStr] = Field(default_factory=list)
    created_at: datetime

    def to_document(self) -> dict[str, Any]:
        document: dict[str, Any] = {
            "username": self.username,
            "chats": to_object_ids(self.chats),
            "created_at": self.created_at,
        }
        if self.id is not None:
            document["_id"] = to_object_id(self.id)
        return document


class UserInput(BaseModel):
    """Request body of '/users/add'. Any other field a client sends is ignored."""

    username: Utf8Str


class UserRef(BaseModel):
    """Request body of '/chats/get'."""

    user: ObjectIdStr


class UserDatabase:
    """Repository for 'User' records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def create_user(self, user: User) -> str:
        """Insert the user and return its generated id."""
        return await self.store.insert_one(USERS_COLLECTION, user.to_document())

    async def get_user_by_id(self, user_id: str) -> User | None:
        document = await self.store.find_one(USERS_COLLECTION, {"_id": to_object_id(user_id)})
        return User.model_validate(document) if document is not None else None

    async def get_user_by_username(self, username: str) -> User | None:
        document = await self.store.find_one(USERS_COLLECTION, {"username": username})
        return User.model_validate(document) if document is not None else None

    async def add_chat(self, user_id: str, chat_id: str) -> bool:
        """Append 'chat_id' to the user's 'chats'. Returns False if the user does not exist."""
        return await self.store.update_one(
            USERS_COLLECTION,
            {"_id": to_object_id(user_id)},
            push={"chats": to_object_id(chat_id)},
        )
