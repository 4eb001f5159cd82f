"""
Read-side assembly of a user's chats and a chat's messages.

Both reads dereference an embedded id list one lookup at a time. An id that
does not resolve is never skipped: it means a back-reference points at
nothing, and 'DanglingReferenceError' surfaces that instead of returning a
silently shortened list.

Ordering is deterministic. Python's sort is stable, so entries with equal
timestamps keep the order of the embedded id list.
"""

from messenger.data_models.chat import CHATS_COLLECTION, Chat, ChatDatabase
from messenger.data_models.message import MESSAGES_COLLECTION, Message, MessageDatabase
from messenger.data_models.user import USERS_COLLECTION, UserDatabase
from messenger.exceptions import DanglingReferenceError, UnknownChatError, UnknownUserError


class QueryAssembler:
    def __init__(self, user_db: UserDatabase, chat_db: ChatDatabase, message_db: MessageDatabase) -> None:
        self.user_db = user_db
        self.chat_db = chat_db
        self.message_db = message_db

    async def get_chats(self, user_id: str) -> list[Chat]:
        """Return the user's chats, most recently active first."""
        user = await self.user_db.get_user_by_id(user_id)
        if user is None:
            raise UnknownUserError(user_id)

        chats: list[Chat] = []
        for chat_id in user.chats:
            chat = await self.chat_db.get_chat_by_id(chat_id)
            if chat is None:
                raise DanglingReferenceError(CHATS_COLLECTION, chat_id, f"{USERS_COLLECTION}/{user_id}.chats")
            chats.append(chat)
        return sorted(chats, key=lambda c: c.last_message_at, reverse=True)

    async def get_messages(self, chat_id: str) -> list[Message]:
        """Return the chat's messages, oldest first."""
        chat = await self.chat_db.get_chat_by_id(chat_id)
        if chat is None:
            raise UnknownChatError(chat_id)

        messages: list[Message] = []
        for message_id in chat.messages:
            message = await self.message_db.get_message_by_id(message_id)
            if message is None:
                raise DanglingReferenceError(MESSAGES_COLLECTION, message_id, f"{CHATS_COLLECTION}/{chat_id}.messages")
            messages.append(message)
        return sorted(messages, key=lambda m: m.created_at)
