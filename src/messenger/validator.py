"""
Integrity checks run before any mutating write.

Every check only reads from the store, so a rejected request leaves no trace
and a check can be retried freely. Checks stop at the first failure; for a
chat's member list that is the first unknown id in input order.
"""

from messenger.data_models.chat import Chat, ChatDatabase
from messenger.data_models.message import Message
from messenger.data_models.user import User, UserDatabase
from messenger.exceptions import (
    AuthorNotInChatError,
    DuplicateChatNameError,
    DuplicateUsernameError,
    UnknownChatError,
    UnknownUserError,
)


class IntegrityValidator:
    def __init__(self, user_db: UserDatabase, chat_db: ChatDatabase) -> None:
        self.user_db = user_db
        self.chat_db = chat_db

    async def validate_new_user(self, user: User) -> None:
        if await self.user_db.get_user_by_username(user.username) is not None:
            raise DuplicateUsernameError(user.username)

    async def validate_new_chat(self, chat: Chat) -> None:
        if await self.chat_db.get_chat_by_name(chat.name) is not None:
            raise DuplicateChatNameError(chat.name)
        for user_id in chat.users:
            if await self.user_db.get_user_by_id(user_id) is None:
                raise UnknownUserError(user_id)

    async def validate_new_message(self, message: Message) -> Chat:
        """Check the target chat and the author's membership, returning the resolved chat."""
        chat = await self.chat_db.get_chat_by_id(message.chat)
        if chat is None:
            raise UnknownChatError(message.chat)
        if message.author not in chat.users:
            raise AuthorNotInChatError(message.author, message.chat)
        return chat
