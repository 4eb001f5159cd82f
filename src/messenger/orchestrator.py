"""
Write orchestrator: insert the entity, then backfill references.

The store has no multi-document transactions, so each mutation is a short
sequence of independent writes:

    add_user    - insert the user.
    add_chat    - insert the chat, then push its id onto every member's
                  'chats', one update per member in input order.
    add_message - insert the message, then push its id onto the chat's
                  'messages' and set 'last_message_at' in one update.

Validation always completes before the first write. The primary insert is
authoritative; back-reference updates are follow-ups. If a follow-up fails,
nothing is rolled back: 'PartialWriteError' reports which step failed and
which writes are already durable, and reconciliation is left to an operator.

Each call walks the request-scoped state machine in 'WriteProgress':

    received -> validated -> primary_inserted -> back_references_updated -> completed

with 'failed' reachable from any state. The progress object is owned by the
caller so it can still be inspected when the request is cancelled midway.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from messenger.data_models.chat import CHATS_COLLECTION, Chat, ChatDatabase, ChatInput
from messenger.data_models.message import MESSAGES_COLLECTION, Message, MessageDatabase, MessageInput
from messenger.data_models.user import USERS_COLLECTION, User, UserDatabase, UserInput
from messenger.exceptions import PartialWriteError, StoreError
from messenger.utils.time import get_current_timestamp
from messenger.validator import IntegrityValidator


class WriteState(StrEnum):
    RECEIVED = "received"
    VALIDATED = "validated"
    PRIMARY_INSERTED = "primary_inserted"
    BACK_REFERENCES_UPDATED = "back_references_updated"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class WriteProgress:
    """
    Lifecycle of a single mutating request.

    Attributes:
        operation: Name of the operation, e.g. 'add_chat'.
        state: Current state.
        entity_id: Id of the primary entity once it is inserted.
        committed: Durable writes in the order they were applied, as 'collection/id' descriptions.
        failed_in: State the operation was in when it failed.
        failure: Reason for the failure.
    """

    operation: str
    state: WriteState = WriteState.RECEIVED
    entity_id: str | None = None
    committed: list[str] = field(default_factory=list)
    failed_in: WriteState | None = None
    failure: str | None = None

    def advance(self, state: WriteState) -> None:
        self.state = state

    def commit(self, description: str) -> None:
        self.committed.append(description)

    def fail(self, reason: str) -> None:
        if self.state is WriteState.FAILED:
            return
        self.failed_in = self.state
        self.failure = reason
        self.state = WriteState.FAILED

    @contextmanager
    def track(self) -> Iterator["WriteProgress"]:
        try:
            yield self
        except Exception as exc:
            self.fail(str(exc))
            raise


class WriteOrchestrator:
    def __init__(
        self,
        user_db: UserDatabase,
        chat_db: ChatDatabase,
        message_db: MessageDatabase,
        validator: IntegrityValidator,
    ) -> None:
        self.user_db = user_db
        self.chat_db = chat_db
        self.message_db = message_db
        self.validator = validator

    async def add_user(self, user_input: UserInput, progress: WriteProgress | None = None) -> str:
        progress = progress or WriteProgress("add_user")
        with progress.track():
            user = User(username=user_input.username, chats=[], created_at=get_current_timestamp())

            await self.validator.validate_new_user(user)
            progress.advance(WriteState.VALIDATED)

            user_id = await self.user_db.create_user(user)
            progress.entity_id = user_id
            progress.commit(f"{USERS_COLLECTION}/{user_id}")
            progress.advance(WriteState.PRIMARY_INSERTED)

            progress.advance(WriteState.COMPLETED)
            logger.info(f"Created user {user_id} ({user.username!r})")
            return user_id

    async def add_chat(self, chat_input: ChatInput, progress: WriteProgress | None = None) -> str:
        progress = progress or WriteProgress("add_chat")
        with progress.track():
            now = get_current_timestamp()
            chat = Chat(
                name=chat_input.name,
                users=chat_input.users,
                messages=[],
                created_at=now,
                last_message_at=now,
            )

            await self.validator.validate_new_chat(chat)
            progress.advance(WriteState.VALIDATED)

            chat_id = await self.chat_db.create_chat(chat)
            progress.entity_id = chat_id
            progress.commit(f"{CHATS_COLLECTION}/{chat_id}")
            progress.advance(WriteState.PRIMARY_INSERTED)

            for user_id in chat.users:
                step = f"push {CHATS_COLLECTION}/{chat_id} onto {USERS_COLLECTION}/{user_id}.chats"
                try:
                    linked = await self.user_db.add_chat(user_id, chat_id)
                except StoreError as exc:
                    raise PartialWriteError(progress.operation, step, progress.committed, cause=exc) from exc
                if not linked:
                    raise PartialWriteError(
                        progress.operation, step, progress.committed, cause=LookupError("no document matched")
                    )
                progress.commit(f"{USERS_COLLECTION}/{user_id}.chats")
            progress.advance(WriteState.BACK_REFERENCES_UPDATED)

            progress.advance(WriteState.COMPLETED)
            logger.info(f"Created chat {chat_id} ({chat.name!r}) with {len(chat.users)} users")
            return chat_id

    async def add_message(self, message_input: MessageInput, progress: WriteProgress | None = None) -> str:
        progress = progress or WriteProgress("add_message")
        with progress.track():
            message = Message(
                chat=message_input.chat,
                author=message_input.author,
                text=message_input.text,
                created_at=get_current_timestamp(),
            )

            await self.validator.validate_new_message(message)
            progress.advance(WriteState.VALIDATED)

            message_id = await self.message_db.create_message(message)
            progress.entity_id = message_id
            progress.commit(f"{MESSAGES_COLLECTION}/{message_id}")
            progress.advance(WriteState.PRIMARY_INSERTED)

            step = f"push {MESSAGES_COLLECTION}/{message_id} onto {CHATS_COLLECTION}/{message.chat}.messages"
            try:
                linked = await self.chat_db.add_message(message.chat, message_id, message.created_at)
            except StoreError as exc:
                raise PartialWriteError(progress.operation, step, progress.committed, cause=exc) from exc
            if not linked:
                raise PartialWriteError(progress.operation, step, progress.committed, cause=LookupError("no document matched"))
            progress.commit(f"{CHATS_COLLECTION}/{message.chat}.messages")
            progress.advance(WriteState.BACK_REFERENCES_UPDATED)

            progress.advance(WriteState.COMPLETED)
            logger.debug(f"Created message {message_id} in chat {message.chat}")
            return message_id
