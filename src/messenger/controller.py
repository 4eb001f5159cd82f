"""
Messenger controller (Facade).

'MessengerController' is the single entry point the transport layer talks
to. It wires the repositories, the integrity validator, the write
orchestrator and the query assembler around one injected 'DocumentStore',
and adds the two request-level concerns none of those components own:

    - a per-request deadline covering every store round trip of the
      operation ('asyncio.timeout'). When it elapses the caller receives
      'OperationTimeoutError'; writes already committed stay in place.
    - severity-aware reporting. 'ConsistencyError's mean the stored data no
      longer satisfies the cross-collection invariants and are logged at
      ERROR, separately from ordinary client mistakes.

No retries happen here; callers retry at the transport layer if they want to.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from messenger.data_models.chat import Chat, ChatDatabase, ChatInput
from messenger.data_models.message import Message, MessageDatabase, MessageInput
from messenger.data_models.user import UserDatabase, UserInput
from messenger.exceptions import (
    ConsistencyError,
    MessengerError,
    OperationTimeoutError,
    PartialWriteError,
    StoreError,
)
from messenger.orchestrator import WriteOrchestrator, WriteProgress
from messenger.queries import QueryAssembler
from messenger.store.base import DocumentStore
from messenger.validator import IntegrityValidator

T = TypeVar("T")

DEFAULT_OPERATION_TIMEOUT = 5.0


class MessengerController:
    def __init__(self, store: DocumentStore, operation_timeout: float = DEFAULT_OPERATION_TIMEOUT) -> None:
        self.store = store
        self.operation_timeout = operation_timeout

        self.user_db = UserDatabase(store)
        self.chat_db = ChatDatabase(store)
        self.message_db = MessageDatabase(store)

        self.validator = IntegrityValidator(self.user_db, self.chat_db)
        self.orchestrator = WriteOrchestrator(self.user_db, self.chat_db, self.message_db, self.validator)
        self.queries = QueryAssembler(self.user_db, self.chat_db, self.message_db)

    async def add_user(self, user_input: UserInput) -> str:
        progress = WriteProgress("add_user")
        return await self._write(progress, lambda: self.orchestrator.add_user(user_input, progress))

    async def add_chat(self, chat_input: ChatInput) -> str:
        progress = WriteProgress("add_chat")
        return await self._write(progress, lambda: self.orchestrator.add_chat(chat_input, progress))

    async def add_message(self, message_input: MessageInput) -> str:
        progress = WriteProgress("add_message")
        return await self._write(progress, lambda: self.orchestrator.add_message(message_input, progress))

    async def get_chats(self, user_id: str) -> list[Chat]:
        return await self._read("get_chats", lambda: self.queries.get_chats(user_id))

    async def get_messages(self, chat_id: str) -> list[Message]:
        return await self._read("get_messages", lambda: self.queries.get_messages(chat_id))

    async def _write(self, progress: WriteProgress, write: Callable[[], Awaitable[str]]) -> str:
        try:
            async with asyncio.timeout(self.operation_timeout):
                return await write()
        except TimeoutError as exc:
            progress.fail("timed out")
            error = OperationTimeoutError(
                progress.operation,
                self.operation_timeout,
                str(progress.failed_in),
                progress.committed,
            )
            self._report(progress.operation, error)
            raise error from exc
        except MessengerError as exc:
            self._report(progress.operation, exc)
            raise

    async def _read(self, operation: str, read: Callable[[], Awaitable[T]]) -> T:
        try:
            async with asyncio.timeout(self.operation_timeout):
                return await read()
        except TimeoutError as exc:
            error = OperationTimeoutError(operation, self.operation_timeout, "reading")
            self._report(operation, error)
            raise error from exc
        except MessengerError as exc:
            self._report(operation, exc)
            raise

    @staticmethod
    def _report(operation: str, error: MessengerError) -> None:
        if isinstance(error, PartialWriteError):
            logger.error(
                f"{operation}: partial write, failed step {error.failed_step!r}, "
                f"committed {error.committed} left in place: {error.cause}"
            )
        elif isinstance(error, ConsistencyError):
            logger.error(f"{operation}: consistency violation: {error.message}")
        elif isinstance(error, OperationTimeoutError):
            logger.warning(f"{operation}: {error.message}; committed {error.committed}")
        elif isinstance(error, StoreError):
            logger.warning(f"{operation}: store failure: {error.message}")
        else:
            logger.info(f"{operation}: rejected: {error.message}")
