"""
Typed error taxonomy.

Every failure raised by the core derives from 'MessengerError' so the
transport layer can perform a single, total mapping to HTTP status codes
(see 'messenger.api.errors'). The hierarchy has three branches that matter
to callers:

    'ReferenceCheckError' - the request itself is invalid (duplicate names,
                            unknown ids, author outside the chat). Nothing
                            was written.
    'StoreError'          - the document store failed or the per-request
                            deadline elapsed.
    'ConsistencyError'    - the stored data no longer satisfies the
                            cross-collection invariants, either discovered on
                            read ('DanglingReferenceError') or caused by an
                            interrupted multi-step write ('PartialWriteError').
                            These are operator problems, not client problems.
"""

from collections.abc import Sequence


class MessengerError(Exception):
    """Base class for all errors raised by the messenger core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DecodeError(MessengerError):
    """The request body could not be decoded into the operation's input shape."""


class ReferenceCheckError(MessengerError):
    """Base class for validation, not-found and duplicate failures."""


class DuplicateUsernameError(ReferenceCheckError):
    def __init__(self, username: str) -> None:
        super().__init__("user with this username already exists")
        self.username = username


class DuplicateChatNameError(ReferenceCheckError):
    def __init__(self, name: str) -> None:
        super().__init__("chat with this name already exists")
        self.name = name


class UnknownUserError(ReferenceCheckError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"user with id = {user_id} does not exist")
        self.user_id = user_id


class UnknownChatError(ReferenceCheckError):
    def __init__(self, chat_id: str) -> None:
        super().__init__(f"chat with id = {chat_id} does not exist")
        self.chat_id = chat_id


class AuthorNotInChatError(ReferenceCheckError):
    def __init__(self, author_id: str, chat_id: str) -> None:
        super().__init__(f"author {author_id} is not in the chat {chat_id}")
        self.author_id = author_id
        self.chat_id = chat_id


class StoreError(MessengerError):
    """A call to the underlying document store failed."""


class OperationTimeoutError(StoreError):
    """
    The per-request deadline elapsed before the operation finished.

    Writes committed before the deadline are not undone; 'state' and
    'committed' describe how far the operation got.
    """

    def __init__(self, operation: str, timeout: float, state: str, committed: Sequence[str] = ()) -> None:
        super().__init__(f"{operation} timed out after {timeout:g}s in state '{state}'")
        self.operation = operation
        self.timeout = timeout
        self.state = state
        self.committed = list(committed)


class ConsistencyError(MessengerError):
    """Base class for violations of the cross-collection invariants."""


class DanglingReferenceError(ConsistencyError):
    """A stored id failed to resolve while assembling a read result."""

    def __init__(self, collection: str, entity_id: str, referenced_from: str) -> None:
        super().__init__(f"{collection}/{entity_id} referenced from {referenced_from} does not exist")
        self.collection = collection
        self.entity_id = entity_id
        self.referenced_from = referenced_from


class PartialWriteError(ConsistencyError):
    """
    A later step of a multi-step write failed after earlier steps committed.

    'committed' lists the writes that are durable and were not rolled back,
    in the order they were applied. 'failed_step' names the write that did
    not happen; every write after it was never attempted.
    """

    def __init__(
        self,
        operation: str,
        failed_step: str,
        committed: Sequence[str],
        cause: BaseException | None = None,
    ) -> None:
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            f"{operation} failed at step '{failed_step}'{reason}; already committed: {', '.join(committed) or 'nothing'}"
        )
        self.operation = operation
        self.failed_step = failed_step
        self.committed = list(committed)
        self.cause = cause
